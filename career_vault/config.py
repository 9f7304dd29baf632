"""
Vault Configuration — Secret loading and validated settings.

Reads the encryption settings from environment variables:
    ENCRYPTION_SECRET = <high-entropy string>
    ENCRYPTION_KEY_CACHE_SIZE = <integer, default 100>
    ENCRYPTION_KEY_CACHE_TTL = <seconds, default 300>
    ENCRYPTION_SCRYPT_N = <power of two, default 16384>

Security Note:
    Never log the secret. It is held as a ``SecretStr`` so it does not
    show up in ``repr()`` or validation errors.
"""
import os
import secrets
import logging

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from .exceptions import ConfigurationError

logger = logging.getLogger("career_vault")

SECRET_ENV = "ENCRYPTION_SECRET"


def get_secret() -> str:
    """Read the encryption secret from the ENCRYPTION_SECRET env var.

    Raises:
        ConfigurationError: If the variable is not set or empty.
    """
    secret = os.environ.get(SECRET_ENV, "")
    if not secret:
        raise ConfigurationError(
            f"{SECRET_ENV} environment variable is not set"
        )
    return secret


def generate_secret() -> str:
    """Generate a random secret suitable for ENCRYPTION_SECRET.

    This is a utility for operators provisioning a new deployment.
    """
    return secrets.token_urlsafe(48)


class CryptoConfig(BaseModel):
    """Validated field-encryption configuration."""

    secret: SecretStr
    cache_max_size: int = Field(default=100, ge=1, le=100_000)
    cache_ttl: float = Field(default=300.0, gt=0)
    scrypt_n: int = Field(default=16384)
    scrypt_r: int = Field(default=8, ge=1)
    scrypt_p: int = Field(default=1, ge=1)

    model_config = {"frozen": True}

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("secret must not be empty")
        return v

    @field_validator("scrypt_n")
    @classmethod
    def validate_scrypt_n(cls, v: int) -> int:
        """scrypt requires a cost parameter that is a power of two."""
        if v < 2 or v & (v - 1):
            raise ValueError(f"scrypt_n must be a power of two > 1, got {v}")
        return v

    @property
    def secret_bytes(self) -> bytes:
        return self.secret.get_secret_value().encode("utf-8")

    @classmethod
    def from_env(cls) -> "CryptoConfig":
        """Create CryptoConfig by loading values from environment.

        Raises:
            ConfigurationError: If ENCRYPTION_SECRET is missing or empty,
                or an override is malformed or out of range.
        """
        params = {"secret": get_secret()}
        overrides = {
            "ENCRYPTION_KEY_CACHE_SIZE": ("cache_max_size", int),
            "ENCRYPTION_KEY_CACHE_TTL": ("cache_ttl", float),
            "ENCRYPTION_SCRYPT_N": ("scrypt_n", int),
        }
        try:
            for name, (field, cast) in overrides.items():
                raw = os.environ.get(name)
                if raw:
                    params[field] = cast(raw)
            config = cls(**params)
        except (ValueError, ValidationError) as err:
            raise ConfigurationError(
                f"Invalid encryption configuration: {err}"
            ) from err
        logger.debug(
            "Loaded encryption config (cache_max_size=%d, cache_ttl=%s)",
            config.cache_max_size, config.cache_ttl,
        )
        return config
