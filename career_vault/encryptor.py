"""
FieldEncryptor — AES-256-GCM encryption of personal record fields.

Provides the API used by the route handlers:
- ``encrypt(plaintext)`` / ``decrypt(ciphertext)`` — single values
- ``encrypt_fields(record, fields)`` / ``decrypt_fields(record, fields)``
  — shallow copies of a record with the named fields transformed
- ``encrypt_record`` / ``decrypt_record`` / ``decrypt_records`` — the same,
  driven by a registered entity field map

Values without the ``ENC:`` marker are returned unchanged by ``decrypt``,
so rows written before encryption was enabled remain readable.

Security Note:
    Never log plaintext, keys or the secret. Failures are logged with the
    error category only.
"""
import os
import logging
from typing import Any, Optional, Union
from collections.abc import Callable, Iterable, Mapping

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import CryptoConfig
from .envelope import IV_SIZE, SALT_SIZE, TAG_SIZE, is_encrypted, pack, unpack
from .exceptions import (
    ConfigurationError,
    DecryptionError,
    EncryptionError,
)
from .fields import EntityFields, get_entity
from .keycache import KeyCache

logger = logging.getLogger("career_vault")

FieldSpec = Union[EntityFields, Iterable[str]]


class FieldEncryptor:
    """Encrypts and decrypts individual string fields.

    Built once at startup from a ``CryptoConfig`` and shared by every
    request handler; it owns the key derivation cache.
    """

    def __init__(
        self,
        config: Optional[CryptoConfig] = None,
        key_cache: Optional[KeyCache] = None,
    ):
        if key_cache is None:
            if config is None:
                config = CryptoConfig.from_env()
            key_cache = KeyCache.from_config(config)
        self._keys = key_cache

    @property
    def key_cache(self) -> KeyCache:
        return self._keys

    # ------------------------------------------------------------------
    # Single values
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """Encrypt a string into an ``ENC:`` envelope.

        Empty strings and None are returned unchanged.

        Raises:
            EncryptionError: If key derivation or the cipher fails.
        """
        if not plaintext:
            return plaintext
        try:
            salt = os.urandom(SALT_SIZE)
            iv = os.urandom(IV_SIZE)
            key = self._keys.get_or_derive_key(salt)
            sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
        except Exception as err:
            logger.error("Field encryption failed: %s", type(err).__name__)
            raise EncryptionError("Failed to encrypt field") from err
        # AESGCM appends the tag to the ciphertext
        return pack(salt, iv, sealed[-TAG_SIZE:], sealed[:-TAG_SIZE])

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        """Decrypt an ``ENC:`` envelope back to its plaintext.

        Empty strings, None and values without the marker are returned
        unchanged.

        Raises:
            DecryptionError: On tampering, a wrong secret or a malformed
                envelope.
            ConfigurationError: If the secret is not configured.
        """
        if not ciphertext or not is_encrypted(ciphertext):
            return ciphertext
        try:
            envelope = unpack(ciphertext)
            key = self._keys.get_or_derive_key(envelope.salt)
            plaintext = AESGCM(key).decrypt(
                envelope.iv, envelope.ciphertext + envelope.auth_tag, None
            )
            return plaintext.decode("utf-8")
        except (DecryptionError, ConfigurationError) as err:
            logger.error("Field decryption failed: %s", type(err).__name__)
            raise
        except InvalidTag as err:
            logger.error("Field decryption failed: authentication tag mismatch")
            raise DecryptionError("Failed to decrypt field") from err
        except (ValueError, UnicodeDecodeError) as err:
            logger.error("Field decryption failed: %s", type(err).__name__)
            raise DecryptionError("Failed to decrypt field") from err

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def _transform(
        self,
        record: Mapping[str, Any],
        fields: FieldSpec,
        fn: Callable[[str], Optional[str]],
    ) -> dict:
        """Apply fn to each named field holding a non-empty string.

        Args:
            record: Source row; it is not modified.
            fields: Entity field map or iterable of field names.
            fn: Per-value transform, ``encrypt`` or ``decrypt``.

        Returns:
            Shallow copy of record with the transformed values.
        """
        result = dict(record)
        for name in fields:
            value = result.get(name)
            if isinstance(value, str) and value:
                result[name] = fn(value)
        return result

    def encrypt_fields(self, record: Mapping[str, Any], fields: FieldSpec) -> dict:
        """Return a copy of record with the named string fields encrypted.

        Fields that are absent, empty or not strings are left untouched.
        """
        return self._transform(record, fields, self.encrypt)

    def decrypt_fields(self, record: Mapping[str, Any], fields: FieldSpec) -> dict:
        """Return a copy of record with the named string fields decrypted."""
        return self._transform(record, fields, self.decrypt)

    def encrypt_record(
        self, record: Mapping[str, Any], entity: Union[EntityFields, str]
    ) -> dict:
        """Encrypt the personal fields of a row for an entity.

        Args:
            record: Row to be written.
            entity: Entity field map, or its table name.

        Returns:
            Copy of record with every encrypted-kind field sealed.

        Raises:
            KeyError: If entity names an unknown table.
            EncryptionError: If a field cannot be encrypted.
        """
        if isinstance(entity, str):
            entity = get_entity(entity)
        return self.encrypt_fields(record, entity)

    def decrypt_record(
        self, record: Mapping[str, Any], entity: Union[EntityFields, str]
    ) -> dict:
        """Decrypt the personal fields of a row read for an entity.

        Args:
            record: Row as returned by the database.
            entity: Entity field map, or its table name.

        Returns:
            Copy of record with encrypted-kind fields in plaintext. Legacy
            plaintext values pass through unchanged.

        Raises:
            KeyError: If entity names an unknown table.
            DecryptionError: If a field fails authentication or is malformed.
        """
        if isinstance(entity, str):
            entity = get_entity(entity)
        return self.decrypt_fields(record, entity)

    def decrypt_records(
        self,
        records: Iterable[Mapping[str, Any]],
        entity: Union[EntityFields, str],
    ) -> list[dict]:
        """Decrypt every row of a list query."""
        if isinstance(entity, str):
            entity = get_entity(entity)
        return [self.decrypt_fields(record, entity) for record in records]
