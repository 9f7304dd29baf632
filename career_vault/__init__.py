"""Career Vault — Field-level encryption for career documents.

Personal fields (cover letter content, company and position names, job
descriptions, resume text, target job) are encrypted with AES-256-GCM
before they are persisted, under a key derived by scrypt from the process
secret and a per-value random salt.

Security Note (Threat Model):
    Derived keys are cached in process memory for up to the cache TTL.
    A memory dump of the application process during that window could
    expose them. This is an accepted limitation.
"""

from .version import __version__
from .config import CryptoConfig, generate_secret
from .envelope import Envelope, is_encrypted, pack, unpack
from .exceptions import (
    VaultError,
    ConfigurationError,
    EncryptionError,
    DecryptionError,
    MalformedEnvelopeError,
)
from .fields import (
    FieldKind,
    EntityFields,
    COVER_LETTER,
    RESUME,
    PROFILE,
    get_entity,
)
from .keycache import KeyCache
from .encryptor import FieldEncryptor
from .migration import encrypt_legacy_rows

__all__ = [
    "__version__",
    "CryptoConfig",
    "generate_secret",
    "Envelope",
    "is_encrypted",
    "pack",
    "unpack",
    "VaultError",
    "ConfigurationError",
    "EncryptionError",
    "DecryptionError",
    "MalformedEnvelopeError",
    "FieldKind",
    "EntityFields",
    "COVER_LETTER",
    "RESUME",
    "PROFILE",
    "get_entity",
    "KeyCache",
    "FieldEncryptor",
    "encrypt_legacy_rows",
]
