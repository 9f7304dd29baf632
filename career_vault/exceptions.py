"""Career Vault exceptions."""


class VaultError(Exception):
    """Base class for all field encryption errors."""


class ConfigurationError(VaultError):
    """The encryption secret is missing or empty."""


class EncryptionError(VaultError):
    """Key derivation or cipher execution failed while encrypting."""


class DecryptionError(VaultError):
    """Authentication failed, or the stored value could not be decrypted."""


class MalformedEnvelopeError(DecryptionError):
    """Value carries the marker but is not a structurally valid envelope."""
