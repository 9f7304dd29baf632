"""
Envelope Codec — packing of salt, IV, auth tag and ciphertext into one token.

Format: ``ENC:`` + base64(salt 32B | iv 16B | auth_tag 16B | ciphertext).

Component boundaries come from the fixed header lengths; the ciphertext
takes the remainder. Values without the marker are legacy plaintext.
"""
import base64
import binascii
from typing import Any, NamedTuple

from .exceptions import MalformedEnvelopeError

MARKER = "ENC:"
SALT_SIZE = 32
IV_SIZE = 16
TAG_SIZE = 16
HEADER_SIZE = SALT_SIZE + IV_SIZE + TAG_SIZE


class Envelope(NamedTuple):
    salt: bytes
    iv: bytes
    auth_tag: bytes
    ciphertext: bytes


def is_encrypted(value: Any) -> bool:
    """Return True if value is a string carrying the envelope marker."""
    return isinstance(value, str) and value.startswith(MARKER)


def pack(salt: bytes, iv: bytes, auth_tag: bytes, ciphertext: bytes) -> str:
    """Serialize envelope components into a marker-prefixed base64 string.

    Raises:
        ValueError: If a header component has the wrong length.
    """
    for name, part, size in (
        ("salt", salt, SALT_SIZE),
        ("iv", iv, IV_SIZE),
        ("auth_tag", auth_tag, TAG_SIZE),
    ):
        if len(part) != size:
            raise ValueError(
                f"{name} must be exactly {size} bytes, got {len(part)}"
            )
    combined = salt + iv + auth_tag + ciphertext
    return MARKER + base64.b64encode(combined).decode("ascii")


def unpack(token: str) -> Envelope:
    """Split a marker-prefixed token back into its components.

    Raises:
        MalformedEnvelopeError: If the marker is missing, the payload is not
            valid base64, or it is shorter than the fixed header.
    """
    if not is_encrypted(token):
        raise MalformedEnvelopeError("Value is not an encrypted envelope")
    try:
        combined = base64.b64decode(token[len(MARKER):], validate=True)
    except (binascii.Error, ValueError) as err:
        raise MalformedEnvelopeError("Envelope is not valid base64") from err
    if len(combined) < HEADER_SIZE:
        raise MalformedEnvelopeError(
            f"Envelope too short: {len(combined)} bytes "
            f"(minimum {HEADER_SIZE})"
        )
    return Envelope(
        salt=combined[:SALT_SIZE],
        iv=combined[SALT_SIZE:SALT_SIZE + IV_SIZE],
        auth_tag=combined[SALT_SIZE + IV_SIZE:HEADER_SIZE],
        ciphertext=combined[HEADER_SIZE:],
    )
