"""
Tests for the envelope codec.

Tests cover:
- Marker detection on plaintext, tokens, empty and non-string values
- Packing layout (marker + standard base64, fixed header order)
- Rejection of malformed tokens
"""
import base64

import pytest

from career_vault.envelope import (
    HEADER_SIZE,
    MARKER,
    Envelope,
    is_encrypted,
    pack,
    unpack,
)
from career_vault.exceptions import DecryptionError, MalformedEnvelopeError

SALT = bytes(range(32))
IV = b"\x01" * 16
TAG = b"\x02" * 16


class TestIsEncrypted:
    """Tests for marker detection."""

    def test_marker_prefixed(self):
        assert is_encrypted("ENC:anything") is True
        assert is_encrypted("ENC:") is True

    def test_plain_text(self):
        assert is_encrypted("plain text") is False
        assert is_encrypted("삼성전자") is False

    def test_empty_string(self):
        assert is_encrypted("") is False

    def test_none_and_non_strings(self):
        """Non-string input never raises."""
        assert is_encrypted(None) is False
        assert is_encrypted(5) is False
        assert is_encrypted(b"ENC:abc") is False

    def test_marker_is_case_sensitive(self):
        assert is_encrypted("enc:abc") is False
        assert is_encrypted(" ENC:abc") is False


class TestPack:
    """Tests for envelope packing."""

    def test_layout(self):
        token = pack(SALT, IV, TAG, b"cipher")
        assert token.startswith(MARKER)
        raw = base64.b64decode(token[len(MARKER):])
        assert raw == SALT + IV + TAG + b"cipher"

    def test_standard_base64_alphabet(self):
        """No URL-safe substitution, standard padding."""
        token = pack(b"\xff" * 32, b"\xfb" * 16, b"\xfe" * 16, b"\xff")
        body = token[len(MARKER):]
        assert "-" not in body and "_" not in body
        assert "+" in body or "/" in body
        assert len(body) % 4 == 0

    def test_empty_ciphertext_allowed(self):
        token = pack(SALT, IV, TAG, b"")
        assert len(base64.b64decode(token[len(MARKER):])) == HEADER_SIZE

    @pytest.mark.parametrize("salt, iv, tag", [
        (SALT[:31], IV, TAG),
        (SALT, IV + b"\x00", TAG),
        (SALT, IV, TAG[:8]),
    ])
    def test_wrong_header_lengths(self, salt, iv, tag):
        with pytest.raises(ValueError):
            pack(salt, iv, tag, b"x")


class TestUnpack:
    """Tests for envelope unpacking."""

    def test_components_recovered(self):
        env = unpack(pack(SALT, IV, TAG, b"payload"))
        assert isinstance(env, Envelope)
        assert env.salt == SALT
        assert env.iv == IV
        assert env.auth_tag == TAG
        assert env.ciphertext == b"payload"

    def test_missing_marker(self):
        with pytest.raises(MalformedEnvelopeError):
            unpack(base64.b64encode(SALT + IV + TAG).decode())

    def test_invalid_base64(self):
        with pytest.raises(MalformedEnvelopeError):
            unpack("ENC:not*base64!")

    def test_non_ascii_payload(self):
        with pytest.raises(MalformedEnvelopeError):
            unpack("ENC:삼성전자")

    def test_too_short(self):
        short = base64.b64encode(b"\x00" * (HEADER_SIZE - 1)).decode()
        with pytest.raises(MalformedEnvelopeError) as exc_info:
            unpack(MARKER + short)
        assert "too short" in str(exc_info.value)

    def test_malformed_is_a_decryption_error(self):
        with pytest.raises(DecryptionError):
            unpack("ENC:")
