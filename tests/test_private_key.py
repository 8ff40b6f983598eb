# tests/test_private_key.py
"""
Tests for password-protected private keys.
"""

import pytest
from pqenvelope.logic.private_key import (
    PrivateKeyEnvelope,
    encrypt_private_key,
    decrypt_private_key
)
from pqenvelope.logic.message import (
    encrypt_message,
    decrypt_message
)
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    MalformedEnvelope
)


def test_private_key_round_trip(key_pair, fast_kdf):
    """A recovered private key still decrypts messages sent to its public key."""
    envelope = encrypt_private_key(key_pair.private_key, "pw", kdf = fast_kdf)

    assert len(envelope.salt) == 16, "Salt must be 16 bytes"
    assert len(envelope.iv) == 12, "IV must be 12 bytes"
    assert len(envelope.encrypted_private_key) == 3168 + 16, "Encrypted key must be key + tag"

    recovered = decrypt_private_key(envelope, "pw", kdf = fast_kdf)
    assert recovered == key_pair.private_key, "Recovered private key mismatch"

    message = encrypt_message("hi", key_pair.public_key)
    assert decrypt_message(message, recovered) == "hi"


def test_private_key_wrong_password(key_pair, fast_kdf):
    envelope = encrypt_private_key(key_pair.private_key, "pw", kdf = fast_kdf)

    with pytest.raises(AuthenticationFailure):
        decrypt_private_key(envelope, "not-pw", kdf = fast_kdf)


@pytest.mark.parametrize("field", ["encrypted_private_key", "salt", "iv"])
def test_private_key_tampered_field(key_pair, fast_kdf, flip_byte, field):
    envelope = encrypt_private_key(key_pair.private_key, "pw", kdf = fast_kdf)

    fields = {
        "encrypted_private_key": envelope.encrypted_private_key,
        "salt": envelope.salt,
        "iv": envelope.iv,
    }
    fields[field] = flip_byte(fields[field], 0)

    with pytest.raises(AuthenticationFailure):
        decrypt_private_key(PrivateKeyEnvelope(**fields), "pw", kdf = fast_kdf)


def test_private_key_malformed_iv(key_pair, fast_kdf):
    envelope = encrypt_private_key(key_pair.private_key, "pw", kdf = fast_kdf)
    malformed = PrivateKeyEnvelope(envelope.encrypted_private_key, envelope.salt, envelope.iv[:6])

    with pytest.raises(MalformedEnvelope):
        decrypt_private_key(malformed, "pw", kdf = fast_kdf)


def test_private_key_wrong_length_rejected(fast_kdf):
    with pytest.raises(ValueError):
        encrypt_private_key(b"\x00" * 32, "pw", kdf = fast_kdf)


def test_private_key_envelope_repr(key_pair, fast_kdf):
    envelope = encrypt_private_key(key_pair.private_key, "pw", kdf = fast_kdf)

    assert envelope.encrypted_private_key.hex() not in repr(envelope)
