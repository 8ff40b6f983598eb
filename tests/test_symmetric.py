# tests/test_symmetric.py
"""
Tests for password-only envelopes (Argon2id + AEAD).
"""

import pytest
from pqenvelope.logic.symmetric import (
    SymmetricEnvelope,
    derive_key_from_password,
    encrypt_symmetric,
    decrypt_symmetric
)
from pqenvelope.core.trad_crypto import generate_salt
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    MalformedEnvelope
)


@pytest.mark.parametrize("plaintext", ["", "Hello, World!", "ü" * 5000])
def test_symmetric_round_trip(fast_kdf, plaintext):
    envelope = encrypt_symmetric(plaintext, "correct horse", kdf = fast_kdf)

    assert len(envelope.salt) == 16, "Salt must be 16 bytes"
    assert decrypt_symmetric(envelope, "correct horse", kdf = fast_kdf) == plaintext, "Round trip mismatch"


def test_symmetric_wrong_password(fast_kdf):
    envelope = encrypt_symmetric("secret", "correct horse", kdf = fast_kdf)

    with pytest.raises(AuthenticationFailure):
        decrypt_symmetric(envelope, "battery staple", kdf = fast_kdf)


def test_symmetric_is_randomized(fast_kdf):
    """Fresh salt and IV per call."""
    a = encrypt_symmetric("same", "pw", kdf = fast_kdf)
    b = encrypt_symmetric("same", "pw", kdf = fast_kdf)

    assert a.salt != b.salt, "Salts must differ"
    assert a.encrypted_data != b.encrypted_data, "Payloads must differ"


def test_symmetric_supplied_salt_is_used(fast_kdf):
    salt = generate_salt()
    envelope = encrypt_symmetric("data", "pw", salt = salt, kdf = fast_kdf)

    assert envelope.salt == salt, "Caller-supplied salt must be stored in the envelope"
    assert decrypt_symmetric(envelope, "pw", kdf = fast_kdf) == "data"


def test_symmetric_tampered_salt(fast_kdf, flip_byte):
    envelope = encrypt_symmetric("secret", "pw", kdf = fast_kdf)
    tampered = SymmetricEnvelope(envelope.encrypted_data, flip_byte(envelope.salt, 0))

    with pytest.raises(AuthenticationFailure):
        decrypt_symmetric(tampered, "pw", kdf = fast_kdf)


def test_symmetric_tampered_payload(fast_kdf, flip_byte):
    envelope = encrypt_symmetric("secret", "pw", kdf = fast_kdf)
    tampered = SymmetricEnvelope(flip_byte(envelope.encrypted_data, -1), envelope.salt)

    with pytest.raises(AuthenticationFailure):
        decrypt_symmetric(tampered, "pw", kdf = fast_kdf)


def test_symmetric_malformed_salt(fast_kdf):
    envelope = encrypt_symmetric("secret", "pw", kdf = fast_kdf)

    with pytest.raises(MalformedEnvelope):
        decrypt_symmetric(SymmetricEnvelope(envelope.encrypted_data, envelope.salt[:8]), "pw", kdf = fast_kdf)

    with pytest.raises(MalformedEnvelope):
        encrypt_symmetric("secret", "pw", salt = b"short", kdf = fast_kdf)


def test_derive_key_from_password(fast_kdf):
    derived = derive_key_from_password("pw", kdf = fast_kdf)
    again = derive_key_from_password("pw", derived.salt, kdf = fast_kdf)

    assert len(derived.key) == 32, "Derived key must be 32 bytes"
    assert derived.key == again.key, "Same password and salt must derive the same key"
    assert derived.key.hex() not in repr(derived), "repr must not leak the key"


def test_symmetric_raw_bytes(fast_kdf):
    data = bytes(range(256))
    envelope = encrypt_symmetric(data, "pw", kdf = fast_kdf)

    assert decrypt_symmetric(envelope, "pw", kdf = fast_kdf, encoding = None) == data
