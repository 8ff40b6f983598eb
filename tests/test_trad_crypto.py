# tests/test_trad_crypto.py
"""
    Tests for AES-256-GCM / ChaCha20-Poly1305 encryption & decryption and Argon2id key derivation.
    Focus: Correctness of encryption & decryption flow and tamper detection.
"""

import pytest
from pqenvelope.core.trad_crypto import (
    AES_256_GCM,
    CHACHA20_POLY1305,
    generate_iv,
    generate_session_key,
    derive_key_argon2id,
    hkdf_sha256,
    zeroize
)
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    KeyDerivationFailure
)
from pqenvelope.core.constants import (
    AEAD_IV_LEN,
    AEAD_TAG_LEN,
    ARGON2_OUTPUT_LEN,
    ARGON2_SALT_LEN
)


@pytest.mark.parametrize("aead", [AES_256_GCM, CHACHA20_POLY1305])
def test_aead_encrypt_decrypt(aead):
    data = b"Hello, World!"
    key = bytes(generate_session_key())
    iv = generate_iv()

    assert len(iv) == AEAD_IV_LEN, "IV length does not match constant length"

    ciphertext = aead.encrypt(key, iv, data)
    assert ciphertext != data, "Ciphertext should differ from plaintext"
    assert len(ciphertext) == len(data) + AEAD_TAG_LEN, "Ciphertext must carry a 16-byte tag"

    plaintext = aead.decrypt(key, iv, ciphertext)
    assert plaintext == data, "Decrypted plaintext does not match original"

    # Tampering test: Modify ciphertext and expect decryption failure
    tampered_ciphertext = bytearray(ciphertext)
    tampered_ciphertext[-1] ^= 0xFF

    with pytest.raises(AuthenticationFailure):
        aead.decrypt(key, iv, bytes(tampered_ciphertext))


@pytest.mark.parametrize("aead", [AES_256_GCM, CHACHA20_POLY1305])
def test_aead_associated_data_is_bound(aead):
    key = bytes(generate_session_key())
    iv = generate_iv()

    ciphertext = aead.encrypt(key, iv, b"chunk", b"aad-1")
    assert aead.decrypt(key, iv, ciphertext, b"aad-1") == b"chunk"

    with pytest.raises(AuthenticationFailure):
        aead.decrypt(key, iv, ciphertext, b"aad-2")


@pytest.mark.parametrize("aead", [AES_256_GCM, CHACHA20_POLY1305])
def test_aead_short_ciphertext_fails(aead):
    key = bytes(generate_session_key())

    with pytest.raises(AuthenticationFailure):
        aead.decrypt(key, generate_iv(), b"\x00" * (AEAD_TAG_LEN - 1))


def test_aead_rejects_bad_key_or_iv():
    with pytest.raises(ValueError):
        AES_256_GCM.encrypt(b"\x00" * 16, generate_iv(), b"data")

    with pytest.raises(ValueError):
        AES_256_GCM.encrypt(bytes(generate_session_key()), b"\x00" * 8, b"data")


def test_argon2id_derivation(fast_kdf):
    password = b"Password123"

    key, salt = fast_kdf.derive(password)
    assert key != salt, "Derived key should not equal derived salt"
    assert key != password, "Derived key should not match plaintext password"
    assert len(key) == ARGON2_OUTPUT_LEN, "key length does not match constant length"
    assert len(salt) == ARGON2_SALT_LEN, "salt length does not match constant length"

    again, _ = fast_kdf.derive(password, salt)
    assert again == key, "Argon2id must be deterministic for the same password and salt"

    other, _ = fast_kdf.derive(b"Password124", salt)
    assert other != key, "Different passwords must derive different keys"


def test_argon2id_str_and_bytes_password_agree(fast_kdf):
    key_str, salt = fast_kdf.derive("pässword")
    key_bytes, _ = fast_kdf.derive("pässword".encode("utf-8"), salt)

    assert key_str == key_bytes, "str passwords must be UTF-8 encoded before derivation"


def test_argon2id_bad_salt_raises():
    with pytest.raises(KeyDerivationFailure):
        derive_key_argon2id(b"password", salt = b"short")


def test_hkdf_binds_info():
    secret = bytes(generate_session_key())

    assert hkdf_sha256(secret, b"a") != hkdf_sha256(secret, b"b"), "HKDF outputs must differ per info"
    assert hkdf_sha256(secret, b"a") == hkdf_sha256(secret, b"a"), "HKDF must be deterministic"


def test_zeroize():
    buffer = generate_session_key()
    zeroize(buffer)

    assert buffer == bytearray(len(buffer)), "zeroize must clear every byte"
