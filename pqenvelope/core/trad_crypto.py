"""
core/trad_crypto.py
-------
Provides wrappers for classical cryptographic primitives:
- SHA-256 hashing, HKDF-SHA256 expansion and HMAC-SHA256
- Argon2id key derivation (the password-KDF capability)
- AES-256-GCM and ChaCha20-Poly1305 (the AEAD capabilities)
- Secure random IVs, salts and session keys

Argon2id and ChaCha20-Poly1305 come from libsodium through PyNaCl,
AES-256-GCM and HKDF from the cryptography library. Primitive exceptions are
translated here so envelope logic only ever sees pqenvelope exceptions.
"""

from nacl import pwhash, bindings
from nacl import exceptions as nacl_exceptions
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    KeyDerivationFailure
)
from pqenvelope.core.constants import (
    AEAD_KEY_LEN,
    AEAD_IV_LEN,
    AEAD_TAG_LEN,
    AEAD_ID_AES_256_GCM,
    AEAD_ID_CHACHA20_POLY1305,
    ARGON2_ITERS,
    ARGON2_MEMORY,
    ARGON2_OUTPUT_LEN,
    ARGON2_SALT_LEN,
    SESSION_KEY_LEN
)
import hashlib
import hmac
import secrets


def sha256(data: bytes) -> bytes:
    """
    Compute a SHA-256 hash of the given data.

    Args:
        data: Input bytes to hash.

    Returns:
        A 32-byte SHA-256 digest.
    """
    h = hashlib.sha256()
    h.update(data)
    return h.digest()


def hkdf_sha256(key_material: bytes, info: bytes, salt: bytes = None, length: int = 32) -> bytes:
    """Expand `key_material` into `length` bytes bound to `info`."""
    hkdf = HKDF(algorithm=hashes.SHA256(), length=length, salt=salt, info=info)
    return hkdf.derive(bytes(key_material))


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    return hmac.new(bytes(key), data, hashlib.sha256).digest()


def generate_iv() -> bytes:
    return secrets.token_bytes(AEAD_IV_LEN)


def generate_salt() -> bytes:
    """Return a fresh random salt for Argon2id."""
    return secrets.token_bytes(ARGON2_SALT_LEN)


def generate_session_key() -> bytearray:
    # bytearray so the caller can zeroize it once the call is done
    return bytearray(secrets.token_bytes(SESSION_KEY_LEN))


def zeroize(buffer: bytearray) -> None:
    """Best-effort overwrite of a mutable secret buffer."""
    for i in range(len(buffer)):
        buffer[i] = 0


def _encode_password(password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def derive_key_argon2id(password: bytes, salt: bytes = None, output_length: int = ARGON2_OUTPUT_LEN, opslimit: int = ARGON2_ITERS, memlimit: int = ARGON2_MEMORY) -> tuple[bytes, bytes]:
    """
    Derive a symmetric key from a password using Argon2id.

    If no salt is provided, a new random salt is generated.

    Args:
        password: User-provided password (str is UTF-8 encoded).
        salt: Optional salt bytes; must be ARGON2_SALT_LEN bytes long.
        output_length: Desired length of derived key.
        opslimit: Argon2id iterations.
        memlimit: Argon2id memory in bytes.

    Returns:
        A tuple (derived_key, salt) where:
        - derived_key: The Argon2id-derived key of output_length bytes.
        - salt: The salt used for derivation.

    Raises:
        KeyDerivationFailure: libsodium rejected the parameters.
    """
    if salt is None:
        salt = generate_salt()

    try:
        key = pwhash.argon2id.kdf(
            output_length,
            _encode_password(password),
            bytes(salt),
            opslimit = opslimit,
            memlimit = memlimit
        )
    except (nacl_exceptions.CryptoError, ValueError, TypeError) as e:
        raise KeyDerivationFailure(f"Argon2id key derivation failed: {e}") from e

    return key, bytes(salt)


class Argon2idKdf:
    """
    Password-KDF capability.

    Deterministic: the same (password, salt, opslimit, memlimit) always
    yields the same key. Deliberately slow with the default parameters.
    """

    salt_len = ARGON2_SALT_LEN

    def __init__(self, opslimit: int = ARGON2_ITERS, memlimit: int = ARGON2_MEMORY, output_length: int = ARGON2_OUTPUT_LEN):
        self.opslimit = opslimit
        self.memlimit = memlimit
        self.output_length = output_length

    def derive(self, password, salt: bytes = None) -> tuple[bytes, bytes]:
        return derive_key_argon2id(
            password,
            salt = salt,
            output_length = self.output_length,
            opslimit = self.opslimit,
            memlimit = self.memlimit
        )

    def __repr__(self) -> str:
        return f"Argon2idKdf(opslimit={self.opslimit}, memlimit={self.memlimit})"


def _check_key_iv(key: bytes, iv: bytes) -> None:
    if len(key) != AEAD_KEY_LEN:
        raise ValueError(f"Key must be exactly {AEAD_KEY_LEN} bytes")
    if len(iv) != AEAD_IV_LEN:
        raise ValueError(f"IV must be exactly {AEAD_IV_LEN} bytes")


class AesGcmCipher:
    """
    AES-256-GCM AEAD capability.

    encrypt() returns ciphertext || 16-byte tag; decrypt() verifies the tag
    before returning anything.
    """

    aead_id = AEAD_ID_AES_256_GCM
    key_len = AEAD_KEY_LEN
    iv_len = AEAD_IV_LEN
    tag_len = AEAD_TAG_LEN

    def encrypt(self, key: bytes, iv: bytes, plaintext: bytes, aad: bytes = None) -> bytes:
        _check_key_iv(key, iv)
        return AESGCM(bytes(key)).encrypt(bytes(iv), bytes(plaintext), aad)

    def decrypt(self, key: bytes, iv: bytes, ciphertext: bytes, aad: bytes = None) -> bytes:
        _check_key_iv(key, iv)
        if len(ciphertext) < AEAD_TAG_LEN:
            raise AuthenticationFailure()

        try:
            return AESGCM(bytes(key)).decrypt(bytes(iv), bytes(ciphertext), aad)
        except InvalidTag as e:
            raise AuthenticationFailure() from e

    def __repr__(self) -> str:
        return "AesGcmCipher()"


class ChaCha20Poly1305Cipher:
    """
    ChaCha20-Poly1305 (IETF, 96-bit nonce) AEAD capability.

    Same contract as AesGcmCipher; useful on hosts without AES hardware.
    """

    aead_id = AEAD_ID_CHACHA20_POLY1305
    key_len = AEAD_KEY_LEN
    iv_len = AEAD_IV_LEN
    tag_len = AEAD_TAG_LEN

    def encrypt(self, key: bytes, iv: bytes, plaintext: bytes, aad: bytes = None) -> bytes:
        _check_key_iv(key, iv)
        return bindings.crypto_aead_chacha20poly1305_ietf_encrypt(bytes(plaintext), aad, bytes(iv), bytes(key))

    def decrypt(self, key: bytes, iv: bytes, ciphertext: bytes, aad: bytes = None) -> bytes:
        _check_key_iv(key, iv)
        if len(ciphertext) < AEAD_TAG_LEN:
            raise AuthenticationFailure()

        try:
            return bindings.crypto_aead_chacha20poly1305_ietf_decrypt(bytes(ciphertext), aad, bytes(iv), bytes(key))
        except nacl_exceptions.CryptoError as e:
            raise AuthenticationFailure() from e

    def __repr__(self) -> str:
        return "ChaCha20Poly1305Cipher()"


ARGON2ID = Argon2idKdf()
AES_256_GCM = AesGcmCipher()
CHACHA20_POLY1305 = ChaCha20Poly1305Cipher()

AEAD_BY_ID = {
    AEAD_ID_AES_256_GCM: AES_256_GCM,
    AEAD_ID_CHACHA20_POLY1305: CHACHA20_POLY1305,
}
