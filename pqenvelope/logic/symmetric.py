"""
    logic/symmetric.py
    -----------
    Password-only encryption: Argon2id derives the AEAD key, no KEM involved.

    Anyone who knows the password can decrypt; the salt is stored next to the
    ciphertext and is not secret.
"""

from dataclasses import dataclass
from pqenvelope.core.exceptions import MalformedEnvelope
from pqenvelope.core.trad_crypto import (
    ARGON2ID,
    AES_256_GCM
)
from pqenvelope.logic.codec import (
    encode_plaintext,
    decode_plaintext,
    seal,
    open_sealed
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedKey:
    key: bytes
    salt: bytes

    def __repr__(self) -> str:
        return f"DerivedKey(salt={self.salt.hex()})"


@dataclass(frozen=True)
class SymmetricEnvelope:
    encrypted_data: bytes
    salt: bytes

    def __repr__(self) -> str:
        return f"SymmetricEnvelope(data_len={len(self.encrypted_data)}, salt={self.salt.hex()})"


def check_salt(salt: bytes, kdf) -> None:
    if len(salt) != kdf.salt_len:
        raise MalformedEnvelope(f"Salt must be {kdf.salt_len} bytes, got {len(salt)}")


def derive_key_from_password(password, salt: bytes = None, *, kdf = ARGON2ID) -> DerivedKey:
    """
    Derive an AEAD key from a password.

    A random salt is generated when none is given; keep the returned salt to
    re-derive the same key later.
    """
    if salt is not None:
        check_salt(salt, kdf)

    key, salt = kdf.derive(password, salt)
    return DerivedKey(key=key, salt=salt)


def encrypt_symmetric(plaintext, password, salt: bytes = None, *, kdf = ARGON2ID, aead = AES_256_GCM) -> SymmetricEnvelope:
    """
    Encrypts plaintext under a password-derived key.

    Args:
        plaintext: str (UTF-8 encoded) or bytes.
        password: str or bytes.
        salt: Optional 16-byte salt; generated when omitted.

    Returns:
        SymmetricEnvelope holding the packed payload and the salt actually used.
    """
    derived = derive_key_from_password(password, salt, kdf = kdf)
    salt = derived.salt

    encrypted_data = seal(aead, derived.key, encode_plaintext(plaintext))
    del derived

    logger.debug("Encrypted symmetric payload (%d bytes)", len(encrypted_data))

    return SymmetricEnvelope(encrypted_data=encrypted_data, salt=salt)


def decrypt_symmetric(envelope: SymmetricEnvelope, password, *, kdf = ARGON2ID, aead = AES_256_GCM, encoding = "utf-8"):
    """
    Re-derives the key from (password, envelope.salt) and decrypts.

    Returns:
        The plaintext as str decoded with `encoding`, or bytes when `encoding` is None.

    Raises:
        AuthenticationFailure: wrong password or tampered payload / salt.
        MalformedEnvelope: salt or payload has an impossible length.
    """
    check_salt(envelope.salt, kdf)

    derived = derive_key_from_password(password, envelope.salt, kdf = kdf)
    try:
        plaintext = open_sealed(aead, derived.key, envelope.encrypted_data)
    finally:
        del derived

    return decode_plaintext(plaintext, encoding)
