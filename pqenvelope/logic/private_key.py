"""
    logic/private_key.py
    -----------
    Protects an ML-KEM private key at rest under a password.

    Same Argon2id + AEAD pattern as the symmetric envelope, but the IV is kept
    as its own field next to the salt:

        encrypted_private_key = AEAD(argon2id(password, salt), iv, private_key)

    The derived key and the recovered private key are never logged, and the
    private key is decrypted exactly once per call.
"""

from dataclasses import dataclass
from pqenvelope.core.exceptions import MalformedEnvelope
from pqenvelope.core.crypto import MLKem, ML_KEM_1024
from pqenvelope.core.trad_crypto import (
    ARGON2ID,
    AES_256_GCM,
    generate_iv
)
from pqenvelope.logic.symmetric import (
    check_salt,
    derive_key_from_password
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrivateKeyEnvelope:
    encrypted_private_key: bytes
    salt: bytes
    iv: bytes

    def __repr__(self) -> str:
        return f"PrivateKeyEnvelope(data_len={len(self.encrypted_private_key)}, salt={self.salt.hex()})"


def encrypt_private_key(private_key: bytes, password, *, kdf = ARGON2ID, aead = AES_256_GCM, kem: MLKem = ML_KEM_1024) -> PrivateKeyEnvelope:
    """
    Encrypts a KEM private key with a password.

    Args:
        private_key: Raw private key, exactly kem.private_key_len bytes.
        password: str or bytes.

    Returns:
        PrivateKeyEnvelope(encrypted_private_key, salt, iv); all three are needed to decrypt.
    """
    if len(private_key) != kem.private_key_len:
        raise ValueError(f"Private key must be {kem.private_key_len} bytes, got {len(private_key)}")

    derived = derive_key_from_password(password, kdf = kdf)
    salt = derived.salt

    iv = generate_iv()
    encrypted_private_key = aead.encrypt(derived.key, iv, private_key)
    del derived

    logger.debug("Protected private key under password (salt %s)", salt.hex())

    return PrivateKeyEnvelope(encrypted_private_key=encrypted_private_key, salt=salt, iv=iv)


def decrypt_private_key(envelope: PrivateKeyEnvelope, password, *, kdf = ARGON2ID, aead = AES_256_GCM) -> bytes:
    """
    Recovers the private key from a PrivateKeyEnvelope.

    Raises:
        AuthenticationFailure: wrong password or any field tampered with.
        MalformedEnvelope: salt or IV has the wrong length.
    """
    check_salt(envelope.salt, kdf)
    if len(envelope.iv) != aead.iv_len:
        raise MalformedEnvelope(f"IV must be {aead.iv_len} bytes, got {len(envelope.iv)}")

    derived = derive_key_from_password(password, envelope.salt, kdf = kdf)
    try:
        return aead.decrypt(derived.key, envelope.iv, envelope.encrypted_private_key)
    finally:
        del derived
