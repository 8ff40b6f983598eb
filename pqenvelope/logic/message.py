"""
    logic/message.py
    -----------
    Single-shot message encryption for small, high-frequency payloads (chat messages).

    The ML-KEM shared secret is used directly as the AEAD key, there is no
    separate wrapping layer:

        encrypted_data = IV (12) || AEAD(shared_secret, IV, plaintext)
        kem_ciphertext = ML-KEM ciphertext (1568)

    Both buffers travel side by side, they are never concatenated.
"""

from dataclasses import dataclass
from pqenvelope.core.crypto import MLKem, ML_KEM_1024
from pqenvelope.core.trad_crypto import AES_256_GCM
from pqenvelope.logic.codec import (
    encode_plaintext,
    decode_plaintext,
    seal,
    open_sealed
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageEnvelope:
    encrypted_data: bytes
    kem_ciphertext: bytes

    def __repr__(self) -> str:
        return f"MessageEnvelope(data_len={len(self.encrypted_data)}, kem_ct_len={len(self.kem_ciphertext)})"


def encrypt_message(plaintext, public_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> MessageEnvelope:
    """
    Encrypts a message for the holder of `public_key`.

    Args:
        plaintext: str (UTF-8 encoded) or bytes.
        public_key: Recipient's ML-KEM public key.
        kem: KEM capability.
        aead: AEAD capability.

    Returns:
        MessageEnvelope with the packed payload and the KEM ciphertext.
    """
    kem_ciphertext, shared_secret = kem.encapsulate(public_key)

    encrypted_data = seal(aead, shared_secret, encode_plaintext(plaintext))
    del shared_secret

    logger.debug("Encrypted message (%d bytes payload)", len(encrypted_data))

    return MessageEnvelope(encrypted_data=encrypted_data, kem_ciphertext=kem_ciphertext)


def decrypt_message(envelope: MessageEnvelope, private_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM, encoding = "utf-8"):
    """
    Decrypts a MessageEnvelope with the recipient's private key.

    Returns:
        The plaintext as str decoded with `encoding`, or bytes when `encoding` is None.

    Raises:
        AuthenticationFailure: wrong private key, tampered payload or tampered KEM ciphertext.
        MalformedEnvelope: payload or KEM ciphertext is too short / wrong length, or not valid text for `encoding`.
    """
    shared_secret = kem.decapsulate(envelope.kem_ciphertext, private_key)
    try:
        plaintext = open_sealed(aead, shared_secret, envelope.encrypted_data)
    finally:
        del shared_secret

    return decode_plaintext(plaintext, encoding)
