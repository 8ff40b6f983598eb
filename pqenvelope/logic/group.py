"""
    logic/group.py
    -----------
    Group encryption: the payload is encrypted once under a random session key,
    and the session key is wrapped independently for every recipient.

    Layout:
        encrypted_data        = IV (12) || AEAD(session_key, IV, payload)
        wrapped_keys[i]       = (kem_ciphertext_i, IV_i (12) || AEAD(shared_secret_i, IV_i, session_key))

    Recipient identity is purely positional. Entry i can only be unwrapped with
    the private key matching the i-th public key given at encryption time, so
    the recipient ordering must not change between encryption and decryption.
"""

from dataclasses import dataclass
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    RecipientIndexMismatch
)
from pqenvelope.core.crypto import MLKem, ML_KEM_1024
from pqenvelope.core.trad_crypto import (
    AES_256_GCM,
    generate_session_key,
    zeroize
)
from pqenvelope.core.constants import SESSION_KEY_LEN
from pqenvelope.logic.codec import (
    encode_plaintext,
    decode_plaintext,
    seal,
    open_sealed
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WrappedKey:
    kem_ciphertext: bytes
    wrapped_session_key: bytes


@dataclass(frozen=True)
class GroupEnvelope:
    encrypted_data: bytes
    wrapped_keys: tuple

    def __repr__(self) -> str:
        return f"GroupEnvelope(data_len={len(self.encrypted_data)}, recipients={len(self.wrapped_keys)})"


def wrap_session_key(session_key: bytes, public_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> WrappedKey:
    """Encapsulate to `public_key` and encrypt `session_key` under the resulting shared secret."""
    kem_ciphertext, shared_secret = kem.encapsulate(public_key)
    try:
        return WrappedKey(kem_ciphertext=kem_ciphertext, wrapped_session_key=seal(aead, shared_secret, session_key))
    finally:
        del shared_secret


def unwrap_session_key(wrapped: WrappedKey, private_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> bytearray:
    shared_secret = kem.decapsulate(wrapped.kem_ciphertext, private_key)
    try:
        session_key = bytearray(open_sealed(aead, shared_secret, wrapped.wrapped_session_key))
    finally:
        del shared_secret

    if len(session_key) != SESSION_KEY_LEN:
        zeroize(session_key)
        raise AuthenticationFailure()

    return session_key


def encrypt_for_group(plaintext, public_keys: list, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> GroupEnvelope:
    """
    Encrypts a message once for several recipients.

    Args:
        plaintext: str (UTF-8 encoded) or bytes.
        public_keys: Recipient ML-KEM public keys; wrapped_keys[i] belongs to public_keys[i].

    Returns:
        GroupEnvelope with one shared payload and one wrapped key per recipient.
    """
    public_keys = list(public_keys)
    if not public_keys:
        raise ValueError("Group encryption needs at least one recipient public key")

    session_key = generate_session_key()
    try:
        encrypted_data = seal(aead, session_key, encode_plaintext(plaintext))

        wrapped_keys = tuple(
            wrap_session_key(session_key, public_key, kem = kem, aead = aead)
            for public_key in public_keys
        )
    finally:
        zeroize(session_key)

    logger.debug("Encrypted group payload (%d bytes) for %d recipients", len(encrypted_data), len(wrapped_keys))

    return GroupEnvelope(encrypted_data=encrypted_data, wrapped_keys=wrapped_keys)


def decrypt_from_group(envelope: GroupEnvelope, private_key: bytes, recipient_index: int, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM, encoding = "utf-8"):
    """
    Decrypts a GroupEnvelope as recipient `recipient_index`.

    Returns:
        The plaintext as str decoded with `encoding`, or bytes when `encoding` is None.

    Raises:
        RecipientIndexMismatch: no wrapped key at `recipient_index`.
        AuthenticationFailure: private key does not belong to that index, or anything was tampered with.
    """
    if not 0 <= recipient_index < len(envelope.wrapped_keys):
        raise RecipientIndexMismatch(f"No wrapped key for recipient index {recipient_index}")

    session_key = unwrap_session_key(envelope.wrapped_keys[recipient_index], private_key, kem = kem, aead = aead)
    try:
        plaintext = open_sealed(aead, session_key, envelope.encrypted_data)
    finally:
        zeroize(session_key)

    return decode_plaintext(plaintext, encoding)
