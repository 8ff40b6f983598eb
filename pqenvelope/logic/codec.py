"""
    logic/codec.py
    -----------
    Byte layout shared by every AEAD-protected payload: IV (12 bytes) || ciphertext || tag.

    pack / unpack carry no cryptographic logic. seal / open_sealed pair a fresh
    IV with one AEAD call so every envelope type follows the same IV discipline.
"""

from pqenvelope.core.exceptions import MalformedEnvelope
from pqenvelope.core.trad_crypto import generate_iv
from pqenvelope.core.constants import AEAD_IV_LEN


def encode_plaintext(plaintext) -> bytes:
    # text is always UTF-8 on the wire
    if isinstance(plaintext, str):
        return plaintext.encode("utf-8")
    return bytes(plaintext)


def decode_plaintext(data: bytes, encoding = "utf-8"):
    """
    Inverse of encode_plaintext: returns str when `encoding` is set, raw bytes when it is None.

    Raises:
        MalformedEnvelope: the authenticated plaintext is not valid `encoding` text.
    """
    if encoding is None:
        return data

    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise MalformedEnvelope(f"Plaintext is not valid {encoding} text, decrypt with encoding=None for raw bytes") from e


def pack(iv: bytes, ciphertext: bytes) -> bytes:
    if len(iv) != AEAD_IV_LEN:
        raise ValueError(f"IV must be exactly {AEAD_IV_LEN} bytes, got {len(iv)}")

    return bytes(iv) + bytes(ciphertext)


def unpack(buffer: bytes) -> tuple[bytes, bytes]:
    """
    Split a packed payload into (iv, ciphertext).

    Raises:
        MalformedEnvelope: buffer is shorter than the IV.
    """
    if len(buffer) < AEAD_IV_LEN:
        raise MalformedEnvelope(f"Packed payload too short to contain an IV ({len(buffer)} bytes)")

    buffer = bytes(buffer)
    return buffer[:AEAD_IV_LEN], buffer[AEAD_IV_LEN:]


def seal(aead, key: bytes, plaintext: bytes, aad: bytes = None) -> bytes:
    """Encrypt under a fresh random IV and return the packed payload."""
    iv = generate_iv()
    return pack(iv, aead.encrypt(key, iv, plaintext, aad))


def open_sealed(aead, key: bytes, packed: bytes, aad: bytes = None) -> bytes:
    iv, ciphertext = unpack(packed)
    return aead.decrypt(key, iv, ciphertext, aad)
