"""
    logic/serialization.py
    -----------
    Text-safe export of byte buffers and key pairs, and human-comparable key fingerprints.
"""

from base64 import b64encode, b64decode
from pqenvelope.core.crypto import KeyPair
from pqenvelope.core.trad_crypto import sha256
from pqenvelope.core.exceptions import MalformedEnvelope
from pqenvelope.core.constants import FINGERPRINT_GROUP_LEN
import binascii
import hmac


def export_bytes(data: bytes) -> str:
    return b64encode(bytes(data)).decode()


def import_bytes(encoded: str) -> bytes:
    """
    Decodes a string produced by export_bytes.

    Raises:
        MalformedEnvelope: `encoded` is not valid base64.
    """
    try:
        return b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelope(f"Invalid base64 data: {e}") from e


def export_key_pair(key_pair: KeyPair) -> dict:
    return {
        "public_key": export_bytes(key_pair.public_key),
        "private_key": export_bytes(key_pair.private_key)
    }


def import_key_pair(encoded: dict) -> KeyPair:
    return KeyPair(
        public_key=import_bytes(encoded["public_key"]),
        private_key=import_bytes(encoded["private_key"])
    )


def create_fingerprint(key: bytes) -> str:
    """
    SHA-256 fingerprint of a key as uppercase hex, in space separated groups of 4.

    e.g. "3F2A 9C01 ..." (64 hex characters, 16 groups).
    """
    digest = sha256(bytes(key)).hex().upper()
    return " ".join(digest[i : i + FINGERPRINT_GROUP_LEN] for i in range(0, len(digest), FINGERPRINT_GROUP_LEN))


def compare_fingerprints(key_a: bytes, key_b: bytes) -> bool:
    return hmac.compare_digest(create_fingerprint(key_a), create_fingerprint(key_b))
