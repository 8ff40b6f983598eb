# tests/conftest.py
"""
Shared fixtures: real ML-KEM-1024 key pairs and a fast Argon2id profile.
"""

import pytest
from nacl import pwhash
from pqenvelope.core.crypto import generate_key_pair
from pqenvelope.core.trad_crypto import Argon2idKdf


@pytest.fixture
def fast_kdf():
    """Argon2id at libsodium's minimum cost, so password tests stay quick."""
    return Argon2idKdf(
        opslimit = pwhash.argon2id.OPSLIMIT_MIN,
        memlimit = pwhash.argon2id.MEMLIMIT_MIN
    )


@pytest.fixture
def key_pair():
    return generate_key_pair()


@pytest.fixture
def other_key_pair():
    return generate_key_pair()


@pytest.fixture
def flip_byte():
    """Returns a helper that flips the lowest bit of data[index]."""
    def _flip(data: bytes, index: int) -> bytes:
        tampered = bytearray(data)
        tampered[index] ^= 0x01
        return bytes(tampered)
    return _flip
