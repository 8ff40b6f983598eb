# tests/test_codec.py
"""
Tests for the IV || ciphertext packing shared by all envelopes.
"""

import pytest
from pqenvelope.logic.codec import (
    encode_plaintext,
    decode_plaintext,
    pack,
    unpack,
    seal,
    open_sealed
)
from pqenvelope.core.trad_crypto import (
    AES_256_GCM,
    generate_iv,
    generate_session_key
)
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    MalformedEnvelope
)


def test_pack_unpack_layout():
    """The IV is always the first 12 bytes."""
    iv = generate_iv()
    packed = pack(iv, b"ciphertext")

    assert packed[:12] == iv, "IV must lead the packed payload"
    assert unpack(packed) == (iv, b"ciphertext"), "unpack must split at byte 12"


def test_unpack_empty_ciphertext():
    iv = generate_iv()
    assert unpack(iv) == (iv, b""), "A bare IV unpacks to an empty ciphertext"


def test_unpack_too_short():
    with pytest.raises(MalformedEnvelope):
        unpack(b"\x00" * 11)


def test_pack_bad_iv():
    with pytest.raises(ValueError):
        pack(b"\x00" * 16, b"ciphertext")


def test_encode_plaintext():
    assert encode_plaintext("héllo") == "héllo".encode("utf-8")
    assert encode_plaintext(b"raw") == b"raw"
    assert encode_plaintext(bytearray(b"raw")) == b"raw"


def test_seal_open_sealed():
    key = bytes(generate_session_key())

    packed_a = seal(AES_256_GCM, key, b"payload")
    packed_b = seal(AES_256_GCM, key, b"payload")
    assert packed_a != packed_b, "Each seal must use a fresh IV"

    assert open_sealed(AES_256_GCM, key, packed_a) == b"payload"

    with pytest.raises(AuthenticationFailure):
        open_sealed(AES_256_GCM, bytes(generate_session_key()), packed_a)


def test_decode_plaintext():
    assert decode_plaintext("héllo".encode("utf-8")) == "héllo", "Default decode must return str"
    assert decode_plaintext(b"raw", encoding = None) == b"raw", "encoding=None must return bytes"

    with pytest.raises(MalformedEnvelope):
        decode_plaintext(b"\xff")
