# tests/test_serialization.py
"""
Tests for base64 export / import and key fingerprints.
"""

import os
import re
import pytest
from pqenvelope.logic.serialization import (
    export_bytes,
    import_bytes,
    export_key_pair,
    import_key_pair,
    create_fingerprint,
    compare_fingerprints
)
from pqenvelope.core.exceptions import MalformedEnvelope


@pytest.mark.parametrize("length", [0, 1, 10000])
def test_export_import_bytes(length):
    data = os.urandom(length)
    encoded = export_bytes(data)

    assert isinstance(encoded, str), "Exported bytes must be text"
    assert import_bytes(encoded) == data, "Import must restore the exact bytes"


def test_import_bytes_rejects_garbage():
    with pytest.raises(MalformedEnvelope):
        import_bytes("not base64!!")


def test_export_import_key_pair(key_pair):
    exported = export_key_pair(key_pair)

    assert set(exported) == {"public_key", "private_key"}
    assert import_key_pair(exported) == key_pair, "Key pair must survive export / import"


def test_fingerprint_format(key_pair):
    """64 uppercase hex characters in space separated groups of four."""
    fingerprint = create_fingerprint(key_pair.public_key)

    assert re.fullmatch(r"[0-9A-F]{4}( [0-9A-F]{4}){15}", fingerprint), f"Bad fingerprint format: {fingerprint}"
    assert len(fingerprint.replace(" ", "")) == 64
    assert fingerprint == create_fingerprint(key_pair.public_key), "Fingerprint must be deterministic"


def test_fingerprint_known_value():
    # SHA-256 of the empty string
    assert create_fingerprint(b"").replace(" ", "") == "E3B0C44298FC1C149AFBF4C8996FB92427AE41E4649B934CA495991B7852B855"


def test_fingerprint_single_bit_change(key_pair, flip_byte):
    changed = flip_byte(key_pair.public_key, 100)

    assert create_fingerprint(changed) != create_fingerprint(key_pair.public_key), "One bit must change the fingerprint"
    assert not compare_fingerprints(changed, key_pair.public_key)
    assert compare_fingerprints(key_pair.public_key, bytes(key_pair.public_key))
