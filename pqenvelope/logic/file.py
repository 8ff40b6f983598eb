"""
    logic/file.py
    -----------
    Chunked file encryption for large payloads, with a compact versioned header.

    Header layout (binary, all big-endian):
    - 4 bytes: magic b'PQEF'
    - 1 byte: version (1)
    - 1 byte: aead_id (1 = AES-256-GCM, 2 = ChaCha20-Poly1305)
    - 2 bytes: len_kem_ciphertext (unsigned short)
    - N bytes: ML-KEM ciphertext (encapsulated once, to the recipient public key)
    - 4 bytes: chunk_size (plaintext bytes per chunk)
    - 4 bytes: chunk_count
    - 8 bytes: plaintext_len
    - 12 bytes: iv_base
    - 32 bytes: HMAC-SHA256 over every preceding header byte

    Body: chunk_count AEAD records (ciphertext || tag), no length prefixes. Chunk i
    holds min(chunk_size, plaintext_len - i * chunk_size) plaintext bytes, so the
    header alone locates every chunk boundary.

    Keys: the KEM shared secret is expanded with HKDF-SHA256 (salt = iv_base) into a
    chunk key and a header MAC key. Chunk i is encrypted with iv_base XOR i (in the
    last 4 bytes) and associated data index || final_flag, so reordered, dropped or
    re-flagged chunks fail authentication. Truncation is caught because the header
    (with its authenticated chunk_count and plaintext_len) no longer matches the body.
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from pqenvelope.core.exceptions import (
    AuthenticationFailure,
    MalformedEnvelope
)
from pqenvelope.core.crypto import MLKem, ML_KEM_1024
from pqenvelope.core.trad_crypto import (
    AES_256_GCM,
    AEAD_BY_ID,
    ARGON2ID,
    generate_iv,
    hkdf_sha256,
    hmac_sha256,
    zeroize
)
from pqenvelope.core.constants import (
    AEAD_IV_LEN,
    AEAD_TAG_LEN,
    FILE_MAGIC,
    FILE_VERSION,
    FILE_DEFAULT_CHUNK_SIZE,
    FILE_HEADER_MAC_LEN,
    FILE_CHUNK_KEY_INFO,
    FILE_HEADER_MAC_INFO
)
from pqenvelope.logic.codec import encode_plaintext
from pqenvelope.logic.private_key import (
    PrivateKeyEnvelope,
    decrypt_private_key
)
import hmac
import logging
import os
import struct
import tempfile

logger = logging.getLogger(__name__)


_PREFIX = struct.Struct(">4sBBH")
_META   = struct.Struct(">IIQ")
_AAD    = struct.Struct(">IB")

_MAX_U32 = 0xFFFFFFFF


def _chunk_count(plaintext_len: int, chunk_size: int) -> int:
    return -(-plaintext_len // chunk_size)


@dataclass(frozen=True)
class FileHeader:
    aead_id: int
    kem_ciphertext: bytes
    chunk_size: int
    chunk_count: int
    plaintext_len: int
    iv_base: bytes
    header_mac: bytes = b""

    def authenticated_bytes(self) -> bytes:
        """Every header byte covered by the header MAC."""
        return b"".join([
            _PREFIX.pack(FILE_MAGIC, FILE_VERSION, self.aead_id, len(self.kem_ciphertext)),
            self.kem_ciphertext,
            _META.pack(self.chunk_size, self.chunk_count, self.plaintext_len),
            self.iv_base,
        ])

    def to_bytes(self) -> bytes:
        return self.authenticated_bytes() + self.header_mac

    @property
    def size(self) -> int:
        return _PREFIX.size + len(self.kem_ciphertext) + _META.size + AEAD_IV_LEN + FILE_HEADER_MAC_LEN

    @property
    def body_len(self) -> int:
        return self.plaintext_len + self.chunk_count * AEAD_TAG_LEN

    def chunk_plaintext_len(self, index: int) -> int:
        return min(self.chunk_size, self.plaintext_len - index * self.chunk_size)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileHeader":
        """
        Parse a header from the start of `data`; trailing bytes are ignored.

        Raises:
            MalformedEnvelope: bad magic, unsupported version or algorithm,
                truncated header, or inconsistent chunk metadata.
        """
        data = bytes(data)
        if len(data) < _PREFIX.size:
            raise MalformedEnvelope("Invalid file envelope (truncated header)")

        magic, version, aead_id, kem_ct_len = _PREFIX.unpack_from(data, 0)
        if magic != FILE_MAGIC:
            raise MalformedEnvelope("Invalid file envelope (magic mismatch)")
        if version != FILE_VERSION:
            raise MalformedEnvelope(f"Unsupported file envelope version: {version}")
        if aead_id not in AEAD_BY_ID:
            raise MalformedEnvelope(f"Unsupported file envelope algorithm: {aead_id}")

        offset = _PREFIX.size
        if len(data) < offset + kem_ct_len + _META.size + AEAD_IV_LEN + FILE_HEADER_MAC_LEN:
            raise MalformedEnvelope("Invalid file envelope (truncated header)")

        kem_ciphertext = data[offset : offset + kem_ct_len]
        offset += kem_ct_len

        chunk_size, chunk_count, plaintext_len = _META.unpack_from(data, offset)
        offset += _META.size

        iv_base = data[offset : offset + AEAD_IV_LEN]
        offset += AEAD_IV_LEN

        header_mac = data[offset : offset + FILE_HEADER_MAC_LEN]

        if chunk_size == 0:
            raise MalformedEnvelope("Invalid file envelope (zero chunk size)")
        if chunk_count != _chunk_count(plaintext_len, chunk_size):
            raise MalformedEnvelope("Invalid file envelope (chunk count does not match plaintext length)")

        return cls(
            aead_id=aead_id,
            kem_ciphertext=kem_ciphertext,
            chunk_size=chunk_size,
            chunk_count=chunk_count,
            plaintext_len=plaintext_len,
            iv_base=iv_base,
            header_mac=header_mac,
        )


def read_file_header(data: bytes) -> FileHeader:
    """Parse the header of an encrypted file without decrypting anything."""
    return FileHeader.from_bytes(data)


def _derive_file_keys(shared_secret: bytes, iv_base: bytes) -> tuple[bytearray, bytearray]:
    chunk_key = bytearray(hkdf_sha256(shared_secret, info=FILE_CHUNK_KEY_INFO, salt=iv_base))
    mac_key = bytearray(hkdf_sha256(shared_secret, info=FILE_HEADER_MAC_INFO, salt=iv_base))
    return chunk_key, mac_key


def _chunk_iv(iv_base: bytes, index: int) -> bytes:
    # distinct per chunk for every index below 2**32
    counter = int.from_bytes(iv_base[-4:], "big") ^ index
    return iv_base[:-4] + counter.to_bytes(4, "big")


def _chunk_aad(header: FileHeader, index: int) -> bytes:
    return _AAD.pack(index, 1 if index == header.chunk_count - 1 else 0)


def _new_file_header(public_key: bytes, plaintext_len: int, chunk_size: int, kem: MLKem, aead) -> tuple[FileHeader, bytearray]:
    if chunk_size <= 0 or chunk_size > _MAX_U32:
        raise ValueError(f"Chunk size must be between 1 and {_MAX_U32} bytes, got {chunk_size}")

    chunk_count = _chunk_count(plaintext_len, chunk_size)
    if chunk_count > _MAX_U32:
        raise ValueError(f"Payload needs {chunk_count} chunks, more than a file envelope can hold")

    kem_ciphertext, shared_secret = kem.encapsulate(public_key)
    iv_base = generate_iv()

    chunk_key, mac_key = _derive_file_keys(shared_secret, iv_base)
    del shared_secret

    header = FileHeader(
        aead_id=aead.aead_id,
        kem_ciphertext=kem_ciphertext,
        chunk_size=chunk_size,
        chunk_count=chunk_count,
        plaintext_len=plaintext_len,
        iv_base=iv_base,
    )
    try:
        header_mac = hmac_sha256(mac_key, header.authenticated_bytes())
    finally:
        zeroize(mac_key)

    return replace(header, header_mac=header_mac), chunk_key


def _open_file_header(header: FileHeader, private_key: bytes, kem: MLKem) -> bytearray:
    """Decapsulate, derive the file keys and verify the header MAC. Returns the chunk key."""
    shared_secret = kem.decapsulate(header.kem_ciphertext, private_key)
    chunk_key, mac_key = _derive_file_keys(shared_secret, header.iv_base)
    del shared_secret

    try:
        expected = hmac_sha256(mac_key, header.authenticated_bytes())
    finally:
        zeroize(mac_key)

    if not hmac.compare_digest(expected, header.header_mac):
        zeroize(chunk_key)
        logger.warning("File envelope header failed authentication")
        raise AuthenticationFailure()

    return chunk_key


def _encrypt_chunk(aead, chunk_key: bytes, header: FileHeader, index: int, chunk: bytes) -> bytes:
    return aead.encrypt(chunk_key, _chunk_iv(header.iv_base, index), chunk, _chunk_aad(header, index))


def _decrypt_chunk(aead, chunk_key: bytes, header: FileHeader, index: int, ciphertext: bytes) -> bytes:
    try:
        return aead.decrypt(chunk_key, _chunk_iv(header.iv_base, index), ciphertext, _chunk_aad(header, index))
    except AuthenticationFailure as e:
        logger.warning("File envelope chunk %d failed authentication", index)
        raise AuthenticationFailure(f"authentication failed at chunk {index}", chunk_index=index) from e


def _select_aead(header: FileHeader, aead):
    if aead is None:
        return AEAD_BY_ID[header.aead_id]

    if aead.aead_id != header.aead_id:
        raise MalformedEnvelope(f"File envelope uses algorithm {header.aead_id}, not {aead.aead_id}")

    return aead


def encrypt_file(data, public_key: bytes, chunk_size: int = FILE_DEFAULT_CHUNK_SIZE, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> bytes:
    """
    Encrypts a payload into a chunked file envelope.

    Args:
        data: bytes (or str, UTF-8 encoded) to encrypt.
        public_key: Recipient's ML-KEM public key.
        chunk_size: Plaintext bytes per chunk; the last chunk may be shorter.

    Returns:
        header || chunk_0 || ... || chunk_{n-1}, with n = ceil(len(data) / chunk_size).
    """
    data = encode_plaintext(data)

    header, chunk_key = _new_file_header(public_key, len(data), chunk_size, kem, aead)
    try:
        out = bytearray(header.to_bytes())
        for index in range(header.chunk_count):
            chunk = data[index * chunk_size : (index + 1) * chunk_size]
            out += _encrypt_chunk(aead, chunk_key, header, index, chunk)
    finally:
        zeroize(chunk_key)

    logger.debug("Encrypted file envelope: %d bytes in %d chunks of %d", header.plaintext_len, header.chunk_count, chunk_size)

    return bytes(out)


def decrypt_file(data: bytes, private_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = None) -> bytes:
    """
    Decrypts a chunked file envelope.

    Chunks are verified in order; nothing is returned unless every chunk
    authenticated and the total matches the header's plaintext length.

    Raises:
        MalformedEnvelope: bad header, or body length does not match the header (truncation / extension).
        AuthenticationFailure: header MAC or a chunk tag failed; `chunk_index` names the failing chunk.
    """
    data = bytes(data)
    header = FileHeader.from_bytes(data)
    aead = _select_aead(header, aead)

    if len(data) != header.size + header.body_len:
        raise MalformedEnvelope(f"File envelope body is {len(data) - header.size} bytes, header declares {header.body_len}")

    chunk_key = _open_file_header(header, private_key, kem)
    try:
        out = bytearray()
        offset = header.size
        for index in range(header.chunk_count):
            ct_len = header.chunk_plaintext_len(index) + AEAD_TAG_LEN
            out += _decrypt_chunk(aead, chunk_key, header, index, data[offset : offset + ct_len])
            offset += ct_len
    finally:
        zeroize(chunk_key)

    if len(out) != header.plaintext_len:
        raise MalformedEnvelope("Decrypted length does not match the header")

    logger.debug("Decrypted file envelope: %d bytes in %d chunks", header.plaintext_len, header.chunk_count)

    return bytes(out)


def decrypt_file_with_password(data: bytes, password, private_key_envelope: PrivateKeyEnvelope, *, kdf = ARGON2ID, kem: MLKem = ML_KEM_1024, aead = None) -> bytes:
    """
    Unlocks the password-protected private key once, then decrypts the file envelope with it.
    """
    private_key = decrypt_private_key(private_key_envelope, password, kdf = kdf)
    try:
        return decrypt_file(data, private_key, kem = kem, aead = aead)
    finally:
        del private_key


@contextmanager
def _replace_on_success(out_path):
    """
    Yields a binary file beside `out_path` that is moved onto `out_path` only
    when the block completes; on any failure it is removed and `out_path` is
    left untouched.
    """
    out_path = Path(out_path)

    with tempfile.NamedTemporaryFile(dir=out_path.parent, prefix=f".{out_path.name}.", delete=False) as tmpf:
        tmp_path = Path(tmpf.name)
        try:
            yield tmpf
        except BaseException:
            tmpf.close()
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        os.replace(tmp_path, out_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def encrypt_file_path(in_path, out_path, public_key: bytes, chunk_size: int = FILE_DEFAULT_CHUNK_SIZE, *, kem: MLKem = ML_KEM_1024, aead = AES_256_GCM) -> FileHeader:
    """
    Encrypts the file at `in_path` into `out_path`, one chunk in memory at a time.

    The envelope is written to a temporary file beside `out_path` and moved
    into place only once every chunk is written; on any failure `out_path` is
    left untouched.

    Returns:
        The FileHeader written at the start of `out_path`.
    """
    plaintext_len = os.path.getsize(in_path)

    header, chunk_key = _new_file_header(public_key, plaintext_len, chunk_size, kem, aead)
    try:
        with open(in_path, "rb") as inf, _replace_on_success(out_path) as outf:
            outf.write(header.to_bytes())

            for index in range(header.chunk_count):
                chunk = inf.read(header.chunk_plaintext_len(index))
                if len(chunk) != header.chunk_plaintext_len(index):
                    raise OSError(f"{in_path} changed size during encryption")
                outf.write(_encrypt_chunk(aead, chunk_key, header, index, chunk))

            if inf.read(1):
                raise OSError(f"{in_path} changed size during encryption")
    finally:
        zeroize(chunk_key)

    logger.debug("Encrypted %s into %d chunks", in_path, header.chunk_count)

    return header


def _read_header_stream(inf) -> FileHeader:
    prefix = inf.read(_PREFIX.size)
    if len(prefix) != _PREFIX.size:
        raise MalformedEnvelope("Invalid file envelope (truncated header)")

    kem_ct_len = _PREFIX.unpack(prefix)[3]
    rest = inf.read(kem_ct_len + _META.size + AEAD_IV_LEN + FILE_HEADER_MAC_LEN)
    return FileHeader.from_bytes(prefix + rest)


def decrypt_file_path(in_path, out_path, private_key: bytes, *, kem: MLKem = ML_KEM_1024, aead = None) -> FileHeader:
    """
    Decrypts the file envelope at `in_path` into `out_path`, one chunk in memory at a time.

    Plaintext is written to a temporary file beside `out_path` and moved into
    place only after every chunk authenticated; on any failure `out_path` is
    left untouched.

    Returns:
        The verified FileHeader.
    """
    with open(in_path, "rb") as inf:
        header = _read_header_stream(inf)
        aead = _select_aead(header, aead)

        total_len = os.fstat(inf.fileno()).st_size
        if total_len != header.size + header.body_len:
            raise MalformedEnvelope(f"File envelope body is {total_len - header.size} bytes, header declares {header.body_len}")

        chunk_key = _open_file_header(header, private_key, kem)
        try:
            with _replace_on_success(out_path) as outf:
                for index in range(header.chunk_count):
                    ct_len = header.chunk_plaintext_len(index) + AEAD_TAG_LEN
                    ciphertext = inf.read(ct_len)
                    if len(ciphertext) != ct_len:
                        raise MalformedEnvelope(f"Truncated ciphertext at chunk {index}")
                    outf.write(_decrypt_chunk(aead, chunk_key, header, index, ciphertext))
        finally:
            zeroize(chunk_key)

    logger.debug("Decrypted %s (%d chunks)", in_path, header.chunk_count)

    return header
