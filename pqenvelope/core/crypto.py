"""
core/crypto
-----------
Post-quantum key encapsulation for pqenvelope.

Implements:
- Key generation (ML-KEM-1024)
- Shared secret encapsulation under a recipient public key
- Shared secret decapsulation with the matching private key
- The KEM capability object handed to every envelope operation

ML-KEM decapsulation under the wrong private key does not fail; it returns
an unrelated pseudorandom secret. The AEAD tag checked afterwards by the
envelope logic is the only mismatch detector.
"""

import oqs
from dataclasses import dataclass
from typing import Tuple
from pqenvelope.core.exceptions import MalformedEnvelope
from pqenvelope.core.constants import (
    ML_KEM_1024_NAME,
    ALGOS_BUFFER_LIMITS
)


@dataclass(frozen=True)
class KeyPair:
    """A recipient's ML-KEM identity."""

    public_key: bytes
    private_key: bytes

    def __repr__(self) -> str:
        return f"KeyPair(pk_len={len(self.public_key)}, sk_len={len(self.private_key)})"


def generate_kem_keys(algorithm: str = ML_KEM_1024_NAME) -> Tuple[bytes, bytes]:
    """
    Generates a KEM keypair.

    Args:
        algorithm: PQ KEM algorithm.

    Returns:
        (private_key, public_key) as bytes.
    """
    with oqs.KeyEncapsulation(algorithm) as kem:
        public_key = kem.generate_keypair()
        private_key = kem.export_secret_key()
        return private_key, public_key


def encap_shared_secret(public_key: bytes, algorithm: str = ML_KEM_1024_NAME) -> Tuple[bytes, bytes]:
    """
    Derive a KEM shared secret from a public key.

    Args:
        public_key: KEM public key.
        algorithm: KEM algorithm NIST name.

    Returns:
        (KEM ciphertext, shared secret) as bytes.
    """
    if len(public_key) != ALGOS_BUFFER_LIMITS[algorithm]["PK_LEN"]:
        raise ValueError(f"{algorithm} public key must be {ALGOS_BUFFER_LIMITS[algorithm]['PK_LEN']} bytes, got {len(public_key)}")

    with oqs.KeyEncapsulation(algorithm) as kem:
        return kem.encap_secret(bytes(public_key))


def decap_shared_secret(ciphertext: bytes, private_key: bytes, algorithm: str = ML_KEM_1024_NAME) -> bytes:
    """
    Decrypts a single KEM ciphertext to derive a shared secret.

    Args:
        ciphertext: KEM ciphertext.
        private_key: KEM private key.
        algorithm: KEM algorithm NIST name.

    Returns:
        Shared secret as bytes.

    Raises:
        MalformedEnvelope: ciphertext has the wrong length for `algorithm`.
        ValueError: private key has the wrong length for `algorithm`.
    """
    if len(ciphertext) != ALGOS_BUFFER_LIMITS[algorithm]["CT_LEN"]:
        raise MalformedEnvelope(f"Ciphertext of {algorithm} is malformed or incomplete ({len(ciphertext)})")

    if len(private_key) != ALGOS_BUFFER_LIMITS[algorithm]["SK_LEN"]:
        raise ValueError(f"{algorithm} private key must be {ALGOS_BUFFER_LIMITS[algorithm]['SK_LEN']} bytes, got {len(private_key)}")

    with oqs.KeyEncapsulation(algorithm, secret_key = bytes(private_key)) as kem:
        return kem.decap_secret(bytes(ciphertext))


class MLKem:
    """
    KEM capability backed by liboqs.

    Stateless; one instance can be shared between threads and calls.
    """

    def __init__(self, algorithm: str = ML_KEM_1024_NAME):
        if algorithm not in ALGOS_BUFFER_LIMITS:
            raise ValueError(f"Unsupported KEM algorithm: {algorithm}")
        self.algorithm = algorithm

    @property
    def public_key_len(self) -> int:
        return ALGOS_BUFFER_LIMITS[self.algorithm]["PK_LEN"]

    @property
    def private_key_len(self) -> int:
        return ALGOS_BUFFER_LIMITS[self.algorithm]["SK_LEN"]

    @property
    def ciphertext_len(self) -> int:
        return ALGOS_BUFFER_LIMITS[self.algorithm]["CT_LEN"]

    def generate_key_pair(self) -> KeyPair:
        private_key, public_key = generate_kem_keys(self.algorithm)
        return KeyPair(public_key=public_key, private_key=private_key)

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        return encap_shared_secret(public_key, self.algorithm)

    def decapsulate(self, ciphertext: bytes, private_key: bytes) -> bytes:
        return decap_shared_secret(ciphertext, private_key, self.algorithm)

    def __repr__(self) -> str:
        return f"MLKem({self.algorithm})"


ML_KEM_1024 = MLKem(ML_KEM_1024_NAME)


def generate_key_pair(kem: MLKem = ML_KEM_1024) -> KeyPair:
    """
    Generates a new recipient key pair.

    Returns:
        KeyPair with a 1568-byte public key and a 3168-byte private key
        (for the default ML-KEM-1024 parameter set).
    """
    return kem.generate_key_pair()
