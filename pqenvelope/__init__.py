"""
pqenvelope
==========

Hybrid post-quantum envelope encryption: ML-KEM-1024 key encapsulation,
Argon2id password derivation and AES-256-GCM / ChaCha20-Poly1305 AEAD,
combined into message, password-only, private-key, chunked file and
multi-recipient group envelopes.

No secrets are logged. Every decrypt either returns the full authenticated
plaintext or raises an EnvelopeError.
"""

from pqenvelope.core.constants import APP_VERSION
from pqenvelope.core.exceptions import (
    EnvelopeError,
    AuthenticationFailure,
    RecipientIndexMismatch,
    MalformedEnvelope,
    KeyDerivationFailure
)
from pqenvelope.core.crypto import (
    KeyPair,
    MLKem,
    ML_KEM_1024,
    generate_key_pair
)
from pqenvelope.core.trad_crypto import (
    Argon2idKdf,
    AesGcmCipher,
    ChaCha20Poly1305Cipher,
    ARGON2ID,
    AES_256_GCM,
    CHACHA20_POLY1305,
    generate_salt
)
from pqenvelope.logic.codec import pack, unpack
from pqenvelope.logic.message import (
    MessageEnvelope,
    encrypt_message,
    decrypt_message
)
from pqenvelope.logic.symmetric import (
    DerivedKey,
    SymmetricEnvelope,
    derive_key_from_password,
    encrypt_symmetric,
    decrypt_symmetric
)
from pqenvelope.logic.private_key import (
    PrivateKeyEnvelope,
    encrypt_private_key,
    decrypt_private_key
)
from pqenvelope.logic.file import (
    FileHeader,
    read_file_header,
    encrypt_file,
    decrypt_file,
    decrypt_file_with_password,
    encrypt_file_path,
    decrypt_file_path
)
from pqenvelope.logic.group import (
    WrappedKey,
    GroupEnvelope,
    encrypt_for_group,
    decrypt_from_group
)
from pqenvelope.logic.serialization import (
    export_bytes,
    import_bytes,
    export_key_pair,
    import_key_pair,
    create_fingerprint,
    compare_fingerprints
)

__version__ = APP_VERSION

__all__ = [
    "EnvelopeError",
    "AuthenticationFailure",
    "RecipientIndexMismatch",
    "MalformedEnvelope",
    "KeyDerivationFailure",
    "KeyPair",
    "MLKem",
    "ML_KEM_1024",
    "generate_key_pair",
    "Argon2idKdf",
    "AesGcmCipher",
    "ChaCha20Poly1305Cipher",
    "ARGON2ID",
    "AES_256_GCM",
    "CHACHA20_POLY1305",
    "generate_salt",
    "pack",
    "unpack",
    "MessageEnvelope",
    "encrypt_message",
    "decrypt_message",
    "DerivedKey",
    "SymmetricEnvelope",
    "derive_key_from_password",
    "encrypt_symmetric",
    "decrypt_symmetric",
    "PrivateKeyEnvelope",
    "encrypt_private_key",
    "decrypt_private_key",
    "FileHeader",
    "read_file_header",
    "encrypt_file",
    "decrypt_file",
    "decrypt_file_with_password",
    "encrypt_file_path",
    "decrypt_file_path",
    "WrappedKey",
    "GroupEnvelope",
    "encrypt_for_group",
    "decrypt_from_group",
    "export_bytes",
    "import_bytes",
    "export_key_pair",
    "import_key_pair",
    "create_fingerprint",
    "compare_fingerprints",
    "__version__",
]
