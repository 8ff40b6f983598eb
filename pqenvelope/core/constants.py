# app metadata
APP_NAME          = "pqenvelope"
APP_VERSION       = "0.1.0"

# AEAD parameters (bytes)
AEAD_KEY_LEN      = 32
AEAD_IV_LEN       = 12
AEAD_TAG_LEN      = 16

AEAD_ID_AES_256_GCM        = 1
AEAD_ID_CHACHA20_POLY1305  = 2

# NIST-specified key sizes (bytes) and metadata
ML_KEM_1024_NAME   = "ML-KEM-1024"
ML_KEM_1024_SK_LEN = 3168
ML_KEM_1024_PK_LEN = 1568
ML_KEM_1024_CT_LEN = 1568
ML_KEM_1024_SS_LEN = 32

ALGOS_BUFFER_LIMITS = {
    ML_KEM_1024_NAME: {
        "SK_LEN": ML_KEM_1024_SK_LEN,
        "PK_LEN": ML_KEM_1024_PK_LEN,
        "CT_LEN": ML_KEM_1024_CT_LEN,
        "SS_LEN": ML_KEM_1024_SS_LEN,
    },
}

# hash parameters
ARGON2_ITERS       = 3
ARGON2_MEMORY      = 64 * 1024 * 1024   # bytes
ARGON2_OUTPUT_LEN  = 32                 # bytes
ARGON2_SALT_LEN    = 16                 # bytes

SESSION_KEY_LEN    = 32

# chunked file envelope
FILE_MAGIC              = b"PQEF"
FILE_VERSION            = 1
FILE_DEFAULT_CHUNK_SIZE = 64 * 1024
FILE_HEADER_MAC_LEN     = 32
FILE_CHUNK_KEY_INFO     = b"pqenvelope-file-chunk-key"
FILE_HEADER_MAC_INFO    = b"pqenvelope-file-header-mac"

# fingerprints
FINGERPRINT_GROUP_LEN   = 4
