"""
Exceptions for pqenvelope.
Every failure raised by an envelope operation derives from EnvelopeError,
so callers can catch the whole family in one place.
"""


class EnvelopeError(Exception):
    # general container for errors
    pass


class AuthenticationFailure(EnvelopeError):
    # raised on an AEAD tag or header MAC mismatch.
    # The message is the same for every cause (wrong key, wrong password, tampering).

    def __init__(self, message: str = "authentication failed", chunk_index: int = None):
        super().__init__(message)
        self.chunk_index = chunk_index


class RecipientIndexMismatch(AuthenticationFailure):
    # raised when a group recipient index has no wrapped key entry
    pass


class MalformedEnvelope(EnvelopeError, ValueError):
    # raised when a buffer is too short for a declared IV, header or chunk boundary
    pass


class KeyDerivationFailure(EnvelopeError):
    # raised when the password KDF primitive rejects its inputs
    pass
