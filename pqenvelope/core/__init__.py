"""Primitive adapters: KEM, password KDF and AEAD capabilities, constants and errors."""
