"""Envelope construction and key-wrapping logic built on pqenvelope.core."""
