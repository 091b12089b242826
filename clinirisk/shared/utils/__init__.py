"""Shared utilities for the clinical risk platform."""
from .pii import hash_pii, configure_pii_salt, reset_pii_salt

__all__ = ["hash_pii", "configure_pii_salt", "reset_pii_salt"]
