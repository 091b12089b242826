"""PII handling utilities.

Patient identifiers never reach application logs or summary columns in
clear text. Every service hashes them with the deployment salt first.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


# Loaded from AWS Secrets Manager at startup in production
_PII_SALT: Optional[str] = None


def configure_pii_salt(salt: str) -> None:
    """Configure the PII hashing salt.

    Must be called during application startup before any PII hashing.

    Args:
        salt: Secret salt value

    Raises:
        ValueError: If salt is empty or shorter than 32 characters
    """
    global _PII_SALT
    if not salt or len(salt) < 32:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": 32}
        )
        raise ValueError("PII salt must be at least 32 characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def reset_pii_salt() -> None:
    """Forget the configured salt (test teardown)."""
    global _PII_SALT
    _PII_SALT = None


def hash_pii(value: str) -> str:
    """Hash a patient identifier for safe logging and storage.

    SHA-256 over salt + value, so the same patient always maps to the
    same hash within a deployment.

    Args:
        value: The identifier to hash (user id, phone, e-mail)

    Returns:
        64-character hex digest

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    salted = f"{_PII_SALT}{value}"
    return hashlib.sha256(salted.encode()).hexdigest()
