"""PII handling utilities: no raw patient identifiers in application logs.

Patient names, emails and medical record numbers must be hashed before
they are logged. Hashes are stable within a deployment so that log lines for
the same patient can be correlated.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


_PII_SALT: Optional[str] = None


def configure_pii_salt(salt: str) -> None:
    """Configure the PII hashing salt.

    Must be called during application startup before any PII hashing.

    Args:
        salt: Secret salt value (PII_HASH_SALT)

    Raises:
        ValueError: If salt is empty or too short
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


def is_pii_salt_configured() -> bool:
    return _PII_SALT is not None


def hash_pii(value: Optional[str]) -> str:
    """Hash a patient identifier for safe logging.

    Args:
        value: The PII value to hash (name, email, medical id). Empty
            values hash to "anonymous" so log lines stay uniform.

    Returns:
        64-char hex SHA-256 digest of the salted value

    Raises:
        RuntimeError: If PII salt has not been configured
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    if not value:
        return "anonymous"

    salted = f"{_PII_SALT}{value.strip().lower()}"
    return hashlib.sha256(salted.encode()).hexdigest()
