"""PII handling utilities: no raw identifiers or message text in logs.

User identifiers are hashed with a secret salt before they reach any
log line or outbound event. Message text is fingerprinted so a log
entry can be matched to a stored transcript without exposing content.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


# Loaded from the PII_HASH_SALT secret at service startup
_PII_SALT: Optional[str] = None

MIN_SALT_LENGTH = 32


def configure_pii_salt(salt: str) -> None:
    """Configure the PII hashing salt.

    Must be called during application startup before any PII hashing.

    Args:
        salt: Secret salt value

    Raises:
        ValueError: If salt is empty or too short
    """
    global _PII_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_pii(value: str) -> str:
    """Hash a user identifier for safe logging and event payloads.

    Uses SHA-256 with the configured salt, so the same user always maps
    to the same opaque 64-character hex string.

    Args:
        value: The identifier to hash (user ID, email, ...)

    Returns:
        Hashed string safe for logging

    Raises:
        RuntimeError: If PII salt has not been configured
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    salted = f"{_PII_SALT}{value}"
    return hashlib.sha256(salted.encode()).hexdigest()


def hash_text_for_audit(text: Optional[str]) -> str:
    """Fingerprint message text without exposing its content.

    Args:
        text: Raw message text (None is treated as empty)

    Returns:
        SHA-256 hex digest of the text
    """
    return hashlib.sha256((text or "").encode()).hexdigest()
