"""Shared-secret checks for admin-only operations"""
import hmac
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-Admin-Secret"


def get_admin_secret() -> Optional[str]:
    """Admin secret from the environment (read on every call)"""
    secret = os.getenv("ADMIN_SECRET")
    return secret or None


def verify_admin_secret(provided: Optional[str]) -> bool:
    """
    Check a provided admin secret.

    Returns False when no secret is configured, so admin routes stay closed
    until ADMIN_SECRET is set.
    """
    expected = get_admin_secret()
    if expected is None:
        logger.warning("Admin request rejected: ADMIN_SECRET is not configured")
        return False
    if not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())
