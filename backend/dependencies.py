"""Shared FastAPI dependencies: store access, randomness, admin gate, rate limits"""
import logging
import random
import time
from typing import Dict, Optional

from fastapi import Header, HTTPException, Request

from core.admin import ADMIN_HEADER, verify_admin_secret
from backend.database import get_database
from backend.documents import DocumentStore
from backend.seed import seed_enemies

logger = logging.getLogger(__name__)

# Global store instance
_store_instance: Optional[DocumentStore] = None

_rng = random.SystemRandom()

# Rate limiting storage - keyed by player name, then endpoint
_rate_limit_store: Dict[str, Dict[str, list[float]]] = {}
RATE_LIMIT_WINDOW = 60  # seconds

# Rate limit configurations (requests per minute)
RATE_LIMITS = {
    "attack": 30,
    "award_xp": 60,
}


def get_store() -> DocumentStore:
    """Get the document store (dependency injection for FastAPI)"""
    global _store_instance
    if _store_instance is None:
        store = DocumentStore(get_database())
        seed_enemies(store)
        _store_instance = store
    return _store_instance


def get_rng() -> random.Random:
    """Randomness source for combat rolls (overridden in tests)"""
    return _rng


async def require_admin(
    request: Request,
    x_admin_secret: Optional[str] = Header(None, alias=ADMIN_HEADER),
) -> None:
    """Reject the request with 403 unless it carries the admin secret"""
    if not verify_admin_secret(x_admin_secret):
        logger.warning(f"Admin check failed for {request.method} {request.url.path}")
        raise HTTPException(status_code=403, detail="forbidden")


def _prune_rate_limits(now: float) -> None:
    """Drop hit lists with no request inside the window, and keys left empty"""
    for key in list(_rate_limit_store):
        endpoints = _rate_limit_store[key]
        for endpoint in list(endpoints):
            if not endpoints[endpoint] or now - endpoints[endpoint][-1] >= RATE_LIMIT_WINDOW:
                del endpoints[endpoint]
        if not endpoints:
            del _rate_limit_store[key]


def check_rate_limit(key: str, endpoint: str, limit: int) -> tuple[bool, Optional[int]]:
    """
    Check if key is within rate limit for endpoint.
    Returns (is_allowed, retry_after_seconds).
    """
    now = time.time()
    _prune_rate_limits(now)

    # Clean old entries
    hits = [t for t in _rate_limit_store.get(key, {}).get(endpoint, []) if now - t < RATE_LIMIT_WINDOW]

    if len(hits) >= limit:
        # Calculate retry-after based on oldest request
        retry_after = int(RATE_LIMIT_WINDOW - (now - hits[0])) + 1
        logger.warning(f"Rate limit exceeded for {key} on {endpoint}")
        return False, retry_after

    hits.append(now)
    _rate_limit_store.setdefault(key, {})[endpoint] = hits
    return True, None


def enforce_rate_limit(key: str, endpoint: str) -> None:
    """Enforce rate limit, raise HTTPException if exceeded."""
    limit = RATE_LIMITS.get(endpoint, 60)
    allowed, retry_after = check_rate_limit(key, endpoint, limit)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="rate_limited",
            headers={"Retry-After": str(retry_after)}
        )


def reset_rate_limits() -> None:
    _rate_limit_store.clear()
