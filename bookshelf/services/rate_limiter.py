"""
Rate Limiting

Per-client request limits with slowapi. Clients are identified by IP
address, looking through X-Forwarded-For / X-Real-IP when the API runs
behind a proxy.

- Reads (list, show): settings.rate_limit_default
- Writes (create, update, delete): settings.rate_limit_write

Counters live in Redis when settings.redis_url is set, so several API
processes share them; otherwise each process counts in memory.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from bookshelf.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def get_client_ip(request: Request) -> str:
    """Client address used as the rate limit key."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # The first address is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[settings.rate_limit_default],
    storage_uri=settings.redis_url or "memory://",
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Render a 429 in the API's error shape.

    Retry-After is the length of the exceeded limit's window in seconds,
    the longest a client can have to wait for it to reset.
    """
    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {exc.detail}")

    return JSONResponse(
        status_code=429,
        content={"error": "rate limit exceeded"},
        headers={"Retry-After": str(exc.limit.limit.get_expiry())},
    )
