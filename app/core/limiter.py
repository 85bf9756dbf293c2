# File: app/core/limiter.py

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings


def client_key(request: Request) -> str:
    """Client IP, taken from X-Forwarded-For when running behind a proxy."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Counters live in Redis so every worker shares them
limiter = Limiter(
    key_func=client_key,
    storage_uri=settings.redis_url,
    default_limits=[settings.redis_rate_limit],
    enabled=settings.rate_limit_enabled,
)


async def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests",
            "detail": f"Rate limit exceeded: {exc.detail}",
            "path": request.url.path,
        },
    )
