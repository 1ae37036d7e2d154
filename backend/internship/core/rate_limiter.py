"""
Rate Limiting
=============
Implements rate limiting using slowapi.

Requests are keyed by the bearer token subject when present, falling back to
the client IP. The undertaking PDF endpoint carries its own, stricter limit
(PDF_RATE_LIMIT) because rendering is the most expensive request served.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
import hashlib

from internship.core.config import settings
from internship.core.logging_config import logger


def get_request_identifier(request: Request) -> str:
    """
    Get rate limit key for a request.

    Priority:
    1. Bearer token (hashed, so raw tokens never reach the limiter storage)
    2. IP address (for anonymous requests)
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        digest = hashlib.sha256(auth_header[7:].encode()).hexdigest()[:16]
        return f"token:{digest}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_request_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/(1 minute)"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON response in the same shape as the other API errors,
    with a Retry-After header.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_request_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "detail": "Too many requests. Please slow down.",
            "error": {
                "code": "RATE_LIMITED",
                "message": str(exc.detail),
                "details": {},
            },
        },
        headers={"Retry-After": "60"},
    )


def pdf_rate_limit():
    """Rate limit applied to undertaking downloads"""
    return limiter.limit(settings.PDF_RATE_LIMIT, key_func=get_request_identifier)
