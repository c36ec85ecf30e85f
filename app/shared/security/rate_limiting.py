"""
Rate limiting configuration and setup.

Uses slowapi to enforce per-endpoint rate limits.
Limits are keyed by the caller identity asserted by the gateway, so
several buyers behind one proxy do not share a budget. Anonymous
requests fall back to the remote address.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings

IDENTITY_HEADER = "X-Account-Id"


def caller_key(request: Request) -> str:
    """Return the rate limit bucket for a request."""
    caller = request.headers.get(IDENTITY_HEADER)
    if caller:
        return f"account:{caller}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=caller_key, default_limits=[settings.rate_limit_default])


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response with a clear error message.
    """
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded", "detail": str(exc.detail)},
    )
