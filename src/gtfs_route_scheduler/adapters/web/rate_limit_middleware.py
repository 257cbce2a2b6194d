"""Per-client request throttling for the scheduler API, backed by throttled-py."""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from throttled import RateLimiterType, Throttled, rate_limiter, store

if TYPE_CHECKING:
    from starlette.requests import Request
    from throttled import RateLimitResult

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def extract_client_ip(request: Request) -> str:
    """Identify the caller, preferring the first hop of X-Forwarded-For.

    The map is usually served behind a reverse proxy, so the connection
    address alone would put every browser in one bucket.
    """
    hops = [hop.strip() for hop in request.headers.get("X-Forwarded-For", "").split(",")]
    if hops[0]:
        return hops[0]

    host = request.client.host if request.client else None
    if host:
        return host

    logger.warning(f"No client address on {request.url.path}, throttling as '{UNKNOWN_CLIENT}'")
    return UNKNOWN_CLIENT


def retry_after_seconds(result: RateLimitResult) -> int:
    """Whole seconds a limited client should wait, never less than one."""
    return max(1, math.ceil(result.state.retry_after))


def rate_limit_exceeded_response(retry_after: int) -> JSONResponse:
    return JSONResponse(
        {
            "error": "RATE_LIMIT_EXCEEDED",
            "message": f"Rate limit exceeded. Retry in {retry_after} second(s).",
        },
        status_code=429,
        headers={"Retry-After": str(retry_after)},
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket per client address; ``requests_per_minute=0`` turns it off."""

    def __init__(self, app: Callable, requests_per_minute: int = 100) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.throttle: Throttled | None = None
        if requests_per_minute <= 0:
            logger.info("Rate limiting disabled")
            return

        self.throttle = Throttled(
            using=RateLimiterType.TOKEN_BUCKET.value,
            quota=rate_limiter.per_min(requests_per_minute, burst=requests_per_minute),
            store=store.MemoryStore(),
        )
        logger.info(f"Rate limiting enabled: {requests_per_minute} requests per minute per IP")

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if self.throttle is None:
            return await call_next(request)

        client_ip = extract_client_ip(request)
        result = self.throttle.limit(client_ip)
        if not result.limited:
            return await call_next(request)

        retry_after = retry_after_seconds(result)
        logger.warning(f"Rate limit exceeded for {client_ip}, retry after {retry_after}s")
        return rate_limit_exceeded_response(retry_after)
