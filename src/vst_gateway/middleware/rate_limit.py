"""Fixed-window rate limiting backed by Redis.

Rules (per client IP, per 60-second window):
  - Auth endpoints  (/api/v1/auth/*):              RATE_LIMIT_AUTH_PER_MIN
  - Trade endpoints (/api/v1/portfolio/buy|sell):  RATE_LIMIT_TRADE_PER_MIN
  - Everything else: unlimited

Counting: INCR "ratelimit:{ip}:{group}", EXPIRE 60 on the first hit of a
window. Over the limit → RateLimitError envelope, HTTP 429, Retry-After.
"""

import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.vst_common.errors import RateLimitError
from src.vst_common.redis_client import get_redis
from src.vst_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_TRADE_PATHS = frozenset({"/api/v1/portfolio/buy", "/api/v1/portfolio/sell"})


def classify(path: str) -> tuple[str, int] | None:
    """Return (group, limit) for a limited path, or None."""
    if path.startswith("/api/v1/auth/"):
        return "auth", settings.RATE_LIMIT_AUTH_PER_MIN
    if path in _TRADE_PATHS:
        return "trade", settings.RATE_LIMIT_TRADE_PER_MIN
    return None


def client_ip(request: Request) -> str:
    """Real client IP, honouring the first X-Forwarded-For hop behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        enabled: bool | None = None,
    ) -> None:
        super().__init__(app)
        self._redis_factory = redis_factory
        self._enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rule = classify(request.url.path) if self._enabled else None
        if rule is None:
            return await call_next(request)

        group, limit = rule
        ip = client_ip(request)
        key = f"ratelimit:{ip}:{group}"
        redis = await self._redis_factory()
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, _WINDOW_SECONDS)

        if count > limit:
            ttl = await redis.ttl(key)
            retry_after = ttl if ttl and ttl > 0 else _WINDOW_SECONDS
            logger.warning("Rate limit hit: ip=%s group=%s count=%d", ip, group, count)
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
