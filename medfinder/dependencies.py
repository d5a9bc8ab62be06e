from __future__ import annotations

import logging
import uuid

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Depends, Header, HTTPException, Request, Response
from pydantic import BaseModel

from medfinder.config import Settings
from medfinder.models import ErrorCode
from medfinder.services.identity import Identity, resolve_identity

settings = Settings()
redis_client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)


logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    code: str
    message: str


def client_ip(request: Request) -> str:
    """Client address, honouring X-Forwarded-For only through trusted proxies."""
    client_host = request.client.host if request.client else ""
    ip = client_host
    xff = request.headers.get("X-Forwarded-For")
    if xff and client_host in settings.trusted_proxies:
        forwarded = [h.strip() for h in xff.split(",") if h.strip()]
        proxies = forwarded[1:] + [client_host]
        if forwarded and all(p in settings.trusted_proxies for p in proxies):
            ip = forwarded[0]
    return ip


async def get_identity(
    request: Request,
    response: Response,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_api_key: str | None = Header(None, alias="X-API-Key"),
    x_session_id: str | None = Header(None, alias="X-Session-ID"),
) -> Identity:
    """Resolve the caller to an account or an anonymous session."""
    account_id = None
    if x_user_id:
        if x_api_key != settings.api_key:
            err = ErrorResponse(code=ErrorCode.UNAUTHORIZED, message="Invalid API key")
            raise HTTPException(status_code=401, detail=err.model_dump())
        account_id = x_user_id

    token = x_session_id or request.cookies.get(settings.session_cookie_name)
    if not token:
        token = uuid.uuid4().hex
        response.set_cookie(
            settings.session_cookie_name,
            token,
            httponly=True,
            samesite="lax",
        )
    identity = resolve_identity(account_id, token)
    request.state.identity = identity
    return identity


async def rate_limit(
    request: Request, identity: Identity = Depends(get_identity)
) -> Identity:
    """Throttle requests by IP and identity via Redis."""
    ip_key = f"rate:ip:{client_ip(request)}"
    identity_key = f"rate:id:{identity.key}"

    try:
        pipe = redis_client.pipeline()
        pipe.incr(ip_key)
        pipe.expire(ip_key, 60)
        pipe.incr(identity_key)
        pipe.expire(identity_key, 60)
        ip_count, _, identity_count, _ = await pipe.execute()
    except RedisError as exc:
        logger.exception("Redis unavailable for rate limiting: %s", exc)
        err = ErrorResponse(
            code=ErrorCode.SERVICE_UNAVAILABLE, message="Rate limiter unavailable"
        )
        raise HTTPException(status_code=503, detail=err.model_dump()) from exc
    if (
        ip_count > settings.rate_limit_ip_per_min
        or identity_count > settings.rate_limit_identity_per_min
    ):
        err = ErrorResponse(code=ErrorCode.TOO_MANY_REQUESTS, message="Rate limit exceeded")
        raise HTTPException(status_code=429, detail=err.model_dump())

    return identity


async def require_account(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_account:
        err = ErrorResponse(code=ErrorCode.UNAUTHORIZED, message="Sign in required")
        raise HTTPException(status_code=401, detail=err.model_dump())
    return identity


async def close_redis() -> None:
    try:
        await redis_client.aclose()
    except RedisError as exc:  # pragma: no cover - depends on server state
        logger.warning("Redis close failed: %s", exc)
