"""JWT Bearer authentication middleware.

Resolves the acting user for a request into ``request.state.user``. The
user id in the token's ``sub`` claim is what the core receives as
``actor_id``; whether that user is active is decided by the access checks.
"""

import logging
from datetime import datetime, timedelta, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from sprinter.config import settings
from sprinter.logging_config import bind_request_context

logger = logging.getLogger(__name__)

_ANONYMOUS = {"sub": "anonymous"}


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Issue a signed access token for ``user_id``."""
    from jose import jwt

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or settings.jwt_access_token_expire_minutes),
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode_jwt(token: str) -> dict:
    from jose import JWTError, jwt

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc


class AuthMiddleware(BaseHTTPMiddleware):
    """Validate a Bearer token and attach the caller to request.state.user."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            user_info = self._validate_jwt(auth_header[7:])
        else:
            # Routes that need an actor reject anonymous callers themselves
            user_info = dict(_ANONYMOUS)

        request.state.user = user_info
        if user_info.get("sub") not in ("anonymous", ""):
            bind_request_context(getattr(request.state, "trace_id", "unknown"), user_info["sub"])
        return await call_next(request)

    def _validate_jwt(self, token: str) -> dict:
        try:
            payload = _decode_jwt(token)
        except ValueError:
            return {**_ANONYMOUS, "_auth_error": "invalid_token"}

        if payload.get("type") != "access":
            return {**_ANONYMOUS, "_auth_error": "not_access_token"}
        return {"sub": payload.get("sub", "")}
