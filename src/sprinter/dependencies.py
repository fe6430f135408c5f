"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator

from fastapi import Request

from sprinter.errors.exceptions import AuthenticationError


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


async def get_current_user_id(request: Request) -> str:
    """Return the acting user's id or raise 401.

    This is the only place the request identity is read; the id is passed
    explicitly into every core operation from here on.
    """
    user = getattr(request.state, "user", {})
    if "_auth_error" in user:
        raise AuthenticationError(user["_auth_error"])
    if not user or user.get("sub") in ("anonymous", ""):
        raise AuthenticationError("Authentication required")
    return user["sub"]
