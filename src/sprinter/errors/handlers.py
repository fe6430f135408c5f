"""FastAPI exception handlers producing the ErrorResponse envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sprinter.errors.exceptions import AccessDeniedError, SprinterError
from sprinter.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(SprinterError)
    async def sprinter_error_handler(request: Request, exc: SprinterError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, AccessDeniedError):
            user = getattr(request.state, "user", {}) or {}
            denied = exc.details if isinstance(exc.details, dict) else {}
            logger.warning(
                "project_access_denied",
                extra={
                    "project_id": denied.get("project_id"),
                    "role": denied.get("role"),
                    "path": request.url.path,
                    "method": request.method,
                    "trace_id": trace_id,
                    "user_sub": user.get("sub", "anonymous"),
                    "reason": str(exc),
                },
            )
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=trace_id,
                timestamp=datetime.now(timezone.utc),
            ),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json", exclude_none=True),
        )
