from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clustermgmt.core.errors import ClusterMgmtError, format_error_message

logger = structlog.get_logger()


def register_exception_handlers(app: FastAPI) -> None:
    """Map clustermgmt errors to JSON responses with their HTTP status."""

    @app.exception_handler(ClusterMgmtError)
    async def clustermgmt_error_handler(request: Request, exc: ClusterMgmtError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error(
                "request_failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                message=format_error_message(exc),
            )
        content: dict[str, object] = {"detail": exc.message, "error": type(exc).__name__}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.http_status, content=content)
