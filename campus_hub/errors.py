"""
Error taxonomy shared by the data-scope engine and its HTTP surface.

The engine raises these plain exceptions; `register_error_handlers` turns them
into JSON responses so route handlers never build error payloads by hand.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DataScopeError(Exception):
    """Base class: carries a human-readable message and optional structured details."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(DataScopeError):
    """Request is malformed; detected before any mutation."""

    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DataScopeError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(DataScopeError):
    """Unexpected persistence failure during a transactional write."""


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DataScopeError)
    async def _handle_data_scope_error(request: Request, exc: DataScopeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed path=%s method=%s: %s", request.url.path, request.method, exc.message)
        else:
            logger.info(
                "Request rejected path=%s method=%s code=%s: %s",
                request.url.path,
                request.method,
                exc.code,
                exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
