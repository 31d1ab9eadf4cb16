"""Error types raised across the storefront and their HTTP mapping.

- ``ValidationError`` (protean): a storefront rule was violated (400).
- ``NotAuthenticated``: an admin or account route was called without a
  bearer token (401).
- ``BackendError``: the backend answered with a non-2xx status; the
  status and body are relayed to the caller.
- ``BackendUnavailable``: the backend could not be reached or answered
  with something that is not JSON (500).
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

logger = structlog.get_logger(__name__)


class NotAuthenticated(Exception):
    pass


class BackendError(Exception):
    """The backend rejected a request."""

    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


class BackendUnavailable(Exception):
    """Transport-level failure talking to the backend."""


def error_message(payload: Any, default: str) -> str:
    """Pull a human readable message out of a backend error body."""
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return default


def register_exception_handlers(app: FastAPI) -> None:
    """Map storefront exceptions to JSON responses on ``app``."""

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.messages})

    @app.exception_handler(NotAuthenticated)
    async def _not_authenticated(request: Request, exc: NotAuthenticated) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    @app.exception_handler(BackendError)
    async def _backend_error(request: Request, exc: BackendError) -> JSONResponse:
        content = exc.payload if exc.payload is not None else {"error": exc.message}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(BackendUnavailable)
    async def _backend_unavailable(request: Request, exc: BackendUnavailable) -> JSONResponse:
        logger.error("backend_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
