"""HTTP backend adapter built on a shared requests.Session."""

from typing import Any

import requests
import structlog

from shared.backend.port import Backend, BackendResponse, FilePart
from shared.errors import BackendUnavailable

logger = structlog.get_logger(__name__)


class RequestsBackend(Backend):
    """Talks to the real backend REST API over HTTP."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, FilePart] | None = None,
    ) -> BackendResponse:
        headers = {}
        if token:
            headers["Authorization"] = token

        multipart = None
        if files:
            # requests sets the multipart boundary itself
            multipart = {name: (f.filename, f.content, f.content_type) for name, f in files.items()}
        elif json is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self.session.request(
                method,
                self._url(path),
                headers=headers,
                params=params,
                json=json if not files else None,
                data=data,
                files=multipart,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("backend_request_failed", method=method, path=path, error=str(exc))
            raise BackendUnavailable(str(exc)) from exc

        logger.debug("backend_request", method=method, path=path, status_code=response.status_code)

        if not response.content:
            return BackendResponse(status_code=response.status_code, payload=None)
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error(
                "backend_invalid_json",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise BackendUnavailable(f"Invalid JSON from {method} {path}") from exc
        return BackendResponse(status_code=response.status_code, payload=payload)
