"""Backend client port (abstract interface).

Defines the contract every backend adapter implements. Route handlers and
domain functions only talk to this interface, which lets tests swap in
FakeBackend for RequestsBackend without touching application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from shared.errors import BackendError, error_message


@dataclass(frozen=True)
class BackendResponse:
    """Status code and decoded JSON body of a backend call."""

    status_code: int
    payload: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def expect_ok(self, default_message: str = "Request failed") -> Any:
        """Return the payload, or raise BackendError for a non-2xx status."""
        if not self.ok:
            raise BackendError(
                self.status_code,
                error_message(self.payload, default_message),
                self.payload,
            )
        return self.payload


@dataclass(frozen=True)
class FilePart:
    """A file part forwarded in a multipart request."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class Backend(ABC):
    """Abstract backend REST client."""

    @abstractmethod
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
        """Send a request to ``path`` (relative to the API root).

        ``token`` is the raw ``Authorization`` header value and is forwarded
        unchanged. Non-2xx answers are returned, not raised; transport
        failures raise BackendUnavailable.
        """
        ...

    def get(self, path: str, **kwargs: Any) -> BackendResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> BackendResponse:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> BackendResponse:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> BackendResponse:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> BackendResponse:
        return self.request("DELETE", path, **kwargs)
