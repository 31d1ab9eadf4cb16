"""In-memory fake backend for development and testing.

Responses are registered per ``(method, path)`` and every call is recorded,
so tests can both script the backend and assert on what was sent:

    backend = FakeBackend()
    backend.respond("GET", "/cart", {"cartId": "c1", "items": [], ...})
    backend.respond("POST", "/cart/items", {"error": "Out of stock"}, status_code=400)

A registered response may also be a list, consumed one entry per call
(the last entry repeats), or a callable receiving the recorded call.
Unregistered routes answer 404 ``{"error": "Not Found"}``.
"""

from collections.abc import Callable
from typing import Any

from shared.backend.port import Backend, BackendResponse, FilePart
from shared.errors import BackendUnavailable


class FakeBackend(Backend):
    """Configurable fake backend."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[BackendResponse] | Callable[[dict], BackendResponse]] = {}
        self.calls: list[dict] = []
        self.unavailable: bool = False

    def respond(self, method: str, path: str, payload: Any = None, status_code: int = 200) -> None:
        """Register a single canned response."""
        self.routes[(method.upper(), path)] = [BackendResponse(status_code=status_code, payload=payload)]

    def respond_sequence(self, method: str, path: str, responses: list[tuple[int, Any]]) -> None:
        """Register responses returned in order, one per call."""
        self.routes[(method.upper(), path)] = [BackendResponse(status_code=s, payload=p) for s, p in responses]

    def respond_with(self, method: str, path: str, handler: Callable[[dict], BackendResponse]) -> None:
        """Register a callable that builds the response from the call."""
        self.routes[(method.upper(), path)] = handler

    def go_offline(self) -> None:
        """Make every subsequent call fail at the transport level."""
        self.unavailable = True

    def calls_to(self, method: str, path: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method.upper() and c["path"] == path]

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
        call = {
            "method": method.upper(),
            "path": path,
            "token": token,
            "params": params,
            "json": json,
            "data": data,
            "files": files,
        }
        self.calls.append(call)

        if self.unavailable:
            raise BackendUnavailable("Connection refused")

        route = self.routes.get((method.upper(), path))
        if route is None:
            return BackendResponse(status_code=404, payload={"error": "Not Found"})
        if callable(route):
            return route(call)
        if len(route) > 1:
            return route.pop(0)
        return route[0]
