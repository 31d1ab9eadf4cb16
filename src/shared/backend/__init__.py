"""Backend client factory.

Provides get_backend() / set_backend() to swap implementations:
- RequestsBackend for talking to the real REST API (default)
- FakeBackend for development and testing
"""

from shared.backend.fake_adapter import FakeBackend
from shared.backend.http_adapter import RequestsBackend
from shared.backend.port import Backend, BackendResponse, FilePart
from shared.settings import get_settings

__all__ = [
    "Backend",
    "BackendResponse",
    "FakeBackend",
    "FilePart",
    "RequestsBackend",
    "get_backend",
    "reset_backend",
    "set_backend",
]

_current_backend: Backend | None = None


def get_backend() -> Backend:
    """Return the current backend client. Defaults to RequestsBackend."""
    global _current_backend
    if _current_backend is None:
        settings = get_settings()
        _current_backend = RequestsBackend(settings.backend_base_url, timeout=settings.backend_timeout)
    return _current_backend


def set_backend(backend: Backend) -> None:
    """Override the active backend client (useful for tests)."""
    global _current_backend
    _current_backend = backend


def reset_backend() -> None:
    """Reset to default backend."""
    global _current_backend
    _current_backend = None
