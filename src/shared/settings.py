"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass, field
from functools import lru_cache

API_PREFIX = "/api/v1"


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    api_url: str = "http://localhost:5000"
    backend_timeout: float = 10.0
    currency: str = "EGP"
    country: str = "Egypt"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def backend_base_url(self) -> str:
        """Root of the versioned backend API, e.g. ``http://host/api/v1``."""
        return self.api_url.rstrip("/") + API_PREFIX


@lru_cache
def get_settings() -> Settings:
    """Build settings once per process from environment variables."""
    return Settings(
        api_url=os.getenv("API_URL", "http://localhost:5000"),
        backend_timeout=float(os.getenv("BACKEND_TIMEOUT", "10")),
        currency=os.getenv("SHOP_CURRENCY", "EGP"),
        country=os.getenv("SHOP_COUNTRY", "Egypt"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
    )
