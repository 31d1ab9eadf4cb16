"""ShopFront FastAPI application.

Storefront and back-office gateway in front of the shop's REST backend.
Every route either relays a backend call or runs the cart, checkout and
pricing rules before talking to the backend. Each request is wrapped in the
domain context of the bounded context its URL belongs to.

Usage:
    uvicorn app:app --host 0.0.0.0 --port 8000 --reload
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.domain import catalogue
from identity.domain import identity
from ordering.domain import ordering
from shared.errors import register_exception_handlers
from shared.logging import bind_request, configure_logging, unbind_request
from shared.settings import get_settings

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
identity.init()
catalogue.init()
ordering.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
# Longest prefixes first: /api/admin is split between all three contexts
_ROUTE_DOMAIN_MAP = {
    "/api/admin/users": identity,
    "/api/admin/discounts": ordering,
    "/api/admin/locations": ordering,
    "/api/admin/orders": ordering,
    "/api/admin/stats": ordering,
    "/api/admin": catalogue,
    "/api/auth": identity,
    "/api/address": identity,
    "/api/cart": ordering,
    "/api/payment": ordering,
    "/api/checkout": ordering,
    "/api/discounts": ordering,
    "/api/locations": ordering,
    "/api/orders": ordering,
    "/api": catalogue,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path == prefix or path.startswith(prefix + "/"):
            return domain
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("shopfront_started", backend=get_settings().backend_base_url)
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="ShopFront API",
    description="E-commerce storefront: cart, checkout, catalogue and back-office",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: health check, docs
    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a request id to every log line emitted while serving the request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    bind_request(request_id, request.method, request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.debug("request_finished", elapsed_ms=elapsed_ms)
        unbind_request()
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from catalogue.api import admin_catalogue_router, catalogue_router, product_router  # noqa: E402
from identity.api import address_router, admin_identity_router, auth_router  # noqa: E402
from ordering.api import (  # noqa: E402
    admin_ordering_router,
    cart_router,
    checkout_router,
    discount_router,
    location_router,
    order_router,
    payment_router,
)

app.include_router(auth_router)
app.include_router(address_router)
app.include_router(product_router)
app.include_router(catalogue_router)
app.include_router(cart_router)
app.include_router(payment_router)
app.include_router(checkout_router)
app.include_router(discount_router)
app.include_router(location_router)
app.include_router(order_router)
app.include_router(admin_catalogue_router)
app.include_router(admin_ordering_router)
app.include_router(admin_identity_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "identity": {"name": identity.name},
                "catalogue": {"name": catalogue.name},
                "ordering": {"name": ordering.name},
            },
        }
    )
