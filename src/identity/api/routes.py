"""FastAPI routes for the Identity domain: auth, address book, admin users."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from protean.exceptions import ValidationError

from identity.address.address import fetch_default_address
from identity.api.schemas import (
    AddressRequest,
    CreateUserRequest,
    LoginRequest,
    SignupRequest,
    UpdateUserRequest,
)
from identity.user.users import user_rows, user_stats
from shared.backend import get_backend
from shared.proxy import relay, relay_page, require_token

# ---------------------------------------------------------------------------
# Auth Router
# ---------------------------------------------------------------------------
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/signup")
def signup(body: SignupRequest) -> Response:
    return relay(get_backend().post("/auth/register", json=body.model_dump(by_alias=True)))


@auth_router.post("/login")
def login(body: LoginRequest) -> Response:
    """The backend answers with ``{token, user}``; the token is sent back on later calls."""
    return relay(get_backend().post("/auth/login", json=body.model_dump(by_alias=True)))


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/api/address", tags=["addresses"])


@address_router.get("")
def list_addresses(token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get("/addresses", token=token))


@address_router.get("/default")
def get_default_address(token: str = Depends(require_token)) -> Response:
    address = fetch_default_address(get_backend(), token)
    if address is None:
        return JSONResponse(status_code=404, content={"error": "No default address set"})
    return JSONResponse(content={"address": address.to_payload()})


@address_router.post("")
def add_address(body: AddressRequest, token: str = Depends(require_token)) -> Response:
    payload = body.model_dump(by_alias=True, exclude_none=True)
    return relay(get_backend().post("/addresses", token=token, json=payload))


@address_router.put("/{address_id}")
def update_address(address_id: str, body: AddressRequest, token: str = Depends(require_token)) -> Response:
    payload = body.model_dump(by_alias=True, exclude_none=True)
    return relay(get_backend().put(f"/addresses/{address_id}", token=token, json=payload))


@address_router.delete("/{address_id}")
def remove_address(address_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/addresses/{address_id}", token=token))


@address_router.patch("/{address_id}/default")
def set_default_address(address_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().patch(f"/addresses/{address_id}/default", token=token))


# ---------------------------------------------------------------------------
# Admin Router (users)
# ---------------------------------------------------------------------------
admin_identity_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_identity_router.get("/users")
def admin_list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    token: str = Depends(require_token),
) -> Response:
    return relay_page(get_backend().get("/admin/users", token=token, params={"page": page, "limit": limit}))


@admin_identity_router.get("/users/stats")
def admin_user_stats(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    token: str = Depends(require_token),
) -> dict:
    """Admin/customer/total counts over the page of users the table shows."""
    payload = (
        get_backend()
        .get("/admin/users", token=token, params={"page": page, "limit": limit})
        .expect_ok("Failed to fetch users")
    )
    return user_stats(user_rows(payload))


@admin_identity_router.get("/users/{user_id}")
def admin_get_user(user_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get(f"/admin/users/{user_id}", token=token))


@admin_identity_router.post("/users")
def admin_create_user(body: CreateUserRequest, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().post("/admin/users", token=token, json=body.model_dump(by_alias=True)))


@admin_identity_router.put("/users/{user_id}")
def admin_update_user(user_id: str, body: UpdateUserRequest, token: str = Depends(require_token)) -> Response:
    payload = body.model_dump(by_alias=True, exclude_none=True)
    if not payload:
        raise ValidationError({"user": ["Nothing to update"]})
    return relay(get_backend().put(f"/admin/users/{user_id}", token=token, json=payload))


@admin_identity_router.delete("/users/{user_id}")
def admin_delete_user(user_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/admin/users/{user_id}", token=token))
