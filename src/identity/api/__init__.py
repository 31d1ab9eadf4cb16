"""Identity domain API package."""

from identity.api.routes import address_router, admin_identity_router, auth_router

__all__ = ["auth_router", "address_router", "admin_identity_router"]
