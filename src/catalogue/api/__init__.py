"""Catalogue domain API package."""

from catalogue.api.routes import admin_catalogue_router, catalogue_router, product_router

__all__ = ["product_router", "catalogue_router", "admin_catalogue_router"]
