"""Catalogue bounded context: product browsing and search."""

from protean.domain import Domain

catalogue = Domain(name="catalogue")
