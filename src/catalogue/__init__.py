"""Catalogue bounded context: products, bundles, categories, manufacturers and product types."""
