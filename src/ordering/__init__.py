"""Ordering bounded context: cart, checkout, pricing, promo codes, locations and orders."""
