"""Accounts as managed from the back-office."""

from enum import Enum
from typing import Any


class UserRole(Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


def user_rows(payload: Any) -> list[dict]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    if isinstance(payload, list):
        return payload
    return []


def user_stats(users: list[dict]) -> dict:
    """Counts for the admin stats cards, over the users currently listed."""
    return {
        "total": len(users),
        "admins": sum(1 for user in users if user.get("role") == UserRole.ADMIN.value),
        "customers": sum(1 for user in users if user.get("role") == UserRole.CUSTOMER.value),
    }
