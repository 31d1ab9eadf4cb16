"""Address book entries of a signed-in user."""

from typing import Any

import structlog
from protean.fields import Boolean, String

from identity.domain import identity
from shared.backend import Backend
from shared.errors import BackendError

logger = structlog.get_logger(__name__)


@identity.value_object
class Address:
    """One entry of a user's address book, as the backend stores it."""

    address_id = String(required=True, max_length=50)
    recipient_name = String(max_length=255, default="")
    street_address = String(max_length=255, default="")
    city = String(max_length=100, default="")
    district = String(max_length=100, default="")
    postal_code = String(max_length=20, default="")
    phone_number = String(max_length=20, default="")
    building_number = String(max_length=20)
    secondary_number = String(max_length=20)
    label = String(max_length=50)
    is_default = Boolean(default=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Address":
        return cls(
            address_id=str(payload["id"]) if payload.get("id") is not None else None,
            recipient_name=payload.get("recipientName") or "",
            street_address=payload.get("streetAddress") or "",
            city=payload.get("city") or "",
            district=payload.get("district") or "",
            postal_code=payload.get("postalCode") or "",
            phone_number=payload.get("phoneNumber") or "",
            building_number=payload.get("buildingNumber"),
            secondary_number=payload.get("secondaryNumber"),
            label=payload.get("label"),
            is_default=bool(payload.get("isDefault", False)),
        )

    def to_payload(self) -> dict:
        return {
            "id": self.address_id,
            "recipientName": self.recipient_name or "",
            "streetAddress": self.street_address or "",
            "city": self.city or "",
            "district": self.district or "",
            "postalCode": self.postal_code or "",
            "phoneNumber": self.phone_number or "",
            "buildingNumber": self.building_number,
            "secondaryNumber": self.secondary_number,
            "label": self.label,
            "isDefault": self.is_default,
        }


def _address_rows(payload: Any) -> list[dict]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("addresses"), list):
        return payload["addresses"]
    return []


def fetch_addresses(backend: Backend, token: str) -> list[Address]:
    payload = backend.get("/addresses", token=token).expect_ok("Failed to fetch addresses")
    return [Address.from_payload(row) for row in _address_rows(payload)]


def default_address(addresses: list[Address]) -> Address | None:
    return next((address for address in addresses if address.is_default), None)


def fetch_default_address(backend: Backend, token: str) -> Address | None:
    """The user's default address, or None when they have not set one."""
    try:
        payload = backend.get("/addresses/default", token=token).expect_ok()
    except BackendError as exc:
        if exc.status_code == 404:
            return None
        raise
    if isinstance(payload, dict) and "address" in payload:
        payload = payload["address"]
    return Address.from_payload(payload) if payload else None
