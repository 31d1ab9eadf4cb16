"""Delivery locations: shipping/tax zones with rate multipliers.

Rates come from the backend as decimal fractions serialized as strings
(``"0.14"``) and are only parsed when a price is computed.
"""

from typing import Any

import structlog
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, String

from ordering.domain import ordering
from shared.backend import Backend
from shared.money import parse_amount

logger = structlog.get_logger(__name__)


@ordering.value_object
class Location:
    """A delivery zone. Rates stay as sent until a price is computed."""

    location_id = String(required=True, max_length=50)
    name = String(max_length=255, default="")
    city = String(max_length=100, default="")
    tax_rate = String(max_length=20, default="")
    shipping_rate = String(max_length=20, default="")
    active = Boolean(default=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Location":
        return cls(
            location_id=_text(payload.get("id")) or None,
            name=payload.get("name") or "",
            city=payload.get("city") or "",
            tax_rate=_text(payload.get("taxRate")),
            shipping_rate=_text(payload.get("shippingRate")),
            active=bool(payload.get("active", True)),
        )

    @property
    def tax_multiplier(self) -> float:
        return parse_amount(self.tax_rate)

    @property
    def shipping_multiplier(self) -> float:
        return parse_amount(self.shipping_rate)

    def to_payload(self) -> dict:
        return {
            "id": self.location_id,
            "name": self.name or "",
            "city": self.city or "",
            "taxRate": self.tax_rate or "",
            "shippingRate": self.shipping_rate or "",
            "active": self.active,
        }


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _location_rows(payload: Any) -> list[dict]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "locations"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def fetch_active_locations(backend: Backend) -> list[Location]:
    """Public location list, inactive zones dropped."""
    payload = backend.get("/locations").expect_ok("Failed to fetch locations")
    locations = [Location.from_payload(row) for row in _location_rows(payload)]
    active = [location for location in locations if location.active]
    logger.debug("locations_loaded", total=len(locations), active=len(active))
    return active


def cities(locations: list[Location]) -> list[str]:
    return sorted({location.city for location in locations if location.city})


def locations_in_city(locations: list[Location], city: str) -> list[Location]:
    return [location for location in locations if location.city == city]


def find_location(locations: list[Location], location_id: str) -> Location | None:
    return next((location for location in locations if location.location_id == str(location_id)), None)


@ordering.value_object
class DeliveryRates:
    """Rates as entered in the back-office: decimal fractions between 0 and 1."""

    tax_rate = Float(required=True, min_value=0.0, max_value=1.0)
    shipping_rate = Float(required=True, min_value=0.0, max_value=1.0)


_RATE_FIELDS = {"tax_rate": "taxRate", "shipping_rate": "shippingRate"}


def check_rates(tax_rate: str, shipping_rate: str) -> DeliveryRates:
    """Raises ValidationError, keyed by wire name, when either rate is not a number in ``[0, 1]``."""
    try:
        return DeliveryRates(tax_rate=tax_rate, shipping_rate=shipping_rate)
    except ValidationError as exc:
        raise ValidationError(
            {_RATE_FIELDS.get(field, field): ["Rate must be between 0 and 1"] for field in exc.messages}
        ) from None
