"""Promo codes: validation at checkout and the admin view of codes.

Codes are normalized (trimmed, upper-cased) before they reach the backend.
The backend computes the discount amount; this module only carries it.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from ordering.domain import ordering
from shared.backend import Backend
from shared.errors import BackendError
from shared.money import format_amount, parse_amount

logger = structlog.get_logger(__name__)


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    UPCOMING = "upcoming"
    MAXED_OUT = "maxed_out"


def normalize_code(code: str | None) -> str:
    normalized = (code or "").strip().upper()
    if not normalized:
        raise ValidationError({"discountCode": ["Please enter a promo code"]})
    return normalized


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _optional(value: Any, cast) -> Any:
    return cast(value) if value is not None else None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object
class DiscountCode:
    """A promo code as listed in the back-office."""

    code_id = String(max_length=50)
    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    value = Float(default=0.0, min_value=0.0)
    used_count = Integer(default=0, min_value=0)
    min_purchase = Float(min_value=0.0)
    max_uses = Integer(min_value=0)
    valid_from = DateTime()
    valid_to = DateTime()
    active = Boolean(default=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "DiscountCode":
        try:
            valid_from = _parse_datetime(payload.get("validFrom"))
            valid_to = _parse_datetime(payload.get("validTo"))
        except ValueError:
            raise ValidationError({"validity": ["Malformed validity dates"]}) from None
        return cls(
            code_id=_optional(payload.get("id"), str),
            code=payload.get("code"),
            discount_type=payload.get("type"),
            value=parse_amount(payload.get("value")),
            used_count=int(payload.get("usedCount") or 0),
            min_purchase=_optional(payload.get("minPurchase"), parse_amount),
            max_uses=_optional(payload.get("maxUses"), int),
            valid_from=valid_from,
            valid_to=valid_to,
            active=bool(payload.get("active", True)),
        )

    def is_expired(self, now: datetime) -> bool:
        return self.valid_to is not None and self.valid_to < now

    def is_upcoming(self, now: datetime) -> bool:
        return self.valid_from is not None and self.valid_from > now

    def is_maxed_out(self) -> bool:
        return bool(self.max_uses) and self.used_count >= self.max_uses

    def status(self, now: datetime | None = None) -> DiscountStatus:
        """Badge shown in the admin table; the first matching rule wins."""
        now = now or datetime.now(UTC)
        if not self.active:
            return DiscountStatus.INACTIVE
        if self.is_expired(now):
            return DiscountStatus.EXPIRED
        if self.is_upcoming(now):
            return DiscountStatus.UPCOMING
        if self.is_maxed_out():
            return DiscountStatus.MAXED_OUT
        return DiscountStatus.ACTIVE


@ordering.value_object
class AppliedDiscount:
    """A code the backend accepted for the current subtotal."""

    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    value = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)

    @property
    def kind(self) -> DiscountType:
        return DiscountType(self.discount_type)

    def label(self, currency: str) -> str:
        if self.kind is DiscountType.PERCENTAGE:
            return f"-{self.value:g}%"
        return f"-{currency} {format_amount(self.value)}"

    def to_payload(self, currency: str) -> dict:
        return {
            "code": self.code,
            "type": self.discount_type,
            "value": self.value,
            "discountAmount": self.discount_amount,
            "label": self.label(currency),
        }


def validate_discount(backend: Backend, token: str | None, code: str, subtotal: float) -> AppliedDiscount:
    """Ask the backend whether ``code`` applies to ``subtotal``.

    Raises ValidationError carrying the backend's reason (expired, not yet
    valid, usage limit reached, minimum purchase, unknown code).
    """
    normalized = normalize_code(code)
    response = backend.post("/discounts/validate", token=token, json={"code": normalized, "subtotal": subtotal})
    try:
        payload = response.expect_ok("Invalid discount code")
    except BackendError as exc:
        if exc.status_code >= 500:
            raise
        logger.info("discount_rejected", code=normalized, reason=exc.message)
        raise ValidationError({"discountCode": [exc.message]}) from exc

    if not payload.get("valid"):
        raise ValidationError({"discountCode": [payload.get("error") or "Invalid discount code"]})

    details = payload.get("discountCode") or {}
    applied = AppliedDiscount(
        code=details.get("code", normalized),
        discount_type=details.get("type") or DiscountType.FIXED.value,
        value=parse_amount(details.get("value")),
        discount_amount=parse_amount(payload.get("discountAmount")),
    )
    logger.info("discount_applied", code=applied.code, discount_amount=applied.discount_amount)
    return applied


def discount_rows(payload: Any) -> list[dict]:
    """Admin list bodies come either as a bare list or ``{discounts, pagination}``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("discounts"), list):
        return payload["discounts"]
    return []


def discount_codes(rows: list[dict]) -> list[DiscountCode]:
    """Codes from an admin list body. Rows that do not parse are logged and left out."""
    codes = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            codes.append(DiscountCode.from_payload(row))
        except (ValidationError, ValueError, TypeError) as exc:
            logger.warning("discount_row_skipped", code=row.get("code"), error=str(exc))
    return codes


def discount_stats(codes: list[DiscountCode]) -> dict:
    return {
        "total": len(codes),
        "active": sum(1 for code in codes if code.active),
        "totalUsages": sum(code.used_count for code in codes),
    }


def check_validity_window(valid_from: datetime, valid_to: datetime) -> None:
    if _parse_datetime(valid_from) >= _parse_datetime(valid_to):
        raise ValidationError({"validTo": ["validTo must be after validFrom"]})
