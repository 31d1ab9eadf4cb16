"""Orders as seen by customers and by the back-office.

Order state lives in the backend. The storefront only checks the shape of
admin edits and report filters before forwarding them.
"""

from datetime import date
from enum import Enum
from typing import Any

from protean.exceptions import ValidationError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELED = "canceled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class ReportPeriod(Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# ---------------------------------------------------------------------------
# Admin edits
# ---------------------------------------------------------------------------
def order_update_payload(
    status: str | None = None,
    payment_status: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the partial update body; at least one field must be given."""
    errors: dict[str, list[str]] = {}
    payload: dict[str, Any] = {}

    if status is not None:
        try:
            payload["status"] = OrderStatus(status).value
        except ValueError:
            errors["status"] = [f"Unknown order status: {status}"]
    if payment_status is not None:
        try:
            payload["paymentStatus"] = PaymentStatus(payment_status).value
        except ValueError:
            errors["paymentStatus"] = [f"Unknown payment status: {payment_status}"]
    if metadata is not None:
        payload["metadata"] = metadata

    if errors:
        raise ValidationError(errors)
    if not payload:
        raise ValidationError({"order": ["Nothing to update"]})
    return payload


# ---------------------------------------------------------------------------
# Report filters
# ---------------------------------------------------------------------------
def report_filters(
    period: str | None = None,
    on_date: date | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict[str, str]:
    """Query parameters for the order list and the analytics summary.

    ``period`` is anchored on ``on_date``; an explicit range needs both ends
    and must not run backwards.
    """
    params: dict[str, str] = {}
    if period is not None:
        try:
            params["period"] = ReportPeriod(period).value
        except ValueError:
            raise ValidationError({"period": [f"Unknown period: {period}"]}) from None
    if on_date is not None:
        params["date"] = on_date.isoformat()

    if (start_date is None) != (end_date is None):
        raise ValidationError({"dateRange": ["Both startDate and endDate are required"]})
    if start_date is not None and end_date is not None:
        if start_date > end_date:
            raise ValidationError({"dateRange": ["startDate must not be after endDate"]})
        params["startDate"] = start_date.isoformat()
        params["endDate"] = end_date.isoformat()
    return params
