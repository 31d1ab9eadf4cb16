"""Reading the payment outcome from the success page's query string.

Cash orders redirect with ``?orderId=..&status=success``; the card gateway
redirects back with its own ``success``/``pending`` flags.
"""

from enum import Enum


class PaymentOutcome(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


def payment_outcome(
    order_id: str | None = None,
    status: str | None = None,
    success: str | None = None,
    pending: str | None = None,
) -> PaymentOutcome:
    if status == "success" or success == "true":
        return PaymentOutcome.SUCCESS
    if success == "false":
        return PaymentOutcome.FAILED
    if pending == "true":
        return PaymentOutcome.PENDING
    if order_id and not status:
        return PaymentOutcome.SUCCESS
    return PaymentOutcome.FAILED
