# leasing/services/payments.py
from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

from core.services.activity import log_activity
from leasing.exceptions import InvalidAmount, InvalidTransition, Overpayment
from leasing.models import Payment
from .base import atomic_or_conflict

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _to_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Invalid payment amount: {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("The payment amount must be greater than zero.")
    return amount


@atomic_or_conflict
def record_payment(
    payment_id: int,
    amount,
    method: str,
    reference: str | None = None,
    recorded_by=None,
) -> Payment:
    """
    Apply ``amount`` to the payment's outstanding balance.

    The payment becomes ``paid`` once the accumulated amount covers what is
    due, otherwise ``partial``. Amounts above the outstanding balance are
    rejected rather than absorbed.
    """
    amount = _to_amount(amount)
    if method not in Payment.Method.values:
        raise ValueError(f"Unknown payment method: {method!r}")

    payment = Payment.objects.select_for_update().get(pk=payment_id)
    if payment.status in Payment.TERMINAL_STATUSES:
        logger.warning("Rejected payment of %s on payment #%s: status is %s", amount, payment.pk, payment.status)
        raise InvalidTransition(f"Payment #{payment.pk} is {payment.status}; no further payments can be recorded.")

    outstanding = payment.amount - payment.paid_amount
    if amount > outstanding:
        logger.warning("Rejected overpayment of %s on payment #%s (outstanding %s)", amount, payment.pk, outstanding)
        raise Overpayment(f"{amount} exceeds the outstanding balance of {outstanding}.")

    payment.paid_amount += amount
    payment.remaining_amount = payment.amount - payment.paid_amount
    payment.payment_method = method
    payment.reference_number = reference
    payment.payment_date = timezone.localdate()
    payment.recorded_by = recorded_by if getattr(recorded_by, "is_authenticated", False) else None

    if payment.paid_amount >= payment.amount:
        payment.status = Payment.Status.PAID
        payment.remaining_amount = Decimal("0.00")
    else:
        payment.status = Payment.Status.PARTIAL
    payment.save()

    log_activity(recorded_by, "PAYMENT_RECORDED", f"Payment #{payment.pk}: {amount} by {method} ({payment.status})")
    logger.info("Recorded %s on payment #%s; remaining %s (%s)", amount, payment.pk, payment.remaining_amount, payment.status)
    return payment


def _apply_overdue(payment: Payment, today: date) -> bool:
    if payment.status != Payment.Status.PENDING or payment.due_date >= today:
        return False
    payment.status = Payment.Status.OVERDUE
    payment.save(update_fields=["status", "updated_at"])
    return True


@atomic_or_conflict
def mark_payment_overdue(payment_id: int, today: date | None = None, user=None) -> bool:
    today = today or timezone.localdate()
    payment = Payment.objects.select_for_update().get(pk=payment_id)
    if not _apply_overdue(payment, today):
        return False
    log_activity(user, "PAYMENT_MARKED_OVERDUE", f"Payment #{payment.pk} due {payment.due_date}")
    logger.info("Payment #%s marked overdue (due %s)", payment.pk, payment.due_date)
    return True


@atomic_or_conflict
def mark_overdue_payments(today: date | None = None) -> int:
    today = today or timezone.localdate()
    count = 0
    for payment in Payment.objects.pending().filter(due_date__lt=today).select_for_update():
        if _apply_overdue(payment, today):
            count += 1
    if count:
        log_activity(None, "PAYMENTS_MARKED_OVERDUE", f"{count} payments due before {today}")
        logger.info("Marked %s payments overdue (due before %s)", count, today)
    return count


@atomic_or_conflict
def cancel_payment(payment_id: int, reason: str | None = None, user=None) -> Payment:
    """Write off a payment nothing was recorded against; only pending or overdue payments qualify."""
    payment = Payment.objects.select_for_update().get(pk=payment_id)
    if payment.status not in (Payment.Status.PENDING, Payment.Status.OVERDUE):
        logger.warning("Cannot cancel payment #%s: status is %s", payment.pk, payment.status)
        raise InvalidTransition(f"Only pending or overdue payments can be cancelled (payment #{payment.pk} is {payment.status}).")

    payment.status = Payment.Status.CANCELLED
    payment.remaining_amount = Decimal("0.00")
    if reason:
        payment.notes = f"{payment.notes}\n{reason}".strip()
    payment.save(update_fields=["status", "remaining_amount", "notes", "updated_at"])

    log_activity(user, "PAYMENT_CANCELLED", f"Payment #{payment.pk} due {payment.due_date}: {reason or 'no reason given'}")
    logger.info("Payment #%s cancelled", payment.pk)
    return payment
