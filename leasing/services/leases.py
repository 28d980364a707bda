# leasing/services/leases.py
from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.utils import timezone

from core.models import Unit
from core.services.activity import log_activity
from leasing.exceptions import InvalidLeaseDates, InvalidTransition, MissingEndDate
from leasing.models import Lease, Payment
from leasing.schedule import due_dates
from .base import atomic_or_conflict

logger = logging.getLogger(__name__)


def _lock_lease(lease_id: int) -> Lease:
    return Lease.objects.select_for_update().get(pk=lease_id)


def _reject_terminal(lease: Lease, operation: str) -> None:
    if lease.status in Lease.TERMINAL_STATUSES:
        logger.warning("Cannot %s lease #%s: status is %s", operation, lease.pk, lease.status)
        raise InvalidTransition(f"Cannot {operation} lease #{lease.pk}: it is already {lease.status}.")


@atomic_or_conflict
def activate_lease(lease_id: int, user=None) -> Lease:
    lease = _lock_lease(lease_id)
    if lease.status != Lease.Status.DRAFT:
        logger.warning("Cannot activate lease #%s: status is %s", lease.pk, lease.status)
        raise InvalidTransition(f"Only draft leases can be activated (lease #{lease.pk} is {lease.status}).")

    unit = Unit.objects.select_for_update().get(pk=lease.unit_id)
    lease.status = Lease.Status.ACTIVE
    lease.save(update_fields=["status", "updated_at"])
    unit.status = Unit.Status.OCCUPIED
    unit.save(update_fields=["status"])

    log_activity(user, "LEASE_ACTIVATED", f"Lease #{lease.pk} on {unit}")
    logger.info("Lease #%s activated; unit #%s occupied", lease.pk, unit.pk)
    return lease


@atomic_or_conflict
def terminate_lease(lease_id: int, reason: str, date: date | None = None, user=None) -> Lease:
    lease = _lock_lease(lease_id)
    _reject_terminal(lease, "terminate")

    unit = Unit.objects.select_for_update().get(pk=lease.unit_id)
    lease.status = Lease.Status.TERMINATED
    lease.termination_date = date or timezone.localdate()
    lease.termination_reason = reason
    lease.save(update_fields=["status", "termination_date", "termination_reason", "updated_at"])
    unit.status = Unit.Status.AVAILABLE
    unit.save(update_fields=["status"])

    log_activity(user, "LEASE_TERMINATED", f"Lease #{lease.pk} on {lease.termination_date}: {reason}")
    logger.info("Lease #%s terminated on %s; unit #%s available", lease.pk, lease.termination_date, unit.pk)
    return lease


@atomic_or_conflict
def renew_lease(lease_id: int, new_end_date: date, new_rent_amount: Decimal | None = None, user=None) -> Lease:
    """
    Replace the lease with a new draft lease that starts the day after the
    current one ends. Returns the new lease; the current one becomes renewed.
    """
    lease = _lock_lease(lease_id)
    _reject_terminal(lease, "renew")
    if lease.end_date is None:
        logger.warning("Cannot renew lease #%s: it has no end date", lease.pk)
        raise MissingEndDate(f"Lease #{lease.pk} is open-ended; set an end date before renewing it.")

    start_date = lease.end_date + timedelta(days=1)
    if new_end_date < start_date:
        logger.warning("Cannot renew lease #%s until %s: renewal starts %s", lease.pk, new_end_date, start_date)
        raise InvalidLeaseDates(f"The renewal must end on or after {start_date.isoformat()}.")

    renewed = Lease.objects.create(
        company_id=lease.company_id,
        unit_id=lease.unit_id,
        tenant_id=lease.tenant_id,
        start_date=start_date,
        end_date=new_end_date,
        rent_amount=lease.rent_amount if new_rent_amount is None else new_rent_amount,
        deposit_amount=lease.deposit_amount,
        payment_frequency=lease.payment_frequency,
        payment_day=lease.payment_day,
        status=Lease.Status.DRAFT,
        notes=lease.notes,
        special_terms=lease.special_terms,
    )
    lease.status = Lease.Status.RENEWED
    lease.save(update_fields=["status", "updated_at"])

    log_activity(user, "LEASE_RENEWED", f"Lease #{lease.pk} renewed as lease #{renewed.pk} until {new_end_date}")
    logger.info("Lease #%s renewed as #%s (%s - %s)", lease.pk, renewed.pk, start_date, new_end_date)
    return renewed


@atomic_or_conflict
def generate_payment_schedule(lease_id: int, user=None) -> dict:
    lease = _lock_lease(lease_id)
    result = {"lease_id": lease.pk, "generated": False, "created": 0}

    if lease.status != Lease.Status.ACTIVE:
        logger.info("Skipping schedule for lease #%s: status is %s", lease.pk, lease.status)
        result["total"] = lease.payments.count()
        return result

    # Computed up front so an unknown frequency fails before any row is written.
    dates = due_dates(lease.start_date, lease.end_date, lease.payment_frequency, lease.payment_day)

    created = 0
    for due_date in dates:
        _, was_created = lease.payments.get_or_create(
            due_date=due_date,
            defaults={
                "amount": lease.rent_amount,
                "remaining_amount": lease.rent_amount,
                "status": Payment.Status.PENDING,
            },
        )
        if was_created:
            created += 1

    result.update(generated=True, created=created, total=lease.payments.count())
    log_activity(user, "PAYMENT_SCHEDULE_GENERATED", f"Lease #{lease.pk}: {created} new payments")
    logger.info("Generated %s payments for lease #%s (%s scheduled)", created, lease.pk, len(dates))
    return result


@atomic_or_conflict
def expire_leases(today: date | None = None) -> int:
    today = today or timezone.localdate()
    ids = list(Lease.objects.expired(today=today).select_for_update().values_list("pk", flat=True))
    if not ids:
        return 0

    Lease.objects.filter(pk__in=ids).update(status=Lease.Status.EXPIRED, updated_at=timezone.now())
    log_activity(None, "LEASES_EXPIRED", "Leases " + ", ".join(f"#{pk}" for pk in ids))
    logger.info("Expired %s leases ending before %s", len(ids), today)
    return len(ids)
