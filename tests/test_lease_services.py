from datetime import date
from decimal import Decimal

import pytest
from django.db import OperationalError
from django.utils import timezone

from core.models import ActivityLog, Unit
from leasing.exceptions import ConcurrentModification, InvalidLeaseDates, InvalidTransition, MissingEndDate
from leasing.models import Lease, Payment
from leasing.services import leases as services
from leasing.services.base import atomic_or_conflict

pytestmark = pytest.mark.django_db


# ---------- payment schedule ----------

def test_generate_schedule_creates_one_pending_payment_per_period(lease):
    result = services.generate_payment_schedule(lease.pk)

    assert result == {"lease_id": lease.pk, "generated": True, "created": 6, "total": 6}
    payments = list(lease.payments.order_by("due_date"))
    assert [p.due_date for p in payments] == [date(2024, m, 1) for m in range(1, 7)]
    for p in payments:
        assert p.amount == Decimal("1000.00")
        assert p.remaining_amount == Decimal("1000.00")
        assert p.paid_amount == Decimal("0.00")
        assert p.status == Payment.Status.PENDING


def test_generate_schedule_is_idempotent(lease):
    services.generate_payment_schedule(lease.pk)
    first = set(lease.payments.values_list("pk", "due_date"))

    result = services.generate_payment_schedule(lease.pk)

    assert result["created"] == 0
    assert result["total"] == 6
    assert set(lease.payments.values_list("pk", "due_date")) == first


def test_generate_schedule_keeps_recorded_payments(lease):
    services.generate_payment_schedule(lease.pk)
    first = lease.payments.get(due_date=date(2024, 1, 1))
    Payment.objects.filter(pk=first.pk).update(status=Payment.Status.PAID, paid_amount=Decimal("1000.00"))

    services.generate_payment_schedule(lease.pk)

    first.refresh_from_db()
    assert first.status == Payment.Status.PAID
    assert lease.payments.count() == 6


@pytest.mark.parametrize("status", [Lease.Status.DRAFT, Lease.Status.TERMINATED, Lease.Status.EXPIRED])
def test_generate_schedule_skips_inactive_leases(make_lease, status):
    lease = make_lease(status=status)

    result = services.generate_payment_schedule(lease.pk)

    assert result["generated"] is False
    assert result["created"] == 0
    assert not lease.payments.exists()


def test_generate_schedule_for_open_ended_quarterly_lease(make_lease):
    lease = make_lease(end_date=None, payment_frequency=Lease.Frequency.QUARTERLY, payment_day=15)

    services.generate_payment_schedule(lease.pk)

    assert list(lease.payments.values_list("due_date", flat=True)) == [
        date(2024, 1, 15), date(2024, 4, 15), date(2024, 7, 15), date(2024, 10, 15), date(2025, 1, 15),
    ]


def test_generate_schedule_logs_activity(lease, manager):
    services.generate_payment_schedule(lease.pk, user=manager)
    log = ActivityLog.objects.get(action="PAYMENT_SCHEDULE_GENERATED")
    assert log.user == manager


# ---------- activate ----------

def test_activate_draft_lease_occupies_unit(make_lease, unit):
    lease = make_lease(status=Lease.Status.DRAFT)

    services.activate_lease(lease.pk)

    lease.refresh_from_db()
    unit.refresh_from_db()
    assert lease.status == Lease.Status.ACTIVE
    assert unit.status == Unit.Status.OCCUPIED


def test_activate_requires_draft(lease):
    with pytest.raises(InvalidTransition):
        services.activate_lease(lease.pk)


# ---------- terminate ----------

def test_terminate_frees_the_unit(lease, unit):
    Unit.objects.filter(pk=unit.pk).update(status=Unit.Status.OCCUPIED)

    services.terminate_lease(lease.pk, "Tenant moved out", date=date(2024, 3, 15))

    lease.refresh_from_db()
    unit.refresh_from_db()
    assert lease.status == Lease.Status.TERMINATED
    assert lease.termination_date == date(2024, 3, 15)
    assert lease.termination_reason == "Tenant moved out"
    assert unit.status == Unit.Status.AVAILABLE


def test_terminate_defaults_to_today(lease):
    services.terminate_lease(lease.pk, "Breach")
    lease.refresh_from_db()
    assert lease.termination_date == timezone.localdate()


@pytest.mark.parametrize("status", [Lease.Status.TERMINATED, Lease.Status.RENEWED])
def test_terminate_rejects_closed_leases(make_lease, unit, status):
    lease = make_lease(status=status)
    with pytest.raises(InvalidTransition):
        services.terminate_lease(lease.pk, "again")
    unit.refresh_from_db()
    assert unit.status == Unit.Status.AVAILABLE


# ---------- renew ----------

def test_renew_creates_draft_copy(make_lease):
    lease = make_lease(
        end_date=date(2024, 12, 31), deposit_amount=Decimal("500.00"),
        payment_frequency=Lease.Frequency.QUARTERLY, payment_day=5, special_terms="No pets",
    )

    renewed = services.renew_lease(lease.pk, date(2025, 12, 31), new_rent_amount=Decimal("1100.00"))

    lease.refresh_from_db()
    assert lease.status == Lease.Status.RENEWED
    assert renewed.pk != lease.pk
    assert renewed.status == Lease.Status.DRAFT
    assert renewed.start_date == date(2025, 1, 1)
    assert renewed.end_date == date(2025, 12, 31)
    assert renewed.rent_amount == Decimal("1100.00")
    assert renewed.deposit_amount == Decimal("500.00")
    assert renewed.payment_frequency == Lease.Frequency.QUARTERLY
    assert renewed.payment_day == 5
    assert renewed.special_terms == "No pets"
    assert (renewed.unit_id, renewed.tenant_id, renewed.company_id) == (lease.unit_id, lease.tenant_id, lease.company_id)
    assert Lease.objects.count() == 2


def test_renew_keeps_rent_by_default(lease):
    renewed = services.renew_lease(lease.pk, date(2025, 6, 1))
    assert renewed.rent_amount == lease.rent_amount
    assert renewed.start_date == date(2024, 6, 2)


def test_renew_open_ended_lease(make_lease):
    lease = make_lease(end_date=None)
    with pytest.raises(MissingEndDate):
        services.renew_lease(lease.pk, date(2025, 1, 1))
    lease.refresh_from_db()
    assert lease.status == Lease.Status.ACTIVE
    assert Lease.objects.count() == 1


def test_renew_end_date_must_follow_current_term(lease):
    with pytest.raises(InvalidLeaseDates):
        services.renew_lease(lease.pk, date(2024, 5, 1))


def test_renewed_lease_cannot_be_renewed_again(lease):
    services.renew_lease(lease.pk, date(2025, 6, 1))
    with pytest.raises(InvalidTransition):
        services.renew_lease(lease.pk, date(2026, 6, 1))


def test_renewal_can_be_activated(lease, unit):
    renewed = services.renew_lease(lease.pk, date(2025, 6, 1))
    services.activate_lease(renewed.pk)
    renewed.refresh_from_db()
    unit.refresh_from_db()
    assert renewed.status == Lease.Status.ACTIVE
    assert unit.status == Unit.Status.OCCUPIED


# ---------- expiry sweep ----------

def test_expire_leases_only_touches_active_leases_past_end(make_lease):
    past = make_lease(end_date=date(2024, 6, 1))
    ending_today = make_lease(end_date=date(2024, 6, 10))
    draft = make_lease(end_date=date(2024, 6, 1), status=Lease.Status.DRAFT)
    open_ended = make_lease(end_date=None)

    assert services.expire_leases(today=date(2024, 6, 10)) == 1

    statuses = dict(Lease.objects.values_list("pk", "status"))
    assert statuses[past.pk] == Lease.Status.EXPIRED
    assert statuses[ending_today.pk] == Lease.Status.ACTIVE
    assert statuses[draft.pk] == Lease.Status.DRAFT
    assert statuses[open_ended.pk] == Lease.Status.ACTIVE
    assert ActivityLog.objects.filter(action="LEASES_EXPIRED").count() == 1


def test_expire_leases_with_nothing_to_do(lease):
    assert services.expire_leases(today=date(2024, 1, 1)) == 0
    assert not ActivityLog.objects.filter(action="LEASES_EXPIRED").exists()


# ---------- conflicts ----------

def test_lock_failures_surface_as_concurrent_modification():
    @atomic_or_conflict
    def locked():
        raise OperationalError("could not obtain lock on row")

    with pytest.raises(ConcurrentModification):
        locked()


# ---------- rollback ----------

def test_terminate_rolls_back_when_the_unit_cannot_be_saved(lease, unit, monkeypatch):
    Unit.objects.filter(pk=unit.pk).update(status=Unit.Status.OCCUPIED)

    def broken_save(self, *args, **kwargs):
        raise RuntimeError("unit row unavailable")

    monkeypatch.setattr(Unit, "save", broken_save)
    with pytest.raises(RuntimeError):
        services.terminate_lease(lease.pk, "Tenant moved out")

    lease.refresh_from_db()
    assert lease.status == Lease.Status.ACTIVE
    assert lease.termination_date is None
    assert Unit.objects.get(pk=unit.pk).status == Unit.Status.OCCUPIED
    assert not ActivityLog.objects.filter(action="LEASE_TERMINATED").exists()


def test_renew_rolls_back_when_the_old_lease_cannot_be_saved(lease, monkeypatch):
    original_save = Lease.save

    def save_all_but_current(self, *args, **kwargs):
        if self.pk == lease.pk:
            raise RuntimeError("lease row unavailable")
        return original_save(self, *args, **kwargs)

    monkeypatch.setattr(Lease, "save", save_all_but_current)
    with pytest.raises(RuntimeError):
        services.renew_lease(lease.pk, date(2025, 6, 1))

    assert Lease.all_objects.count() == 1
    assert not Lease.objects.filter(status=Lease.Status.DRAFT).exists()
    assert Lease.objects.get(pk=lease.pk).status == Lease.Status.ACTIVE
