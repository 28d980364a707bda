from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from leasing.admin import PaymentForm
from leasing.models import Lease, Payment
from leasing.services.payments import record_payment

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def plain_static_storage(settings):
    # No collectstatic manifest exists in tests.
    settings.STORAGES = {
        **settings.STORAGES,
        "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
    }


@pytest.fixture
def admin_web(client):
    user = get_user_model().objects.create_superuser(username="root", password="secret123", email="root@acme.test")
    client.force_login(user)
    return client


@pytest.mark.parametrize("query", ["", "?expiring_soon=yes", "?past_end_date=yes"])
def test_lease_changelist(admin_web, lease, query):
    assert admin_web.get(f"/admin/leasing/lease/{query}").status_code == 200


def test_generate_payments_action(admin_web, lease):
    res = admin_web.post("/admin/leasing/lease/", {
        "action": "generate_payments", "_selected_action": [lease.pk],
    })
    assert res.status_code == 302
    assert lease.payments.count() == 6


def test_terminate_action(admin_web, lease):
    admin_web.post("/admin/leasing/lease/", {"action": "terminate", "_selected_action": [lease.pk]})
    lease.refresh_from_db()
    assert lease.status == Lease.Status.TERMINATED


def test_payment_and_document_changelists(admin_web, payment):
    assert admin_web.get("/admin/leasing/payment/").status_code == 200
    assert admin_web.get("/admin/leasing/document/").status_code == 200


# ---------- payment editing ----------

def _change_form(payment, **overrides):
    data = {
        "lease": payment.lease_id, "amount": str(payment.amount), "due_date": payment.due_date.isoformat(),
        "payment_method": "", "reference_number": "", "check_number": "", "notes": "", "_save": "Save",
    }
    data.update(overrides)
    return data


def test_amount_edit_recomputes_balance(admin_web, payment):
    res = admin_web.post(f"/admin/leasing/payment/{payment.pk}/change/", _change_form(payment, amount="1200.00"))

    assert res.status_code == 302
    payment.refresh_from_db()
    assert payment.amount == Decimal("1200.00")
    assert payment.remaining_amount == Decimal("1200.00")


def test_status_cannot_be_edited(admin_web, payment):
    admin_web.post(f"/admin/leasing/payment/{payment.pk}/change/", _change_form(payment, status="paid"))
    payment.refresh_from_db()
    assert payment.status == Payment.Status.PENDING


def test_amount_is_read_only_after_a_payment(admin_web, payment):
    record_payment(payment.pk, Decimal("100.00"), "cash")

    admin_web.post(f"/admin/leasing/payment/{payment.pk}/change/", _change_form(payment, amount="1200.00"))

    payment.refresh_from_db()
    assert payment.amount == Decimal("1000.00")
    assert payment.remaining_amount == Decimal("900.00")


def test_inline_form_rejects_amount_change_after_a_payment(payment):
    record_payment(payment.pk, Decimal("100.00"), "cash")
    payment.refresh_from_db()

    stored = {"status": payment.status, "paid_amount": str(payment.paid_amount),
              "remaining_amount": str(payment.remaining_amount)}

    assert PaymentForm(data=_change_form(payment, **stored), instance=payment).is_valid()
    form = PaymentForm(data=_change_form(payment, amount="1200.00", **stored), instance=payment)
    assert not form.is_valid()
    assert list(form.errors) == ["amount"]


def test_cancel_action(admin_web, payment, lease):
    paid = Payment.objects.create(lease=lease, amount=Decimal("1000.00"), due_date=date(2024, 2, 1),
                                  status=Payment.Status.PAID, paid_amount=Decimal("1000.00"))

    admin_web.post("/admin/leasing/payment/", {"action": "cancel", "_selected_action": [payment.pk, paid.pk]})

    assert Payment.objects.get(pk=payment.pk).status == Payment.Status.CANCELLED
    assert Payment.objects.get(pk=paid.pk).status == Payment.Status.PAID
