from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.models import Company, Profile, Property, Unit
from leasing.models import Lease, Payment

User = get_user_model()


# ---------- organisation ----------

@pytest.fixture
def company(db):
    return Company.objects.create(name="Acme Rentals", email="office@acme.test")


@pytest.fixture
def prop(company):
    return Property.objects.create(company=company, name="Elm Court", address="12 Elm St")


@pytest.fixture
def unit(prop):
    return Unit.objects.create(property=prop, unit_number="101", rent_price=Decimal("1000.00"))


# ---------- users ----------

@pytest.fixture
def tenant(company):
    user = User.objects.create_user(username="tenant", email="tenant@acme.test", password="secret123")
    Profile.objects.create(user=user, company=company, full_name="Tina Tenant", role="TENANT")
    return user


@pytest.fixture
def manager(company):
    user = User.objects.create_user(username="manager", email="manager@acme.test", password="secret123")
    Profile.objects.create(user=user, company=company, full_name="Max Manager", role="MANAGER")
    return user


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username="staff", password="secret123", is_staff=True)


# ---------- leases ----------

@pytest.fixture
def make_lease(company, unit, tenant):
    def _make(**overrides):
        fields = {
            "company": company,
            "unit": unit,
            "tenant": tenant,
            "start_date": date(2024, 1, 1),
            "end_date": date(2024, 6, 1),
            "rent_amount": Decimal("1000.00"),
            "payment_frequency": Lease.Frequency.MONTHLY,
            "payment_day": 1,
            "status": Lease.Status.ACTIVE,
        }
        fields.update(overrides)
        return Lease.objects.create(**fields)
    return _make


@pytest.fixture
def lease(make_lease):
    return make_lease()


@pytest.fixture
def payment(lease):
    return Payment.objects.create(lease=lease, amount=Decimal("1000.00"), due_date=date(2024, 1, 1))


# ---------- API ----------

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def manager_client(api_client, manager):
    api_client.force_authenticate(manager)
    return api_client


@pytest.fixture
def tenant_client(api_client, tenant):
    api_client.force_authenticate(tenant)
    return api_client
