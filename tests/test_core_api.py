import pytest
from django.contrib.auth import get_user_model

from core.models import ActivityLog, Profile
from core.services.activity import log_activity

pytestmark = pytest.mark.django_db

User = get_user_model()


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(admin_user)
    return api_client


# ---------- users ----------

def test_admin_creates_user_with_profile(admin_client, company):
    res = admin_client.post("/api/users/", {
        "username": "pm", "email": "pm@acme.test", "password": "secret123",
        "full_name": "Pat Manager", "role": "MANAGER", "company": company.pk,
    }, format="json")

    assert res.status_code == 201, res.data
    user = User.objects.get(username="pm")
    assert user.check_password("secret123")
    assert user.profile.role == "MANAGER"
    assert user.profile.company == company


def test_new_users_default_to_tenant(admin_client):
    res = admin_client.post("/api/users/", {"username": "renter", "password": "secret123"}, format="json")
    assert res.status_code == 201
    assert Profile.objects.get(user__username="renter").role == "TENANT"


def test_tenants_listing(admin_client, tenant, manager):
    res = admin_client.get("/api/users/tenants/")
    assert [row["username"] for row in res.data] == ["tenant"]


def test_managers_cannot_manage_users(manager_client):
    assert manager_client.get("/api/users/").status_code == 403


# ---------- me ----------

def test_me(tenant_client, tenant):
    res = tenant_client.get("/api/me/")
    assert res.data["username"] == "tenant"
    assert res.data["profile"]["role"] == "TENANT"


def test_profile_update_keeps_role(tenant_client, tenant):
    res = tenant_client.patch("/api/me/update_profile/", {"phone": "555-0100", "role": "ADMIN"}, format="json")
    assert res.status_code == 200
    tenant.profile.refresh_from_db()
    assert tenant.profile.phone == "555-0100"
    assert tenant.profile.role == "TENANT"


# ---------- inventory ----------

def test_manager_adds_unit(manager_client, prop):
    res = manager_client.post("/api/units/", {"property": prop.pk, "unit_number": "202", "rent_price": "850.00"},
                              format="json")
    assert res.status_code == 201
    assert res.data["status"] == "available"


def test_tenant_reads_but_cannot_add_units(tenant_client, prop, unit):
    assert tenant_client.get("/api/units/").status_code == 200
    res = tenant_client.post("/api/units/", {"property": prop.pk, "unit_number": "303"}, format="json")
    assert res.status_code == 403


# ---------- activity log ----------

def test_log_activity_drops_anonymous_users():
    from django.contrib.auth.models import AnonymousUser

    entry = log_activity(AnonymousUser(), "PING")
    assert entry.user is None


def test_activity_log_is_admin_only(manager_client, manager, admin_user):
    log_activity(manager, "LEASE_ACTIVATED", "Lease #1")
    assert manager_client.get("/api/activity-logs/").status_code == 403

    manager_client.force_authenticate(admin_user)
    res = manager_client.get("/api/activity-logs/")
    assert res.data["results"][0]["user_username"] == "manager"
    assert ActivityLog.objects.count() == 1
