from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from django.contrib.auth import get_user_model

from apps.fleet.models import Vehicle
from apps.inspections import services as inspection_services
from apps.insurance import services as insurance_services
from apps.tenants.models import Location, Tenant, TenantMembership

TZ = ZoneInfo("Europe/Istanbul")

# Midday, so a date exactly N days ahead sits N - 0.5 days away
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=TZ)
TODAY = date(2025, 6, 15)


def days(n: int) -> date:
    return TODAY + timedelta(days=n)


@pytest.fixture(autouse=True)
def compliance_settings(settings):
    settings.TIME_ZONE = "Europe/Istanbul"
    settings.FLEET_ALERT_WINDOW_DAYS = 30
    settings.FLEET_ADMIN_EMAIL = "fleet-admin@example.com"
    settings.FLEET_CRON_SECRET = "s3cret"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    return settings


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(name="Anadolu Logistics")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(name="Ege Transport")


@pytest.fixture
def location(tenant):
    return Location.objects.create(
        tenant=tenant,
        name="Istanbul Depot",
        responsible_name="Depot Chief",
        responsible_email="depot@example.com",
    )


@pytest.fixture
def other_location(tenant):
    return Location.objects.create(tenant=tenant, name="Ankara Depot", responsible_email="ankara@example.com")


@pytest.fixture
def make_vehicle(tenant, location):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        kwargs.setdefault("tenant", tenant)
        kwargs.setdefault("location", location)
        kwargs.setdefault("plate", f"34TST{counter['n']:03d}")
        expiry = {
            k: kwargs.pop(k)
            for k in ("inspection_expiry", "traffic_insurance_expiry", "comprehensive_insurance_expiry")
            if k in kwargs
        }
        v = Vehicle.objects.create(**kwargs)
        if expiry:
            Vehicle.objects.filter(pk=v.pk).update(**expiry)
            v.refresh_from_db()
        return v

    return _make


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle(plate="34 abc 123", make="Ford", model="Transit", year=2021)


@pytest.fixture
def add_inspection():
    def _add(vehicle, valid_until, outcome="passed", inspection_date=None, **extra):
        data = {
            "vehicle": vehicle.pk,
            "inspection_date": inspection_date or valid_until - timedelta(days=365),
            "valid_until": valid_until,
            "outcome": outcome,
        }
        data.update(extra)
        return inspection_services.create_inspection(data).record

    return _add


@pytest.fixture
def add_policy():
    def _add(vehicle, valid_until, sub_type="traffic", start_date=None, **extra):
        data = {
            "vehicle": vehicle.pk,
            "sub_type": sub_type,
            "start_date": start_date or valid_until - timedelta(days=365),
            "valid_until": valid_until,
        }
        data.update(extra)
        return insurance_services.create_policy(data).record

    return _add


def _user(username, **kwargs):
    User = get_user_model()
    return User.objects.create_user(username=username, password="pw", **kwargs)


@pytest.fixture
def superuser(db):
    User = get_user_model()
    return User.objects.create_superuser(username="root", email="root@example.com", password="pw")


@pytest.fixture
def admin_member(tenant):
    user = _user("admin", email="admin@example.com")
    TenantMembership.objects.create(tenant=tenant, user=user, role=TenantMembership.ROLE_ADMIN)
    return user


@pytest.fixture
def manager_member(tenant):
    user = _user("manager", email="manager@example.com")
    TenantMembership.objects.create(tenant=tenant, user=user, role=TenantMembership.ROLE_COMPANY_MANAGER)
    return user


@pytest.fixture
def chief_member(tenant, location):
    user = _user("chief", email="chief@example.com")
    TenantMembership.objects.create(
        tenant=tenant, user=user, role=TenantMembership.ROLE_LOCATION_CHIEF, location=location
    )
    return user


@pytest.fixture
def login(client):
    def _login(user):
        client.force_login(user)
        return client

    return _login
