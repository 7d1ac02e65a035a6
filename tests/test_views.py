"""Tests for the JSON views and exports."""
import io
import json
from datetime import timedelta
from decimal import Decimal
from urllib.parse import urlencode

import pytest
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook

from apps.fleet.models import Vehicle
from apps.inspections.models import InspectionRecord
from apps.insurance.models import InsuranceRecord


def _today():
    return timezone.localdate()


def _post_json(client, url, data):
    return client.post(url, data=json.dumps(data, default=str), content_type="application/json")


@pytest.mark.django_db
class TestVehicleViews:

    def test_login_required(self, client):
        response = client.get(reverse("fleet:vehicle_list"))
        assert response.status_code == 302

    def test_list_is_scoped(self, login, chief_member, make_vehicle, other_location):
        make_vehicle(plate="34HOME01")
        make_vehicle(plate="06AWAY01", location=other_location)

        data = login(chief_member).get(reverse("fleet:vehicle_list")).json()

        assert [v["plate"] for v in data["data"]] == ["34HOME01"]
        assert data["pagination"]["total"] == 1

    def test_alarm_filter(self, login, admin_member, make_vehicle):
        today = _today()
        make_vehicle(plate="34LATE01", inspection_expiry=today - timedelta(days=3))
        make_vehicle(plate="34FINE01", inspection_expiry=today + timedelta(days=200),
                     traffic_insurance_expiry=today + timedelta(days=200),
                     comprehensive_insurance_expiry=today + timedelta(days=200))

        data = login(admin_member).get(reverse("fleet:vehicle_list"), {"alarm": "expired"}).json()

        assert [v["plate"] for v in data["data"]] == ["34LATE01"]
        assert data["data"][0]["alarms"]["inspection"]["alarm"] == "expired"
        assert data["data"][0]["alarms"]["inspection"]["days_remaining"] < 0

    def test_detail_out_of_scope(self, login, chief_member, make_vehicle, other_location):
        v = make_vehicle(location=other_location)
        response = login(chief_member).get(reverse("fleet:vehicle_detail", args=[v.pk]))
        assert response.status_code == 404

    def test_create(self, login, manager_member, location):
        response = _post_json(login(manager_member), reverse("fleet:vehicle_create"), {
            "plate": "34 new 001",
            "location": location.pk,
            "make": "Fiat",
            "model": "Doblo",
            "status": "active",
            "inspection_tracked": True,
            "insurance_tracked": True,
        })
        assert response.status_code == 201
        body = response.json()
        assert body["plate"] == "34NEW001"
        assert body["alarms"]["inspection"]["alarm"] == "no_data"

    def test_create_duplicate_plate(self, login, admin_member, vehicle):
        response = _post_json(login(admin_member), reverse("fleet:vehicle_create"), {
            "plate": "34ABC123",
            "status": "active",
        })
        assert response.status_code == 400
        assert "plate" in response.json()["errors"]

    def test_chief_cannot_create(self, login, chief_member):
        response = _post_json(login(chief_member), reverse("fleet:vehicle_create"), {"plate": "X1", "status": "active"})
        assert response.status_code == 403

    def test_reactivate_parked_vehicle(self, login, admin_member, make_vehicle):
        v = make_vehicle(status=Vehicle.STATUS_PARKED)
        response = _post_json(login(admin_member), reverse("fleet:vehicle_update", args=[v.pk]), {"status": "active"})
        assert response.status_code == 200
        v.refresh_from_db()
        assert v.status == Vehicle.STATUS_ACTIVE

    def test_form_encoded_patch(self, login, admin_member, make_vehicle):
        v = make_vehicle(status=Vehicle.STATUS_PARKED, make="Ford")
        response = login(admin_member).patch(
            reverse("fleet:vehicle_update", args=[v.pk]),
            data=urlencode({"status": "active", "notes": "Back from the garage"}),
            content_type="application/x-www-form-urlencoded",
        )
        assert response.status_code == 200
        v.refresh_from_db()
        assert v.status == Vehicle.STATUS_ACTIVE
        assert v.notes == "Back from the garage"
        assert v.make == "Ford"


@pytest.mark.django_db
class TestInspectionViews:

    def test_create_reports_vehicle_expiry(self, login, admin_member, vehicle):
        today = _today()
        response = _post_json(login(admin_member), reverse("inspections:inspection_create"), {
            "vehicle": vehicle.pk,
            "inspection_date": today,
            "valid_until": today + timedelta(days=730),
            "outcome": "passed",
            "station": "Kartal",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["vehicle_inspection_expiry"] == (today + timedelta(days=730)).isoformat()
        assert body["record"]["vehicle"]["plate"] == "34ABC123"
        assert InspectionRecord.objects.get().created_by == admin_member

    def test_create_validation_error(self, login, admin_member, vehicle):
        response = _post_json(login(admin_member), reverse("inspections:inspection_create"), {"vehicle": vehicle.pk})
        assert response.status_code == 400
        assert "outcome" in response.json()["errors"]

    def test_create_unknown_vehicle(self, login, admin_member):
        today = _today()
        response = _post_json(login(admin_member), reverse("inspections:inspection_create"), {
            "vehicle": 999999,
            "inspection_date": today,
            "valid_until": today,
            "outcome": "passed",
        })
        assert response.status_code == 404

    def test_chief_cannot_delete(self, login, chief_member, vehicle, add_inspection):
        record = add_inspection(vehicle, _today() + timedelta(days=100))
        response = login(chief_member).post(reverse("inspections:inspection_delete", args=[record.pk]))
        assert response.status_code == 403
        assert InspectionRecord.objects.filter(pk=record.pk).exists()

    def test_delete(self, login, admin_member, vehicle, add_inspection):
        record = add_inspection(vehicle, _today() + timedelta(days=100))
        response = login(admin_member).post(reverse("inspections:inspection_delete", args=[record.pk]))
        assert response.status_code == 200
        assert response.json() == {"deleted": True, "vehicle_inspection_expiry": None}

    def test_list_summary(self, login, admin_member, vehicle, make_vehicle, add_inspection):
        today = _today()
        add_inspection(vehicle, today - timedelta(days=5))
        add_inspection(vehicle, today + timedelta(days=10))
        add_inspection(vehicle, today + timedelta(days=400), outcome="failed")
        parked = make_vehicle(status=Vehicle.STATUS_PARKED)
        add_inspection(parked, today + timedelta(days=10))

        data = login(admin_member).get(reverse("inspections:list")).json()

        assert data["summary"] == {
            "total": 3,
            "passed": 2,
            "failed": 1,
            "expired": 1,
            "approaching": 1,
            "pass_rate": 67,
        }

        data = login(admin_member).get(reverse("inspections:list"), {"state": "approaching"}).json()
        assert len(data["data"]) == 1


@pytest.mark.django_db
class TestInsuranceViews:

    def test_list_summary(self, login, manager_member, vehicle, add_policy):
        today = _today()
        add_policy(vehicle, today + timedelta(days=100), premium="1500.00", payment_status="paid")
        add_policy(vehicle, today - timedelta(days=1), sub_type="comprehensive", premium="2500.50")

        data = login(manager_member).get(reverse("insurance:list")).json()

        assert data["summary"]["total"] == 2
        assert data["summary"]["expired"] == 1
        assert Decimal(data["summary"]["premium_total"]) == Decimal("4000.50")
        assert Decimal(data["summary"]["premium_unpaid"]) == Decimal("2500.50")

        data = login(manager_member).get(reverse("insurance:list"), {"sub_type": "traffic"}).json()
        assert [r["sub_type"] for r in data["data"]] == ["traffic"]

    def test_update_sub_type(self, login, admin_member, vehicle, add_policy):
        policy = add_policy(vehicle, _today() + timedelta(days=90))
        response = _post_json(
            login(admin_member),
            reverse("insurance:policy_update", args=[policy.pk]),
            {"sub_type": "comprehensive"},
        )
        assert response.status_code == 200
        vehicle.refresh_from_db()
        assert vehicle.traffic_insurance_expiry is None
        assert vehicle.comprehensive_insurance_expiry == policy.valid_until

    def test_chief_cannot_delete(self, login, chief_member, vehicle, add_policy):
        policy = add_policy(vehicle, _today())
        response = login(chief_member).post(reverse("insurance:policy_delete", args=[policy.pk]))
        assert response.status_code == 403
        assert InsuranceRecord.objects.filter(pk=policy.pk).exists()


@pytest.mark.django_db
class TestDashboard:

    def test_kpis_and_alarms(self, login, admin_member, make_vehicle):
        today = _today()
        make_vehicle(plate="34LATE01", inspection_expiry=today - timedelta(days=2))
        make_vehicle(plate="34SOON01", traffic_insurance_expiry=today + timedelta(days=3))
        make_vehicle(plate="34FINE01", inspection_expiry=today + timedelta(days=300),
                     traffic_insurance_expiry=today + timedelta(days=300))
        make_vehicle(plate="34PARK01", status=Vehicle.STATUS_PARKED, inspection_expiry=today - timedelta(days=9))

        data = login(admin_member).get(reverse("core:dashboard")).json()

        assert data["kpis"]["total"] == 4
        assert data["kpis"]["active"] == 3
        assert data["kpis"]["parked"] == 1
        assert [a["plate"] for a in data["alarms"]] == ["34LATE01", "34SOON01"]
        assert data["companies"][0]["company"] == "Anadolu Logistics"
        assert data["companies"][0]["counts"]["parked"] == 1
        assert data["companies"][0]["total"] == 4


@pytest.mark.django_db
class TestExports:

    def test_compliance_workbook(self, login, admin_member, vehicle, add_inspection, add_policy):
        today = _today()
        add_inspection(vehicle, today - timedelta(days=1))
        add_policy(vehicle, today + timedelta(days=200), premium="900.00")

        response = login(admin_member).get(reverse("reports:export_compliance_xlsx"))

        assert response.status_code == 200
        assert "attachment" in response["Content-Disposition"]
        wb = load_workbook(io.BytesIO(response.content))
        assert wb.sheetnames == ["Vehicles", "Inspections", "Insurance"]

        vehicles = list(wb["Vehicles"].iter_rows(values_only=True))
        assert vehicles[0][0] == "Plate"
        assert vehicles[1][0] == "34ABC123"
        assert vehicles[1][9] == "expired"
        assert vehicles[1][12] == "valid"

        assert wb["Inspections"].max_row == 2
        assert wb["Insurance"].max_row == 2

    def test_scoped_export(self, login, chief_member, make_vehicle, other_location):
        make_vehicle(plate="06AWAY01", location=other_location)
        response = login(chief_member).get(reverse("reports:export_compliance_xlsx"))
        wb = load_workbook(io.BytesIO(response.content))
        assert wb["Vehicles"].max_row == 1


@pytest.mark.django_db
class TestTenantViews:

    def test_select_and_locations(self, login, admin_member, location):
        client = login(admin_member)
        data = client.get(reverse("tenants:select")).json()
        assert [t["name"] for t in data["tenants"]] == ["Anadolu Logistics"]

        locations = client.get(reverse("tenants:locations")).json()["data"]
        assert locations[0]["responsible_email"] == "depot@example.com"

    def test_set_foreign_tenant_forbidden(self, login, admin_member, other_tenant):
        response = login(admin_member).post(reverse("tenants:set", args=[other_tenant.pk]))
        assert response.status_code == 403
