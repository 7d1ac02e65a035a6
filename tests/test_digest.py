"""Tests for the weekly compliance digest."""
import logging

import pytest
from django.core import mail

from apps.core.exceptions import JobExecutionError
from apps.fleet.models import Vehicle
from apps.jobs import digest
from apps.jobs.digest import build_weekly_report, digest_recipients, run_weekly_report
from apps.jobs.models import JobLog

from conftest import NOW, TODAY, days


@pytest.mark.django_db
class TestBuildWeeklyReport:

    def test_buckets(self, make_vehicle, add_policy):
        overdue = make_vehicle(plate="34OVR001", inspection_expiry=days(-3))
        soon = make_vehicle(plate="34SOON01", inspection_expiry=days(10))
        make_vehicle(plate="34FINE01", inspection_expiry=days(120))
        add_policy(overdue, days(-1), sub_type="traffic")
        add_policy(soon, days(30), sub_type="comprehensive")
        add_policy(soon, days(31), sub_type="traffic")

        report = build_weekly_report(NOW)

        assert report.generated_on == TODAY
        assert [i.plate for i in report.inspection_overdue] == ["34OVR001"]
        assert report.inspection_overdue[0].days_remaining == -3
        assert [i.plate for i in report.inspection_approaching] == ["34SOON01"]
        assert report.inspection_approaching[0].days_remaining == 10

        assert [(i.plate, i.sub_type) for i in report.insurance_overdue] == [("34OVR001", "traffic")]
        assert [(i.plate, i.sub_type) for i in report.insurance_approaching] == [("34SOON01", "comprehensive")]
        assert report.insurance_approaching[0].sub_type_label == "Comprehensive"
        assert report.total == 4

    def test_every_policy_is_listed(self, vehicle, add_policy):
        """Insurance is per policy, so superseded policies still show up."""
        add_policy(vehicle, days(-40))
        add_policy(vehicle, days(300))
        report = build_weekly_report(NOW)
        assert len(report.insurance_overdue) == 1

    def test_untracked_inspection_excluded(self, make_vehicle):
        make_vehicle(inspection_tracked=False, inspection_expiry=days(-30))
        make_vehicle(inspection_tracked=False, inspection_expiry=days(5))
        report = build_weekly_report(NOW)
        assert report.inspection_overdue == []
        assert report.inspection_approaching == []

    def test_untracked_insurance_excluded(self, make_vehicle, add_policy):
        v = make_vehicle(insurance_tracked=False)
        add_policy(v, days(-2))
        assert build_weekly_report(NOW).insurance_overdue == []

    def test_parked_and_maintenance_excluded(self, make_vehicle):
        make_vehicle(status=Vehicle.STATUS_PARKED, inspection_expiry=days(-3))
        make_vehicle(status=Vehicle.STATUS_MAINTENANCE, inspection_expiry=days(-3))
        hold = make_vehicle(status=Vehicle.STATUS_LEGAL_HOLD, inspection_expiry=days(-3))

        report = build_weekly_report(NOW)
        assert [i.plate for i in report.inspection_overdue] == [hold.plate]

    def test_company_and_location(self, vehicle):
        Vehicle.objects.filter(pk=vehicle.pk).update(inspection_expiry=days(2))
        item = build_weekly_report(NOW).inspection_approaching[0]
        assert item.company == "Anadolu Logistics"
        assert item.location == "Istanbul Depot"
        assert item.expiry == days(2)


@pytest.mark.django_db
class TestDigestRecipients:

    def test_roles_and_admin_email(self, superuser, admin_member, manager_member, chief_member):
        assert digest_recipients() == [
            "admin@example.com",
            "fleet-admin@example.com",
            "manager@example.com",
            "root@example.com",
        ]

    def test_inactive_and_blank_emails_skipped(self, admin_member, manager_member):
        admin_member.is_active = False
        admin_member.save()
        manager_member.email = ""
        manager_member.save()
        assert digest_recipients() == ["fleet-admin@example.com"]


@pytest.mark.django_db
class TestRunWeeklyReport:

    def test_zero_state_still_sends(self, make_vehicle, admin_member):
        """Nothing due: one digest saying all is well, logged as success with zero items."""
        make_vehicle(inspection_expiry=days(200), traffic_insurance_expiry=days(200))

        entry = run_weekly_report(NOW)

        assert len(mail.outbox) == 1
        assert "All vehicles are up to date" in mail.outbox[0].body
        assert mail.outbox[0].subject == "Weekly fleet compliance report - 15.06.2025"
        assert entry.status == JobLog.STATUS_SUCCESS
        assert entry.affected_count == 0
        assert entry.recipient_count == 2
        assert entry.notification_sent is True

    def test_items_in_mail(self, make_vehicle, admin_member):
        make_vehicle(plate="34DUE001", inspection_expiry=days(-1))

        entry = run_weekly_report(NOW)

        body = mail.outbox[0].body
        assert "34DUE001" in body
        assert "All vehicles are up to date" not in body
        assert entry.affected_count == 1

    def test_failure_is_logged_then_raised(self, db, monkeypatch):
        def boom(now=None):
            raise RuntimeError("query failed")

        monkeypatch.setattr(digest, "build_weekly_report", boom)
        with pytest.raises(JobExecutionError):
            run_weekly_report(NOW)

        log = JobLog.objects.get()
        assert log.job_name == JobLog.JOB_WEEKLY_REPORT
        assert log.status == JobLog.STATUS_ERROR
        assert log.message == "query failed"

    def test_no_recipients_is_logged(self, settings, db, caplog, monkeypatch):
        settings.FLEET_ADMIN_EMAIL = ""
        # The "apps" logger does not propagate to root, where caplog listens
        monkeypatch.setattr(logging.getLogger("apps"), "propagate", True)

        with caplog.at_level(logging.WARNING, logger="apps.jobs.digest"):
            entry = run_weekly_report(NOW)

        assert len(mail.outbox) == 0
        assert entry.status == JobLog.STATUS_SUCCESS
        assert entry.recipient_count == 0
        assert entry.notification_sent is None
        assert any("no recipients" in r.getMessage() for r in caplog.records)
