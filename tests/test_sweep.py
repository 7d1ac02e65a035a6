"""Tests for the daily expired-vehicle sweep."""
import pytest
from django.core import mail

from apps.core.exceptions import JobExecutionError
from apps.fleet.models import Vehicle
from apps.jobs import sweep
from apps.jobs.models import JobLog
from apps.jobs.sweep import run_expired_vehicle_sweep
from apps.notifications.dispatch import EXPIRY_ALERT_SUBJECT

from conftest import NOW, days


@pytest.mark.django_db
class TestExpiredVehicleSweep:

    def test_healthy_fleet_is_a_no_op(self, make_vehicle):
        """Everything 60+ days out: one success log, nothing parked, no mail."""
        for _ in range(3):
            make_vehicle(inspection_expiry=days(60), traffic_insurance_expiry=days(90))

        result = run_expired_vehicle_sweep(NOW)

        assert result.affected == 0
        assert len(mail.outbox) == 0
        assert not Vehicle.objects.exclude(status=Vehicle.STATUS_ACTIVE).exists()
        log = JobLog.objects.get()
        assert log.job_name == JobLog.JOB_EXPIRED_VEHICLES
        assert log.status == JobLog.STATUS_SUCCESS
        assert log.affected_count == 0
        assert log.notification_sent is None

    def test_expired_inspection_parks_vehicle(self, vehicle, make_vehicle):
        Vehicle.objects.filter(pk=vehicle.pk).update(
            inspection_expiry=days(-1),
            traffic_insurance_expiry=days(30),
        )
        healthy = make_vehicle(inspection_expiry=days(100), traffic_insurance_expiry=days(100))

        result = run_expired_vehicle_sweep(NOW)

        vehicle.refresh_from_db()
        healthy.refresh_from_db()
        assert vehicle.status == Vehicle.STATUS_PARKED
        assert healthy.status == Vehicle.STATUS_ACTIVE

        assert result.affected == 1
        assert [i.plate for i in result.items] == ["34ABC123"]
        assert result.items[0].inspection_days == -1
        assert result.items[0].insurance_days == 30

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == EXPIRY_ALERT_SUBJECT
        assert "34ABC123" in message.body
        assert healthy.plate not in message.body
        assert sorted(message.to) == ["depot@example.com", "fleet-admin@example.com"]

        log = JobLog.objects.get()
        assert log.affected_count == 1
        assert log.recipient_count == 2
        assert log.notification_sent is True

    def test_second_run_is_a_no_op(self, vehicle):
        """Parked vehicles are not picked up again, so nothing is re-sent."""
        Vehicle.objects.filter(pk=vehicle.pk).update(inspection_expiry=days(-1))

        first = run_expired_vehicle_sweep(NOW)
        second = run_expired_vehicle_sweep(NOW)

        assert first.affected == 1
        assert second.affected == 0
        assert second.notification_sent is None
        assert len(mail.outbox) == 1
        logs = list(JobLog.objects.order_by("pk"))
        assert [log.affected_count for log in logs] == [1, 0]
        vehicle.refresh_from_db()
        assert vehicle.status == Vehicle.STATUS_PARKED

    def test_expired_traffic_insurance_parks_vehicle(self, make_vehicle):
        v = make_vehicle(inspection_expiry=days(200), traffic_insurance_expiry=days(-3))
        run_expired_vehicle_sweep(NOW)
        v.refresh_from_db()
        assert v.status == Vehicle.STATUS_PARKED

    def test_comprehensive_alone_never_parks(self, make_vehicle):
        v = make_vehicle(comprehensive_insurance_expiry=days(-10))
        assert run_expired_vehicle_sweep(NOW).affected == 0
        v.refresh_from_db()
        assert v.status == Vehicle.STATUS_ACTIVE

    def test_untracked_inspection_is_ignored(self, make_vehicle):
        v = make_vehicle(inspection_tracked=False, inspection_expiry=days(-400))
        assert run_expired_vehicle_sweep(NOW).affected == 0
        v.refresh_from_db()
        assert v.status == Vehicle.STATUS_ACTIVE

    def test_untracked_category_reported_as_none(self, make_vehicle):
        make_vehicle(insurance_tracked=False, inspection_expiry=days(-2), traffic_insurance_expiry=days(-2))
        result = run_expired_vehicle_sweep(NOW)
        assert result.items[0].insurance_days is None

    def test_non_active_vehicles_are_skipped(self, make_vehicle):
        for status in (Vehicle.STATUS_LEGAL_HOLD, Vehicle.STATUS_MAINTENANCE, Vehicle.STATUS_PARKED):
            make_vehicle(status=status, inspection_expiry=days(-5))
        assert run_expired_vehicle_sweep(NOW).affected == 0
        assert Vehicle.objects.filter(status=Vehicle.STATUS_LEGAL_HOLD).count() == 1

    def test_expiring_today_is_not_expired(self, make_vehicle):
        make_vehicle(inspection_expiry=days(0))
        assert run_expired_vehicle_sweep(NOW).affected == 0

    def test_recipients_are_deduplicated(self, make_vehicle, location):
        make_vehicle(inspection_expiry=days(-1))
        make_vehicle(inspection_expiry=days(-2))
        result = run_expired_vehicle_sweep(NOW)
        assert result.recipients == ["depot@example.com", "fleet-admin@example.com"]
        assert len(mail.outbox) == 1

    def test_no_recipients(self, settings, make_vehicle, tenant):
        settings.FLEET_ADMIN_EMAIL = ""
        make_vehicle(location=None, inspection_expiry=days(-1))

        result = run_expired_vehicle_sweep(NOW)

        assert result.affected == 1
        assert result.notification_sent is None
        assert len(mail.outbox) == 0
        assert JobLog.objects.get().recipient_count == 0

    def test_mail_failure_keeps_transition(self, vehicle, monkeypatch):
        Vehicle.objects.filter(pk=vehicle.pk).update(inspection_expiry=days(-1))
        monkeypatch.setattr(sweep, "send_expiry_alert", lambda recipients, items: False)

        result = run_expired_vehicle_sweep(NOW)

        vehicle.refresh_from_db()
        assert vehicle.status == Vehicle.STATUS_PARKED
        assert result.notification_sent is False
        log = JobLog.objects.get()
        assert log.status == JobLog.STATUS_SUCCESS
        assert log.notification_sent is False

    def test_failure_is_logged_then_raised(self, vehicle, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(sweep, "alert_recipients", boom)
        Vehicle.objects.filter(pk=vehicle.pk).update(inspection_expiry=days(-1))

        with pytest.raises(JobExecutionError) as exc:
            run_expired_vehicle_sweep(NOW)

        log = JobLog.objects.get(status=JobLog.STATUS_ERROR)
        assert "database went away" in log.message
        assert exc.value.log_entry == log
        assert isinstance(exc.value.__cause__, RuntimeError)
