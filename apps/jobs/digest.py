"""
Weekly compliance digest.

Collects overdue and approaching inspections and insurance policies across
the operational fleet and mails one summary to administrators and company
managers. The digest is sent even when there is nothing to report.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import JobExecutionError
from apps.fleet.alarms import alert_window_days, days_remaining
from apps.fleet.models import Vehicle
from apps.insurance.models import InsuranceRecord
from apps.notifications.dispatch import DigestItem, WeeklyReport, send_weekly_digest
from apps.tenants.models import TenantMembership

from .models import JobLog

logger = logging.getLogger(__name__)


def _local_date(now):
    if hasattr(now, "tzinfo"):
        return timezone.localdate(now) if timezone.is_aware(now) else now.date()
    return now


def _operational_vehicles():
    return (
        Vehicle.objects
        .exclude(status__in=Vehicle.NON_OPERATIONAL_STATUSES)
        .select_related("tenant", "location")
    )


def _vehicle_item(v: Vehicle, expiry, now) -> DigestItem:
    return DigestItem(
        plate=v.plate,
        company=v.tenant.name,
        location=v.location.name if v.location_id else "-",
        expiry=expiry,
        days_remaining=days_remaining(expiry, now),
    )


def build_weekly_report(now=None) -> WeeklyReport:
    """Read-only: nothing is written and nothing is sent."""
    now = now or timezone.now()
    today = _local_date(now)
    window = alert_window_days()
    horizon = today + timedelta(days=window)

    report = WeeklyReport(generated_on=today, window_days=window)

    inspected = (
        _operational_vehicles()
        .filter(inspection_tracked=True, inspection_expiry__isnull=False, inspection_expiry__lte=horizon)
        .order_by("inspection_expiry", "plate")
    )
    for v in inspected:
        item = _vehicle_item(v, v.inspection_expiry, now)
        if v.inspection_expiry < today:
            report.inspection_overdue.append(item)
        else:
            report.inspection_approaching.append(item)

    # Insurance is evaluated per policy so every sub-type shows up
    policies = (
        InsuranceRecord.objects
        .filter(
            vehicle__in=_operational_vehicles().filter(insurance_tracked=True),
            valid_until__lte=horizon,
        )
        .select_related("vehicle", "vehicle__tenant", "vehicle__location")
        .order_by("valid_until", "vehicle__plate")
    )
    for p in policies:
        item = _vehicle_item(p.vehicle, p.valid_until, now)
        item.sub_type = p.sub_type
        item.sub_type_label = p.get_sub_type_display()
        if p.valid_until < today:
            report.insurance_overdue.append(item)
        else:
            report.insurance_approaching.append(item)

    return report


def digest_recipients() -> List[str]:
    User = get_user_model()
    emails = set(
        User.objects
        .filter(is_active=True)
        .exclude(email="")
        .filter(
            Q(is_superuser=True)
            | Q(tenant_memberships__role__in=TenantMembership.DIGEST_ROLES)
        )
        .values_list("email", flat=True)
    )
    admin_email = getattr(settings, "FLEET_ADMIN_EMAIL", "")
    if admin_email:
        emails.add(admin_email)
    return sorted(e for e in emails if e)


def run_weekly_report(now=None) -> JobLog:
    now = now or timezone.now()
    logger.info("Weekly report started at %s", now)

    try:
        report = build_weekly_report(now)
        recipients = digest_recipients()
        sent: Optional[bool] = None
        if recipients:
            sent = send_weekly_digest(recipients, report)
        else:
            logger.warning("Weekly report has no recipients; set FLEET_ADMIN_EMAIL or give admins an email address")

        entry = JobLog.objects.create(
            job_name=JobLog.JOB_WEEKLY_REPORT,
            status=JobLog.STATUS_SUCCESS,
            message=(
                f"{report.total} item(s): "
                f"{len(report.inspection_overdue)} overdue and "
                f"{len(report.inspection_approaching)} approaching inspection(s), "
                f"{len(report.insurance_overdue)} overdue and "
                f"{len(report.insurance_approaching)} approaching policy(ies)."
            ),
            affected_count=report.total,
            recipient_count=len(recipients),
            notification_sent=sent,
        )
    except Exception as e:
        logger.exception("Weekly report failed")
        entry = JobLog.objects.create(
            job_name=JobLog.JOB_WEEKLY_REPORT,
            status=JobLog.STATUS_ERROR,
            message=str(e),
        )
        raise JobExecutionError(JobLog.JOB_WEEKLY_REPORT, str(e), log_entry=entry) from e

    logger.info("Weekly report finished: %d item(s), %d recipient(s), sent=%s", report.total, len(recipients), sent)
    return entry
