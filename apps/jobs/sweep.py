"""
Daily expired-vehicle sweep.

Active vehicles whose tracked inspection or mandatory traffic insurance has
expired are moved to ``parked`` in one update, and a single alert goes out
to the fleet administrator and the responsible person of each affected
location. Every run leaves exactly one ``JobLog`` row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from django.utils import timezone

from apps.core.exceptions import JobExecutionError
from apps.fleet.alarms import days_remaining
from apps.fleet.models import Vehicle
from apps.notifications.dispatch import AlarmItem, send_expiry_alert

from .models import JobLog

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    affected: int
    items: List[AlarmItem] = field(default_factory=list)
    recipients: List[str] = field(default_factory=list)
    notification_sent: Optional[bool] = None
    log_entry: Optional[JobLog] = None


def _alarm_item(vehicle: Vehicle, now) -> Optional[AlarmItem]:
    inspection_days = days_remaining(vehicle.inspection_expiry, now) if vehicle.inspection_tracked else None
    insurance_days = days_remaining(vehicle.traffic_insurance_expiry, now) if vehicle.insurance_tracked else None

    expired = (
        (inspection_days is not None and inspection_days < 0)
        or (insurance_days is not None and insurance_days < 0)
    )
    if not expired:
        return None

    return AlarmItem(
        plate=vehicle.plate,
        location=vehicle.location.name if vehicle.location_id else "-",
        inspection_days=inspection_days,
        insurance_days=insurance_days,
    )


def alert_recipients(vehicles) -> List[str]:
    targets = set()
    admin_email = getattr(settings, "FLEET_ADMIN_EMAIL", "")
    if admin_email:
        targets.add(admin_email)
    for v in vehicles:
        if v.location_id and v.location.responsible_email:
            targets.add(v.location.responsible_email)
    return sorted(targets)


def run_expired_vehicle_sweep(now=None) -> SweepResult:
    now = now or timezone.now()
    logger.info("Expired vehicle sweep started at %s", now)

    try:
        active = list(
            Vehicle.objects
            .filter(status=Vehicle.STATUS_ACTIVE)
            .select_related("location")
            .order_by("plate")
        )

        expired = []
        items = []
        for v in active:
            item = _alarm_item(v, now)
            if item is not None:
                expired.append(v)
                items.append(item)

        if not expired:
            entry = JobLog.objects.create(
                job_name=JobLog.JOB_EXPIRED_VEHICLES,
                status=JobLog.STATUS_SUCCESS,
                message="No expired vehicles found.",
                affected_count=0,
            )
            logger.info("Expired vehicle sweep finished: nothing to park")
            return SweepResult(affected=0, log_entry=entry)

        # Vehicles changed by someone else since the read keep their status
        parked = (
            Vehicle.objects
            .filter(pk__in=[v.pk for v in expired], status=Vehicle.STATUS_ACTIVE)
            .update(status=Vehicle.STATUS_PARKED)
        )

        recipients = alert_recipients(expired)
        sent = send_expiry_alert(recipients, items) if recipients else None

        if sent:
            mail_note = f"alert sent to {len(recipients)} recipient(s)"
        elif sent is False:
            mail_note = "alert could not be sent"
        else:
            mail_note = "no alert recipients configured"

        entry = JobLog.objects.create(
            job_name=JobLog.JOB_EXPIRED_VEHICLES,
            status=JobLog.STATUS_SUCCESS,
            message=f"Moved {parked} vehicle(s) to parked; {mail_note}.",
            affected_count=parked,
            recipient_count=len(recipients),
            notification_sent=sent,
        )
    except Exception as e:
        logger.exception("Expired vehicle sweep failed")
        entry = JobLog.objects.create(
            job_name=JobLog.JOB_EXPIRED_VEHICLES,
            status=JobLog.STATUS_ERROR,
            message=str(e),
        )
        raise JobExecutionError(JobLog.JOB_EXPIRED_VEHICLES, str(e), log_entry=entry) from e

    logger.info("Expired vehicle sweep finished: %d parked, notification_sent=%s", parked, sent)
    return SweepResult(
        affected=parked,
        items=items,
        recipients=recipients,
        notification_sent=sent,
        log_entry=entry,
    )
