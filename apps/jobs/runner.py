"""
Job registry shared by the HTTP trigger and the management command.

Jobs are selected by explicit name; each returns a JSON-friendly summary.
"""
from __future__ import annotations

from typing import Callable, Dict

from .digest import run_weekly_report
from .models import JobLog
from .sweep import run_expired_vehicle_sweep

JOB_EXPIRED_VEHICLES = JobLog.JOB_EXPIRED_VEHICLES
JOB_WEEKLY_REPORT = JobLog.JOB_WEEKLY_REPORT


def _expired_vehicles(now=None) -> dict:
    result = run_expired_vehicle_sweep(now)
    return {
        "job": JOB_EXPIRED_VEHICLES,
        "message": result.log_entry.message if result.log_entry else "",
        "count": result.affected,
        "recipients": len(result.recipients),
        "notification_sent": result.notification_sent,
        "vehicles": [
            {
                "plate": item.plate,
                "location": item.location,
                "inspection_days": item.inspection_days,
                "insurance_days": item.insurance_days,
            }
            for item in result.items
        ],
    }


def _weekly_report(now=None) -> dict:
    entry = run_weekly_report(now)
    return {
        "job": JOB_WEEKLY_REPORT,
        "message": entry.message,
        "count": entry.affected_count,
        "recipients": entry.recipient_count,
        "notification_sent": entry.notification_sent,
    }


JOBS: Dict[str, Callable[..., dict]] = {
    JOB_EXPIRED_VEHICLES: _expired_vehicles,
    JOB_WEEKLY_REPORT: _weekly_report,
}


def run_job(name: str, now=None) -> dict:
    try:
        job = JOBS[name]
    except KeyError:
        raise ValueError(f"Unknown job: {name!r}. Expected one of {', '.join(sorted(JOBS))}.")
    return job(now)
