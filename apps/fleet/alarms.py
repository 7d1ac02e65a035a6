"""
Alarm calculator for expiry dates.

Days are counted from ``now`` to the start of the expiry day in the active
time zone and rounded up, so any part of a day left still counts as a whole
day. A document expiring today therefore reports 0 days (approaching), and
one that expired yesterday reports -1 (expired).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Union

from django.conf import settings
from django.utils import timezone

DateLike = Union[date, datetime]

SECONDS_PER_DAY = 24 * 60 * 60


class AlarmState(str, Enum):
    NO_DATA = "no_data"
    EXPIRED = "expired"
    APPROACHING = "approaching"
    VALID = "valid"


def alert_window_days() -> int:
    return getattr(settings, "FLEET_ALERT_WINDOW_DAYS", 30)


def _as_aware(value: DateLike) -> datetime:
    # Both sides share the active zone so the difference is in wall-clock days
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return timezone.localtime(value)
    return timezone.make_aware(datetime.combine(value, time.min))


def days_remaining(expiry: Optional[DateLike], now: DateLike) -> Optional[int]:
    """Signed whole days from ``now`` until ``expiry``; None when there is no date."""
    if expiry is None:
        return None
    delta = _as_aware(expiry) - _as_aware(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def alarm_state(expiry: Optional[DateLike], now: DateLike) -> AlarmState:
    days = days_remaining(expiry, now)
    if days is None:
        return AlarmState.NO_DATA
    if days < 0:
        return AlarmState.EXPIRED
    if days <= alert_window_days():
        return AlarmState.APPROACHING
    return AlarmState.VALID


@dataclass
class CategoryAlarm:
    expiry: Optional[date]
    days: Optional[int]
    state: AlarmState

    def as_dict(self) -> dict:
        return {
            "expiry": self.expiry.isoformat() if self.expiry else None,
            "days_remaining": self.days,
            "alarm": self.state.value,
        }


def _category(expiry: Optional[date], tracked: bool, now: DateLike) -> CategoryAlarm:
    if not tracked:
        return CategoryAlarm(expiry=expiry, days=None, state=AlarmState.NO_DATA)
    return CategoryAlarm(expiry=expiry, days=days_remaining(expiry, now), state=alarm_state(expiry, now))


def vehicle_alarms(vehicle, now: Optional[DateLike] = None) -> dict[str, CategoryAlarm]:
    """
    Alarm per compliance category for one vehicle.

    Untracked categories always report ``no_data`` so they never surface in
    alarm tables.
    """
    now = now or timezone.now()
    return {
        "inspection": _category(vehicle.inspection_expiry, vehicle.inspection_tracked, now),
        "traffic_insurance": _category(vehicle.traffic_insurance_expiry, vehicle.insurance_tracked, now),
        "comprehensive_insurance": _category(
            vehicle.comprehensive_insurance_expiry, vehicle.insurance_tracked, now
        ),
    }


def needs_attention(alarms: dict[str, CategoryAlarm]) -> bool:
    """True when inspection or traffic insurance is expired or approaching."""
    flagged = (AlarmState.EXPIRED, AlarmState.APPROACHING)
    return alarms["inspection"].state in flagged or alarms["traffic_insurance"].state in flagged
