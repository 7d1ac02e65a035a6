"""
Notification dispatcher.

Formats the two compliance emails and hands them to Django's mail backend.
Recipients and content are decided by the jobs; this module only renders
and delivers, reporting success as a boolean.
"""
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from apps.core.exceptions import NotificationFailure

logger = logging.getLogger(__name__)

EXPIRY_ALERT_SUBJECT = "Urgent: vehicles with expired inspection or insurance"
WEEKLY_DIGEST_SUBJECT = "Weekly fleet compliance report"


@dataclass
class AlarmItem:
    plate: str
    location: str
    inspection_days: Optional[int]
    insurance_days: Optional[int]


@dataclass
class DigestItem:
    plate: str
    company: str
    location: str
    expiry: date
    days_remaining: int
    sub_type: Optional[str] = None
    sub_type_label: Optional[str] = None


@dataclass
class WeeklyReport:
    generated_on: date
    window_days: int
    inspection_overdue: List[DigestItem] = field(default_factory=list)
    inspection_approaching: List[DigestItem] = field(default_factory=list)
    insurance_overdue: List[DigestItem] = field(default_factory=list)
    insurance_approaching: List[DigestItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.inspection_overdue)
            + len(self.inspection_approaching)
            + len(self.insurance_overdue)
            + len(self.insurance_approaching)
        )

    @property
    def is_empty(self) -> bool:
        return self.total == 0


def _deliver(recipients: Sequence[str], subject: str, html_body: str) -> None:
    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html_body),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=list(recipients),
    )
    message.attach_alternative(html_body, "text/html")
    try:
        sent = message.send(fail_silently=False)
    except (smtplib.SMTPException, OSError) as e:
        raise NotificationFailure(f"Mail transport failed: {e}") from e
    if not sent:
        raise NotificationFailure("Mail backend accepted no messages.")


def send(recipients: Sequence[str], subject: str, html_body: str) -> bool:
    if not recipients:
        logger.warning("Not sending %r: no recipients", subject)
        return False
    try:
        _deliver(recipients, subject, html_body)
    except NotificationFailure:
        logger.warning("Sending %r to %d recipient(s) failed", subject, len(recipients), exc_info=True)
        return False
    logger.info("Sent %r to %d recipient(s)", subject, len(recipients))
    return True


def render_expiry_alert(items: Sequence[AlarmItem]) -> str:
    return render_to_string("notifications/expiry_alert.html", {"items": items})


def render_weekly_digest(report: WeeklyReport) -> str:
    sections = [
        ("Overdue inspections", report.inspection_overdue, False),
        (f"Inspections due within {report.window_days} days", report.inspection_approaching, False),
        ("Overdue insurance policies", report.insurance_overdue, True),
        (f"Insurance policies due within {report.window_days} days", report.insurance_approaching, True),
    ]
    return render_to_string(
        "notifications/weekly_digest.html",
        {
            "report": report,
            "sections": [
                {"title": title, "items": items, "show_sub_type": show_sub_type}
                for title, items, show_sub_type in sections
            ],
        },
    )


def send_expiry_alert(recipients: Sequence[str], items: Sequence[AlarmItem]) -> bool:
    return send(recipients, EXPIRY_ALERT_SUBJECT, render_expiry_alert(items))


def send_weekly_digest(recipients: Sequence[str], report: WeeklyReport) -> bool:
    subject = f"{WEEKLY_DIGEST_SUBJECT} - {report.generated_on:%d.%m.%Y}"
    return send(recipients, subject, render_weekly_digest(report))
