from django.db import models


class JobLog(models.Model):
    JOB_EXPIRED_VEHICLES = "expired_vehicles"
    JOB_WEEKLY_REPORT = "weekly_report"

    JOB_CHOICES = [
        (JOB_EXPIRED_VEHICLES, "Expired vehicle sweep"),
        (JOB_WEEKLY_REPORT, "Weekly report"),
    ]

    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"

    STATUS_CHOICES = [
        (STATUS_SUCCESS, "Success"),
        (STATUS_ERROR, "Error"),
    ]

    job_name = models.CharField(max_length=40, choices=JOB_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    message = models.TextField(blank=True)
    affected_count = models.PositiveIntegerField(default=0)
    recipient_count = models.PositiveIntegerField(default=0)
    # None when no email was attempted
    notification_sent = models.BooleanField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["job_name", "created_at"], name="joblog_name_created_idx"),
        ]

    def __str__(self):
        return f"{self.job_name} {self.status} @ {self.created_at:%Y-%m-%d %H:%M}"
