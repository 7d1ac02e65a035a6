from django.db import models
from django.conf import settings
from apps.fleet.models import Vehicle

class InspectionRecord(models.Model):
    OUTCOME_PASSED = "passed"
    OUTCOME_FAILED = "failed"
    OUTCOME_CHOICES = [
        (OUTCOME_PASSED, "Passed"),
        (OUTCOME_FAILED, "Failed"),
    ]

    KIND_PERIODIC = "periodic"
    KIND_SUPPLEMENTARY = "supplementary"
    KIND_SPECIAL = "special"
    KIND_CHOICES = [
        (KIND_PERIODIC, "Periodic"),
        (KIND_SUPPLEMENTARY, "Supplementary"),
        (KIND_SPECIAL, "Special"),
    ]

    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name="inspections")

    inspection_date = models.DateField()
    # Only counts towards the vehicle's inspection expiry when the outcome is passed
    valid_until = models.DateField()

    outcome = models.CharField(max_length=10, choices=OUTCOME_CHOICES)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES, default=KIND_PERIODIC)

    station = models.CharField(max_length=150, blank=True)
    region = models.CharField(max_length=80, blank=True)
    report_number = models.CharField(max_length=80, blank=True)
    fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # failed outcomes only
    failure_reason = models.CharField(max_length=200, blank=True)
    failure_detail = models.TextField(blank=True)

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_inspections",
    )

    class Meta:
        ordering = ["-inspection_date", "-created_at"]
        indexes = [
            models.Index(fields=["vehicle", "outcome", "valid_until"], name="insp_vehicle_outcome_idx"),
            models.Index(fields=["valid_until"], name="insp_valid_until_idx"),
        ]

    @property
    def is_passed(self) -> bool:
        return self.outcome == self.OUTCOME_PASSED

    def __str__(self):
        return f"{self.vehicle} - {self.inspection_date} ({self.outcome})"
