from django.db import models
from apps.tenants.models import Location, Tenant

class Vehicle(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_PARKED = "parked"
    STATUS_LEGAL_HOLD = "legal_hold"
    STATUS_MAINTENANCE = "maintenance"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_PARKED, "Parked"),
        (STATUS_LEGAL_HOLD, "Legal Hold"),
        (STATUS_MAINTENANCE, "In Maintenance"),
    ]

    # Excluded from the weekly digest
    NON_OPERATIONAL_STATUSES = (STATUS_PARKED, STATUS_MAINTENANCE)

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="vehicles")
    location = models.ForeignKey(
        Location,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vehicles",
    )

    plate = models.CharField(max_length=20, unique=True)

    year = models.PositiveIntegerField(null=True, blank=True)
    make = models.CharField(max_length=80, blank=True)
    model = models.CharField(max_length=80, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    inspection_tracked = models.BooleanField(default=True)
    insurance_tracked = models.BooleanField(default=True)

    # Denormalized from record history; written only by apps.fleet.expiry
    inspection_expiry = models.DateField(null=True, blank=True, editable=False)
    traffic_insurance_expiry = models.DateField(null=True, blank=True, editable=False)
    comprehensive_insurance_expiry = models.DateField(null=True, blank=True, editable=False)

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("plate",)
        indexes = [
            models.Index(fields=["tenant", "status"], name="fleet_tenant_status_idx"),
            models.Index(fields=["location"], name="fleet_location_idx"),
            models.Index(fields=["status", "inspection_expiry"], name="fleet_status_insp_idx"),
        ]

    def save(self, *args, **kwargs):
        self.plate = (self.plate or "").replace(" ", "").upper()
        super().save(*args, **kwargs)

    def __str__(self):
        mm = f"{self.make} {self.model}".strip()
        if mm:
            return f"{self.plate} ({mm})"
        return self.plate
