from django.db import models
from django.conf import settings
from apps.fleet.models import Vehicle

class InsuranceRecord(models.Model):
    TYPE_TRAFFIC = "traffic"
    TYPE_COMPREHENSIVE = "comprehensive"
    TYPE_SUPPLEMENTARY_LIABILITY = "supplementary_liability"
    TYPE_CHOICES = [
        (TYPE_TRAFFIC, "Mandatory Traffic"),
        (TYPE_COMPREHENSIVE, "Comprehensive"),
        (TYPE_SUPPLEMENTARY_LIABILITY, "Supplementary Liability"),
    ]

    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PARTIAL = "partial"
    PAYMENT_PAID = "paid"
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PARTIAL, "Partially Paid"),
        (PAYMENT_PAID, "Paid"),
    ]

    PLAN_SINGLE = "single"
    PLAN_INSTALLMENTS = "installments"
    PAYMENT_PLAN_CHOICES = [
        (PLAN_SINGLE, "Single Payment"),
        (PLAN_INSTALLMENTS, "Installments"),
    ]

    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name="insurance_records")

    sub_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    policy_number = models.CharField(max_length=80, blank=True)
    insurer = models.CharField(max_length=150, blank=True)
    agency = models.CharField(max_length=150, blank=True)

    start_date = models.DateField()
    valid_until = models.DateField()

    premium = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_UNPAID)
    payment_plan = models.CharField(max_length=20, choices=PAYMENT_PLAN_CHOICES, blank=True)
    installment_count = models.PositiveIntegerField(null=True, blank=True)
    paid_on = models.DateField(null=True, blank=True)

    coverage_notes = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_insurance_records",
    )

    class Meta:
        ordering = ["-valid_until", "-created_at"]
        indexes = [
            models.Index(fields=["vehicle", "sub_type", "valid_until"], name="ins_vehicle_type_idx"),
            models.Index(fields=["valid_until"], name="ins_valid_until_idx"),
        ]

    def __str__(self):
        return f"{self.vehicle} - {self.get_sub_type_display()} until {self.valid_until}"
