from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="InsuranceRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sub_type", models.CharField(choices=[("traffic", "Mandatory Traffic"), ("comprehensive", "Comprehensive"), ("supplementary_liability", "Supplementary Liability")], max_length=30)),
                ("policy_number", models.CharField(blank=True, max_length=80)),
                ("insurer", models.CharField(blank=True, max_length=150)),
                ("agency", models.CharField(blank=True, max_length=150)),
                ("start_date", models.DateField()),
                ("valid_until", models.DateField()),
                ("premium", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("payment_status", models.CharField(choices=[("unpaid", "Unpaid"), ("partial", "Partially Paid"), ("paid", "Paid")], default="unpaid", max_length=20)),
                ("payment_plan", models.CharField(blank=True, choices=[("single", "Single Payment"), ("installments", "Installments")], max_length=20)),
                ("installment_count", models.PositiveIntegerField(blank=True, null=True)),
                ("paid_on", models.DateField(blank=True, null=True)),
                ("coverage_notes", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_insurance_records", to=settings.AUTH_USER_MODEL)),
                ("vehicle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="insurance_records", to="fleet.vehicle")),
            ],
            options={
                "ordering": ["-valid_until", "-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "sub_type", "valid_until"], name="ins_vehicle_type_idx"),
                    models.Index(fields=["valid_until"], name="ins_valid_until_idx"),
                ],
            },
        ),
    ]
