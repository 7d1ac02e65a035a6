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
            name="InspectionRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("inspection_date", models.DateField()),
                ("valid_until", models.DateField()),
                ("outcome", models.CharField(choices=[("passed", "Passed"), ("failed", "Failed")], max_length=10)),
                ("kind", models.CharField(choices=[("periodic", "Periodic"), ("supplementary", "Supplementary"), ("special", "Special")], default="periodic", max_length=20)),
                ("station", models.CharField(blank=True, max_length=150)),
                ("region", models.CharField(blank=True, max_length=80)),
                ("report_number", models.CharField(blank=True, max_length=80)),
                ("fee", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("failure_reason", models.CharField(blank=True, max_length=200)),
                ("failure_detail", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_inspections", to=settings.AUTH_USER_MODEL)),
                ("vehicle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="inspections", to="fleet.vehicle")),
            ],
            options={
                "ordering": ["-inspection_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "outcome", "valid_until"], name="insp_vehicle_outcome_idx"),
                    models.Index(fields=["valid_until"], name="insp_valid_until_idx"),
                ],
            },
        ),
    ]
