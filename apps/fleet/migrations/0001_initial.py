from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("plate", models.CharField(max_length=20, unique=True)),
                ("year", models.PositiveIntegerField(blank=True, null=True)),
                ("make", models.CharField(blank=True, max_length=80)),
                ("model", models.CharField(blank=True, max_length=80)),
                ("status", models.CharField(choices=[("active", "Active"), ("parked", "Parked"), ("legal_hold", "Legal Hold"), ("maintenance", "In Maintenance")], default="active", max_length=20)),
                ("inspection_tracked", models.BooleanField(default=True)),
                ("insurance_tracked", models.BooleanField(default=True)),
                ("inspection_expiry", models.DateField(blank=True, editable=False, null=True)),
                ("traffic_insurance_expiry", models.DateField(blank=True, editable=False, null=True)),
                ("comprehensive_insurance_expiry", models.DateField(blank=True, editable=False, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("location", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="vehicles", to="tenants.location")),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="vehicles", to="tenants.tenant")),
            ],
            options={
                "ordering": ("plate",),
                "indexes": [
                    models.Index(fields=["tenant", "status"], name="fleet_tenant_status_idx"),
                    models.Index(fields=["location"], name="fleet_location_idx"),
                    models.Index(fields=["status", "inspection_expiry"], name="fleet_status_insp_idx"),
                ],
            },
        ),
    ]
