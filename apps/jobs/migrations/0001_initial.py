from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="JobLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("job_name", models.CharField(choices=[("expired_vehicles", "Expired vehicle sweep"), ("weekly_report", "Weekly report")], max_length=40)),
                ("status", models.CharField(choices=[("success", "Success"), ("error", "Error")], max_length=10)),
                ("message", models.TextField(blank=True)),
                ("affected_count", models.PositiveIntegerField(default=0)),
                ("recipient_count", models.PositiveIntegerField(default=0)),
                ("notification_sent", models.BooleanField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["job_name", "created_at"], name="joblog_name_created_idx"),
                ],
            },
        ),
    ]
