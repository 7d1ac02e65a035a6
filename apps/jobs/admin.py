from django.contrib import admin

from .models import JobLog


@admin.register(JobLog)
class JobLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "job_name", "status", "affected_count", "recipient_count", "notification_sent")
    list_filter = ("job_name", "status", "created_at")
    search_fields = ("message",)
    readonly_fields = [f.name for f in JobLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
