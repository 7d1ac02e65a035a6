from django.contrib import admin
from django.db import transaction

from .models import InspectionRecord
from .services import sync_vehicle_expiry

@admin.register(InspectionRecord)
class InspectionRecordAdmin(admin.ModelAdmin):
    list_display = ("inspection_date", "vehicle", "kind", "outcome", "valid_until", "station")
    list_filter = ("outcome", "kind", "inspection_date")
    search_fields = ("station", "region", "report_number", "notes", "vehicle__plate")
    readonly_fields = ("created_at", "created_by")

    # Admin edits go through the same expiry sync as the API
    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            previous_vehicle_id = None
            if change:
                previous_vehicle_id = (
                    InspectionRecord.objects.filter(pk=obj.pk).values_list("vehicle_id", flat=True).first()
                )
            if not change:
                obj.created_by = request.user
            super().save_model(request, obj, form, change)
            sync_vehicle_expiry([obj.vehicle_id, previous_vehicle_id])

    def delete_model(self, request, obj):
        with transaction.atomic():
            vehicle_id = obj.vehicle_id
            super().delete_model(request, obj)
            sync_vehicle_expiry([vehicle_id])

    def delete_queryset(self, request, queryset):
        with transaction.atomic():
            vehicle_ids = list(queryset.values_list("vehicle_id", flat=True))
            super().delete_queryset(request, queryset)
            sync_vehicle_expiry(vehicle_ids)
