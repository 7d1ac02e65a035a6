from django.contrib import admin
from django.db import transaction

from .models import InsuranceRecord
from .services import sync_vehicle_expiry

@admin.register(InsuranceRecord)
class InsuranceRecordAdmin(admin.ModelAdmin):
    list_display = ("vehicle", "sub_type", "insurer", "policy_number", "start_date", "valid_until", "payment_status")
    list_filter = ("sub_type", "payment_status", "valid_until")
    search_fields = ("policy_number", "insurer", "agency", "vehicle__plate")
    readonly_fields = ("created_at", "created_by")

    # Admin edits go through the same expiry sync as the API
    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            scopes = [(obj.vehicle_id, obj.sub_type)]
            if change:
                previous = InsuranceRecord.objects.filter(pk=obj.pk).values_list("vehicle_id", "sub_type").first()
                if previous:
                    scopes.append(previous)
            else:
                obj.created_by = request.user
            super().save_model(request, obj, form, change)
            sync_vehicle_expiry(scopes)

    def delete_model(self, request, obj):
        with transaction.atomic():
            scope = (obj.vehicle_id, obj.sub_type)
            super().delete_model(request, obj)
            sync_vehicle_expiry([scope])

    def delete_queryset(self, request, queryset):
        with transaction.atomic():
            scopes = list(queryset.values_list("vehicle_id", "sub_type"))
            super().delete_queryset(request, queryset)
            sync_vehicle_expiry(scopes)
