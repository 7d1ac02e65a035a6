from django.contrib import admin, messages

from .expiry import reconcile_vehicle
from .models import Vehicle

@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = (
        "plate", "tenant", "location", "status",
        "inspection_expiry", "traffic_insurance_expiry", "comprehensive_insurance_expiry",
    )
    list_filter = ("tenant", "status", "inspection_tracked", "insurance_tracked")
    search_fields = ("plate", "make", "model", "location__name", "tenant__name")
    readonly_fields = ("inspection_expiry", "traffic_insurance_expiry", "comprehensive_insurance_expiry", "created_at")
    actions = ["recompute_expiry_dates"]

    @admin.action(description="Recompute expiry dates from records")
    def recompute_expiry_dates(self, request, queryset):
        count = 0
        for vehicle_id in queryset.values_list("id", flat=True):
            reconcile_vehicle(vehicle_id)
            count += 1
        self.message_user(request, f"Recomputed expiry dates for {count} vehicle(s).", messages.SUCCESS)
