from django.contrib import admin
from .models import Location, Tenant, TenantMembership

@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "created_at")
    search_fields = ("name", "slug")

@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "responsible_name", "responsible_email")
    list_filter = ("tenant",)
    search_fields = ("name", "responsible_name", "responsible_email", "tenant__name")

@admin.register(TenantMembership)
class TenantMembershipAdmin(admin.ModelAdmin):
    list_display = ("tenant", "user", "role", "location", "created_at")
    list_filter = ("role", "tenant")
    search_fields = ("tenant__name", "tenant__slug", "user__username", "user__email")
