from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("tenants/", include("apps.tenants.urls")),

    path("admin/", admin.site.urls),

    path("", include("apps.core.urls")),

    path("vehicles/", include("apps.fleet.urls")),
    path("inspections/", include("apps.inspections.urls")),
    path("insurance/", include("apps.insurance.urls")),
    path("jobs/", include("apps.jobs.urls")),
    path("reports/", include("apps.reports.urls")),
]
