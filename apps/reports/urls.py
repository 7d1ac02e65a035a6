from django.urls import path
from . import views

app_name = "reports"

urlpatterns = [
    # Full snapshot: vehicles with alarms plus both record histories
    path("export/compliance.xlsx", views.export_compliance_xlsx, name="export_compliance_xlsx"),

    path("export/inspections.xlsx", views.export_inspections_xlsx, name="export_inspections_xlsx"),
    path("export/insurance.xlsx", views.export_insurance_xlsx, name="export_insurance_xlsx"),
]
