from django.urls import path
from . import views

app_name = "tenants"

urlpatterns = [
    path("select/", views.tenant_select, name="select"),
    path("set/<int:tenant_id>/", views.tenant_set, name="set"),
    path("locations/", views.location_list, name="locations"),
]
