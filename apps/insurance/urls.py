from django.urls import path
from . import views

app_name = "insurance"

urlpatterns = [
    path("", views.policy_list, name="list"),
    path("new/", views.policy_create, name="policy_create"),
    path("<int:pk>/", views.policy_detail, name="policy_detail"),
    path("<int:pk>/edit/", views.policy_update, name="policy_update"),
    path("<int:pk>/delete/", views.policy_delete, name="policy_delete"),
]
