from django.urls import path

from . import views

app_name = "jobs"

urlpatterns = [
    path("run/<str:job>/", views.run, name="run"),
]
