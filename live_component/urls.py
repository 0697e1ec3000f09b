from django.urls import path

from . import views

app_name = "live_component"

urlpatterns = [
    path("<str:component_name>", views.component_render, name="render"),
    path("<str:component_name>/<str:action>", views.component_action, name="action"),
]
