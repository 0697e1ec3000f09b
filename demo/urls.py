from django.urls import path

from . import views

urlpatterns = [
    path("", views.home, name="home"),
    path("render-template/<slug:template>", views.render_template, name="render_template"),
]
