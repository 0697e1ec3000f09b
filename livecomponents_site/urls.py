from django.urls import include, path

urlpatterns = [
    path("_components/", include("live_component.urls")),
    path("", include("demo.urls")),
]
