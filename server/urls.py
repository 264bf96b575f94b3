from django.urls import include, path

urlpatterns = [
    path("api/", include("server.scenario_sync.urls")),
]
