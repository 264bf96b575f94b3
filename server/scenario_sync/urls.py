from django.urls import path

from .views import EventsView, HealthView, ReportDetailView, StateView

urlpatterns = [
    path("health/", HealthView.as_view(), name="sync-health"),
    path("state/", StateView.as_view(), name="sync-state"),
    path("events/", EventsView.as_view(), name="sync-events"),
    path("reports/<int:pk>/", ReportDetailView.as_view(), name="report-detail"),
]
