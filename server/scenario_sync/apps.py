from pathlib import Path

from django.apps import AppConfig


class ScenarioSyncConfig(AppConfig):
    name = "server.scenario_sync"
    label = "scenario_sync"
    # namespace package, so Django cannot infer the path on its own
    path = str(Path(__file__).resolve().parent)
    default_auto_field = "django.db.models.BigAutoField"
