from typing import Optional

from django.db import models


class SyncSnapshot(models.Model):
    """The one shared state snapshot; every accepted PUT replaces ``data`` wholesale."""

    version = models.PositiveIntegerField(default=0)
    updated_at = models.CharField(max_length=40, blank=True, default="")
    data = models.JSONField(default=dict)
    client_id = models.TextField(blank=True, default="")

    @classmethod
    def current(cls, seed: Optional[dict] = None) -> "SyncSnapshot":
        """The snapshot row, created on first use from ``seed`` (a stored ``{version, updatedAt, data}``)."""
        seed = seed or {}
        snapshot, _ = cls.objects.get_or_create(
            pk=1,
            defaults={
                "version": seed.get("version", 0),
                "updated_at": seed.get("updatedAt", ""),
                "data": seed.get("data") or {"situations": [], "scenarios": []},
            },
        )
        return snapshot


class ScenarioReport(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    snapshot_version = models.PositiveIntegerField()
    snapshot_data = models.JSONField(default=dict)
    status = models.CharField(max_length=32, default="pending")
    result_path = models.CharField(max_length=255, blank=True, default="")
    error = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
