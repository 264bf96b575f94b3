from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path

from celery import shared_task
from django.conf import settings
from django.db import transaction

from fsim_core.io import state as state_io
from fsim_core.services import simulator
from fsim_core.services import summary as summary_service

from .models import ScenarioReport

logger = logging.getLogger(__name__)


def _write_result(report: ScenarioReport, payload: dict) -> Path:
    path = Path(settings.MEDIA_ROOT) / "reports" / f"{report.id}-v{report.snapshot_version}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))
    return path


@shared_task
def build_scenario_report(report_id: int):
    try:
        report = ScenarioReport.objects.get(id=report_id)
    except ScenarioReport.DoesNotExist:
        return

    with transaction.atomic():
        report.status = "running"
        report.error = ""
        report.save(update_fields=["status", "error"])

    try:
        data = state_io.data_from_json(report.snapshot_data)
        results = simulator.simulate_all(data.scenarios, data.situations)

        payload = {}
        for scenario in data.scenarios:
            rows = results[scenario.id]
            payload[scenario.id] = {
                "summary": vars(summary_service.summarize_scenario(scenario, rows)),
                "rows": [dataclasses.asdict(r) for r in rows],
            }
        result_path = _write_result(report, payload)

        with transaction.atomic():
            report.result_path = str(result_path)
            report.status = "completed"
            report.save(update_fields=["result_path", "status"])
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scenario report %s failed", report_id)
        with transaction.atomic():
            report.status = "failed"
            report.error = str(exc)
            report.save(update_fields=["status", "error"])
