import json
import logging
import time
from pathlib import Path

from django.db import transaction
from django.http import Http404, StreamingHttpResponse
from rest_framework import status
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.parsers import JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from fsim_core.io import sync
from fsim_core.io.config import load_sync_config

from .models import ScenarioReport, SyncSnapshot
from .serializers import ScenarioReportSerializer, StatePutSerializer
from .tasks import build_scenario_report

logger = logging.getLogger(__name__)


def _snapshot_of(row: SyncSnapshot) -> sync.SyncSnapshot:
    return sync.SyncSnapshot(version=row.version, updated_at=row.updated_at, data=row.data)


def _current(config) -> SyncSnapshot:
    existing = SyncSnapshot.objects.filter(pk=1).first()
    if existing is not None:
        return existing
    stored = sync.read_snapshot_file(config.data_file)
    return SyncSnapshot.current(seed=stored.to_json() if stored else None)


def _mirror(config, snapshot: sync.SyncSnapshot) -> None:
    try:
        sync.write_snapshot_file(config.data_file, snapshot)
    except OSError:
        logger.exception("Could not mirror snapshot v%s to %s", snapshot.version, config.data_file)


def _error(code: str, http_status: int = status.HTTP_400_BAD_REQUEST, **extra) -> Response:
    return Response({"ok": False, "error": code, **extra}, status=http_status)


class HealthView(APIView):
    def get(self, request):
        return Response({"ok": True})


class StateView(APIView):
    parser_classes = [JSONParser]

    def get(self, request):
        response = Response(_snapshot_of(_current(load_sync_config())).to_json())
        response["Cache-Control"] = "no-store"
        return response

    def put(self, request):
        config = load_sync_config()
        if len(request.body) > config.max_payload_bytes:
            return _error("bad_request", details="Payload too large")

        try:
            body = request.data
        except (ParseError, UnsupportedMediaType) as exc:
            return _error("bad_request", details=str(exc.detail))

        serializer = StatePutSerializer(data=body)
        if not serializer.is_valid():
            return _error("invalid_data", details=serializer.errors)

        with transaction.atomic():
            _current(config)
            row = SyncSnapshot.objects.select_for_update().get(pk=1)
            try:
                updated, event = sync.accept_put(_snapshot_of(row), body)
            except ValueError:
                return _error("invalid_data")
            row.version = updated.version
            row.updated_at = updated.updated_at
            row.data = updated.data
            row.client_id = event.get("clientId", "")
            row.save()

        _mirror(config, updated)
        report = ScenarioReport.objects.create(snapshot_version=updated.version, snapshot_data=updated.data)
        transaction.on_commit(lambda: build_scenario_report.delay(report.id))
        return Response({"ok": True, "version": updated.version, "updatedAt": updated.updated_at})


class EventsView(APIView):
    """Server-sent events: the current snapshot first, then one frame per new version."""

    def get(self, request):
        config = load_sync_config()

        def stream():
            yield sync.retry_frame(config.retry_ms)
            row = _current(config)
            last_version = row.version
            yield sync.format_sse(_snapshot_of(row).to_json())
            while True:
                time.sleep(config.poll_seconds)
                row = SyncSnapshot.current()
                if row.version <= last_version:
                    continue
                last_version = row.version
                event = _snapshot_of(row).to_json()
                if row.client_id:
                    event["clientId"] = row.client_id
                yield sync.format_sse(event)

        response = StreamingHttpResponse(stream(), content_type="text/event-stream")
        response["Cache-Control"] = "no-cache, no-transform"
        return response


class ReportDetailView(APIView):
    def get(self, request, pk: int):
        try:
            report = ScenarioReport.objects.get(pk=pk)
        except ScenarioReport.DoesNotExist as exc:
            raise Http404 from exc

        payload = ScenarioReportSerializer(report).data
        if report.result_path and Path(report.result_path).exists():
            payload["result"] = json.loads(Path(report.result_path).read_text())
        else:
            payload["result"] = None
        return Response(payload)
