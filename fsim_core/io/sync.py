"""
Snapshot protocol shared by the sync server and its clients.

The server keeps one snapshot ``{version, updatedAt, data}``; every accepted PUT
replaces ``data`` as a whole (last writer wins) and bumps the version by one.
Broadcast events carry the writer's ``clientId`` so the writer can skip its own echo.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SyncSnapshot:
    version: int
    updated_at: str
    data: Dict[str, Any]

    def to_json(self) -> Dict[str, Any]:
        return {"version": self.version, "updatedAt": self.updated_at, "data": self.data}


def _now_iso(now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    return now.isoformat().replace("+00:00", "Z")


def empty_snapshot(now: Optional[dt.datetime] = None) -> SyncSnapshot:
    return SyncSnapshot(version=0, updated_at=_now_iso(now), data={"situations": [], "scenarios": []})


def is_valid_data(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("situations"), list)
        and isinstance(data.get("scenarios"), list)
    )


def has_meaningful_data(data: Dict[str, Any]) -> bool:
    return bool(data.get("situations")) or bool(data.get("scenarios"))


def snapshot_from_json(payload: Any, now: Optional[dt.datetime] = None) -> Optional[SyncSnapshot]:
    """Restore a stored snapshot; None when the payload is unusable."""
    if not isinstance(payload, dict) or not is_valid_data(payload.get("data")):
        return None
    try:
        version = int(payload.get("version") or 0)
    except (TypeError, ValueError):
        version = 0
    updated_at = payload.get("updatedAt")
    if not isinstance(updated_at, str):
        updated_at = _now_iso(now)
    return SyncSnapshot(version=version, updated_at=updated_at, data=payload["data"])


def accept_put(
    snapshot: SyncSnapshot, body: Any, now: Optional[dt.datetime] = None
) -> Tuple[SyncSnapshot, Dict[str, Any]]:
    """
    Apply a PUT body ``{clientId?, baseVersion?, data}``.
    Returns the new snapshot and the event to broadcast. ``baseVersion`` is not
    checked: the newest write always wins.
    """
    data = body.get("data") if isinstance(body, dict) else None
    if not is_valid_data(data):
        raise ValueError("invalid_data")

    updated = SyncSnapshot(version=snapshot.version + 1, updated_at=_now_iso(now), data=data)
    event = updated.to_json()
    client_id = body.get("clientId")
    if isinstance(client_id, str):
        event["clientId"] = client_id
    return updated, event


def should_apply_remote(event: Dict[str, Any], client_id: str, latest_version: int) -> Tuple[bool, int]:
    """
    Client-side rule for an incoming event. Returns (apply, new latest version).
    Own echoes only advance the known version; stale versions are dropped.
    """
    if not isinstance(event, dict) or not isinstance(event.get("data"), dict):
        return False, latest_version
    version = int(event.get("version") or 0)
    if event.get("clientId") == client_id:
        return False, max(latest_version, version)
    if version <= latest_version:
        return False, latest_version
    return True, version


def format_sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def retry_frame(retry_ms: int) -> str:
    return f"retry: {retry_ms}\n\n"


def read_snapshot_file(path: str | Path) -> Optional[SyncSnapshot]:
    """Snapshot persisted by ``write_snapshot_file``; None when missing or unreadable."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.warning("Ignoring unreadable snapshot file %s", path, exc_info=True)
        return None
    return snapshot_from_json(payload)


def write_snapshot_file(path: str | Path, snapshot: SyncSnapshot) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(snapshot.to_json(), indent=2, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, path)
    return path
