from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from fsim_core.domain.models import SyncConfig


def load_sync_config(path: str | Path | None = None, env: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Sync server settings: defaults, then an optional JSON file, then SYNC_* environment variables.
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = _read_json(path) if path else {}
    defaults = SyncConfig()

    return SyncConfig(
        data_file=str(env.get("SYNC_DATA_FILE", data.get("data_file", defaults.data_file))),
        max_payload_bytes=int(env.get("SYNC_MAX_PAYLOAD_BYTES", data.get("max_payload_bytes", defaults.max_payload_bytes))),
        retry_ms=int(env.get("SYNC_RETRY_MS", data.get("retry_ms", defaults.retry_ms))),
        poll_seconds=float(env.get("SYNC_POLL_SECONDS", data.get("poll_seconds", defaults.poll_seconds))),
    )


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
