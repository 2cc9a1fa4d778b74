"""Bounded append-only history of report snapshots.

One entry per cycle; at hourly cycles the default cap of 720 keeps 30
days. The file is rewritten whole on every append through a temp file and
``os.replace`` so readers never see a half-written list.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from jsonschema import ValidationError, validate

from flotilla_report.schemas.models import HistoryEntry

log = logging.getLogger(__name__)

HISTORY_CAP = 720

SUMMARY_SCHEMA = {
    "type": "object",
    "required": ["sailing", "intercepted", "docked", "anchored", "unknown"],
    "properties": {
        "sailing": {"type": "integer"},
        "intercepted": {"type": "integer"},
        "docked": {"type": "integer"},
        "anchored": {"type": "integer"},
        "unknown": {"type": "integer"},
        "most_recent_update": {"type": ["string", "null"]},
    },
}
ENTRY_SCHEMA = {
    "type": "object",
    "required": ["timestamp", "total_vessels", "summary"],
    "properties": {
        "timestamp": {"type": "string"},
        "total_vessels": {"type": "integer"},
        "summary": SUMMARY_SCHEMA,
    },
}
HISTORY_SCHEMA = {"type": "array", "items": ENTRY_SCHEMA}


def write_json_atomic(path: Path, payload: object) -> None:
    """Write *payload* as JSON to *path* via a sibling temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w") as fh:
            json.dump(payload, fh, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class HistoryStore:
    def __init__(self, path: Path, cap: int = HISTORY_CAP) -> None:
        self.path = Path(path)
        self.cap = cap

    def _read_raw(self) -> list[dict]:
        if not self.path.exists():
            log.debug("starting new history file at %s", self.path)
            return []
        try:
            payload = json.loads(self.path.read_text() or "[]")
            validate(instance=payload, schema=HISTORY_SCHEMA)
        except (OSError, ValueError, ValidationError) as exc:
            log.warning("failed to load history %s, starting fresh: %s", self.path, exc)
            return []
        return payload

    def load(self) -> list[HistoryEntry]:
        return [HistoryEntry(**item) for item in self._read_raw()]

    def append(self, entry: HistoryEntry) -> int:
        """Append *entry*, evicting the oldest beyond the cap; return the new length."""
        history = self._read_raw()
        history.append(entry.model_dump(mode="json"))
        if len(history) > self.cap:
            history = history[-self.cap :]
        write_json_atomic(self.path, history)
        log.info("appended to history (%d entries)", len(history))
        return len(history)
