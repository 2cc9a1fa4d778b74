"""CSV export of the latest vessel table.

One row per vessel in report order (most recent first), with the
normalized timestamps and distance columns. An empty report still writes
the header so downstream readers always find the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from flotilla_report.common.diagnostics import validate_io
from flotilla_report.schemas.models import ReportEnvelope
from flotilla_report.sensors import sensor

log = logging.getLogger(__name__)

CSV_NAME = "vessels.csv"

COLUMNS = [
    "id",
    "name",
    "location",
    "status",
    "last_update_utc",
    "last_update_local_display",
    "speed",
    "course",
    "position",
    "distance_to_gaza_nm",
]


@validate_io
@sensor("export")
def run(envelope: ReportEnvelope, export_dir: Path = Path("exports")) -> Path:
    """Write ``<export_dir>/vessels.csv`` and return its :class:`Path`."""
    export_dir = Path(export_dir)
    export_dir.mkdir(parents=True, exist_ok=True)

    records = [v.model_dump(mode="json") for v in envelope.vessels]
    df = pd.DataFrame(records).reindex(columns=COLUMNS)
    df["distance_to_gaza_nm"] = pd.to_numeric(df["distance_to_gaza_nm"], errors="coerce")

    out = export_dir / CSV_NAME
    df.to_csv(out, index=False)
    log.info("wrote %d rows -> %s", len(df), out)
    return out


__all__ = ["run"]
