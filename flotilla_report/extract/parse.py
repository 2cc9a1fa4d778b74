from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from flotilla_report.common.diagnostics import validate_io
from flotilla_report.extract.incidents import (
    IncidentPredicate,
    incident_reason,
    looks_like_incident,
)
from flotilla_report.schemas.models import VesselRecord, VesselStatus

log = logging.getLogger(__name__)

_ORDINAL_RE = re.compile(r"^\d+\.$")
_NAME_RE = re.compile(r"^(.+?)(?:\s*\((.+)\))?$")
_STATUS_RE = re.compile(r"^(sailing|intercepted|docked|anchored|assumed\s+intercepted)$", re.I)

# label shown in the detail panel -> record field holding the next line
FIELD_LABELS = {
    "LAST UPDATE": "last_update_utc",
    "SPEED": "speed",
    "COURSE": "course",
    "POSITION": "position",
}


def _is_parenthesized(line: str) -> bool:
    return line.startswith("(") and line.endswith(")")


def parse_block(text: str) -> dict[str, Any]:
    """Read the fields out of one expanded row's text."""
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    fields: dict[str, Any] = {}
    i = 0
    while i < len(lines):
        line = lines[i]
        upper = line.upper()
        i += 1

        if _ORDINAL_RE.match(line):
            continue

        if "name" not in fields and not line.startswith("(") and upper not in FIELD_LABELS:
            match = _NAME_RE.match(line)
            fields["name"] = match.group(1).strip()
            if match.group(2):
                fields["location"] = match.group(2).strip()
            continue

        if _is_parenthesized(line):
            fields["location"] = line[1:-1].strip()
            continue

        if _STATUS_RE.match(line):
            fields["status"] = VesselStatus.parse(line)
            continue

        if upper in FIELD_LABELS:
            if i < len(lines):
                fields[FIELD_LABELS[upper]] = lines[i]
                i += 1
            continue

    return fields


def extract_vessel(text: str, index: int) -> VesselRecord | None:
    """Parse one entity block into a record; None if parsing blew up."""
    try:
        return VesselRecord(id=index, **parse_block(text))
    except Exception as exc:  # noqa: BLE001
        log.warning("error parsing vessel text for row %d: %s", index, exc)
        return None


@validate_io
def extract_all(
    blocks: Iterable[tuple[int, str]],
    is_incident: IncidentPredicate = looks_like_incident,
) -> list[VesselRecord]:
    """Parse ``(index, text)`` blocks and drop incidents."""
    vessels: list[VesselRecord] = []
    for index, text in blocks:
        record = extract_vessel(text, index)
        if record is None:
            log.warning("row %d: no vessel data extracted", index)
            continue
        log.info(
            "row %d: found %r status=%s has_position=%s",
            index,
            record.name,
            record.status.value,
            bool(record.position),
        )
        if is_incident(record):
            reason = incident_reason(record) or "predicate"
            log.info("filtered: %s (%s)", record.name, reason)
            continue
        log.info("accepted: %s", record.name)
        vessels.append(record)
    return vessels
