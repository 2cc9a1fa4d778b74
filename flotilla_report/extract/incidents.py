"""Tell vessel rows apart from incident rows.

The tracker lists vessels and incident reports ("Attack on ...", "Captain
Nikos Intercepted") in the same row structure with no type marker, so the
split is a best-effort string heuristic. Callers take the predicate as a
parameter and can swap it out.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from flotilla_report.schemas.models import VesselRecord

IncidentPredicate = Callable[[VesselRecord], bool]

INCIDENT_WORDS = ("attack", "incident")
_TRAILING_STATUS_RE = re.compile(r"\s+(intercepted|sailing|docked)$")


def incident_reason(record: VesselRecord) -> str | None:
    """Return which signal marks *record* as an incident, or None for a vessel."""
    name = record.name.lower()
    if any(word in name for word in INCIDENT_WORDS):
        return "incident pattern"
    if _TRAILING_STATUS_RE.search(name):
        return "name ends with status"
    if not record.has_vessel_data:
        return "no vessel data"
    return None


def looks_like_incident(record: VesselRecord) -> bool:
    return incident_reason(record) is not None


def never_incident(record: VesselRecord) -> bool:
    """Keep every parsed row."""
    return False
