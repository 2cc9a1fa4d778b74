"""Turn a batch of scraped vessel records into a report envelope.

Each vessel gets a canonical UTC timestamp, its display-zone equivalent
and its distance to the reference point; the batch is then sorted most
recent first and summarized by status. Nothing is dropped here: filtering
happens during extraction.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from flotilla_report.common.config import DEFAULT_TIMEZONE
from flotilla_report.common.diagnostics import validate_io
from flotilla_report.reporting.geo import GAZA, distance_to
from flotilla_report.reporting.timestamps import (
    as_utc,
    format_utc,
    parse_timestamp,
    to_display_zone,
    utcnow,
)
from flotilla_report.schemas.models import (
    HistoryEntry,
    ReportEnvelope,
    ReportVessel,
    SummaryStats,
    VesselRecord,
)
from flotilla_report.sensors import sensor

log = logging.getLogger(__name__)

STATUS_BUCKETS = ("sailing", "intercepted", "docked", "anchored")


def enrich_vessel(
    record: VesselRecord, now: datetime, tz: str = DEFAULT_TIMEZONE
) -> tuple[datetime, ReportVessel]:
    """Return the parsed instant alongside the enriched vessel."""
    instant = parse_timestamp(record.last_update_utc, now=now)
    local = to_display_zone(instant, tz)
    distance = distance_to(record.position, GAZA)
    vessel = ReportVessel(
        **record.model_dump(exclude={"last_update_utc"}),
        last_update_utc=format_utc(instant),
        last_update_local=local.iso,
        last_update_local_display=local.display,
        distance_to_gaza_nm=distance.distance_nm,
        distance_to_gaza=distance.display,
    )
    return instant, vessel


def summarize(vessels: list[ReportVessel]) -> SummaryStats:
    counts = Counter(v.status.value.lower() for v in vessels)
    known = {bucket: counts.get(bucket, 0) for bucket in STATUS_BUCKETS}
    unknown = sum(n for status, n in counts.items() if status not in STATUS_BUCKETS)
    return SummaryStats(
        **known,
        unknown=unknown,
        most_recent_update=vessels[0].last_update_local_display if vessels else None,
    )


def coerce_records(records: Iterable[VesselRecord | dict]) -> list[VesselRecord]:
    """Accept typed records or raw dicts; raw dicts get a 1-based id if missing."""
    batch: list[VesselRecord] = []
    for index, record in enumerate(records, start=1):
        if not isinstance(record, VesselRecord):
            record = VesselRecord(**{**record, "id": record.get("id") or index})
        batch.append(record)
    return batch


@validate_io
@sensor("report")
def build_report(
    records: Iterable[VesselRecord | dict],
    now: datetime | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> ReportEnvelope:
    """Normalize, sort and summarize *records* into a :class:`ReportEnvelope`."""
    now = as_utc(now) if now is not None else utcnow()
    batch = coerce_records(records)
    log.info("processing %d vessels", len(batch))

    enriched = [enrich_vessel(r, now, tz) for r in batch]
    # stable under reverse=True: equal timestamps keep input order
    enriched.sort(key=lambda pair: pair[0], reverse=True)
    vessels = [v for _, v in enriched]

    summary = summarize(vessels)
    generated = to_display_zone(now, tz)
    envelope = ReportEnvelope(
        report_generated=generated.iso,
        report_generated_display=generated.display,
        total_vessels=len(vessels),
        vessels=vessels,
        summary=summary,
    )
    log.info(
        "processing complete: %d vessels, %d sailing, %d intercepted",
        envelope.total_vessels,
        summary.sailing,
        summary.intercepted,
    )
    return envelope


def history_entry(envelope: ReportEnvelope) -> HistoryEntry:
    return HistoryEntry(
        timestamp=envelope.report_generated,
        total_vessels=envelope.total_vessels,
        summary=envelope.summary,
    )
