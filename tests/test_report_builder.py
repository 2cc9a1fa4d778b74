from datetime import timedelta

import pytest

from flotilla_report.reporting.builder import build_report, history_entry, summarize
from flotilla_report.schemas.models import VesselRecord, VesselStatus


def _record(idx, when, status="SAILING", position="31.6, 34.1"):
    return VesselRecord(
        id=idx,
        name=f"Boat {idx}",
        status=status,
        last_update_utc=when,
        position=position,
        speed="5 knots",
    )


def test_sample_batch_end_to_end(sample_raw, fixed_now):
    report = build_report(sample_raw, now=fixed_now)
    assert report.total_vessels == 2
    assert [v.name for v in report.vessels] == ["Test Vessel 1", "Test Vessel 2"]
    assert report.summary.model_dump() == {
        "sailing": 1,
        "intercepted": 1,
        "docked": 0,
        "anchored": 0,
        "unknown": 0,
        "most_recent_update": "2025-10-02 10:20:00",
    }
    first = report.vessels[0]
    assert first.id == 1
    assert first.last_update_utc == "2025-10-02T02:20:00Z"
    assert first.last_update_local == "2025-10-02T10:20:00+08:00"
    assert first.distance_to_gaza_nm == pytest.approx(52.9, abs=0.3)
    assert first.distance_to_gaza.endswith(" nm")
    assert report.report_generated == "2025-10-02T11:00:00+08:00"
    assert report.report_generated_display == "2025-10-02 11:00:00"


def test_empty_batch(fixed_now):
    report = build_report([], now=fixed_now)
    assert report.total_vessels == 0
    assert report.vessels == []
    summary = report.summary
    assert (summary.sailing, summary.intercepted, summary.docked, summary.anchored, summary.unknown) == (0, 0, 0, 0, 0)
    assert summary.most_recent_update is None


def test_sorted_most_recent_first(fixed_now):
    t = fixed_now
    records = [
        _record(1, (t - timedelta(hours=1)).isoformat()),
        _record(2, (t - timedelta(hours=3)).isoformat()),
        _record(3, (t - timedelta(hours=2)).isoformat()),
    ]
    report = build_report(records, now=fixed_now)
    assert [v.id for v in report.vessels] == [1, 3, 2]


def test_equal_timestamps_keep_input_order(fixed_now):
    when = "2025-10-01T12:00:00Z"
    records = [_record(i, when) for i in (4, 2, 9, 1)]
    report = build_report(records, now=fixed_now)
    assert [v.id for v in report.vessels] == [4, 2, 9, 1]


def test_mixed_formats_sort_on_instant(fixed_now):
    records = [
        _record(1, "1 Oct 2025 23:00 UTC"),
        _record(2, "2025-10-02T09:30:00+08:00"),  # 01:30 UTC
    ]
    report = build_report(records, now=fixed_now)
    assert [v.id for v in report.vessels] == [2, 1]


def test_bad_fields_recovered_in_place(fixed_now):
    record = _record(1, "whenever", position="somewhere")
    report = build_report([record], now=fixed_now)
    vessel = report.vessels[0]
    assert vessel.last_update_utc == "2025-10-02T03:00:00Z"
    assert vessel.distance_to_gaza_nm is None
    assert vessel.distance_to_gaza is None


def test_no_record_dropped(fixed_now):
    records = [_record(i, None, status=s, position=None) for i, s in enumerate(
        ["SAILING", "DOCKED", "ANCHORED", "bogus", "INTERCEPTED"], start=1
    )]
    report = build_report(records, now=fixed_now)
    assert report.total_vessels == 5
    summary = report.summary
    assert (summary.sailing, summary.docked, summary.anchored, summary.unknown, summary.intercepted) == (1, 1, 1, 1, 1)


def test_summarize_counts_unknown_bucket(fixed_now):
    report = build_report([_record(1, None, status=VesselStatus.UNKNOWN)], now=fixed_now)
    assert summarize(report.vessels).unknown == 1


def test_raw_dicts_get_positional_ids(sample_raw, fixed_now):
    report = build_report(list(reversed(sample_raw)), now=fixed_now)
    by_name = {v.name: v.id for v in report.vessels}
    assert by_name == {"Test Vessel 2": 1, "Test Vessel 1": 2}


def test_history_entry_projection(sample_raw, fixed_now):
    report = build_report(sample_raw, now=fixed_now)
    entry = history_entry(report)
    assert entry.timestamp == report.report_generated
    assert entry.total_vessels == 2
    assert entry.summary == report.summary


def test_out_of_range_timestamps_use_report_time(fixed_now):
    report = build_report(
        [
            _record(1, "9999-12-31T23:00:00Z"),
            _record(2, "0001-01-01T00:00:00+01:00"),
            _record(3, "2025-10-02T02:00:00Z"),
        ],
        now=fixed_now,
    )
    assert report.total_vessels == 3
    by_id = {v.id: v for v in report.vessels}
    assert by_id[1].last_update_utc == "2025-10-02T03:00:00Z"
    assert by_id[2].last_update_local_display == "2025-10-02 11:00:00"
    assert by_id[3].last_update_utc == "2025-10-02T02:00:00Z"
    assert [v.id for v in report.vessels] == [1, 2, 3]
