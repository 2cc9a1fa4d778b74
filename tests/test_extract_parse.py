import pytest

from flotilla_report.extract import parse
from flotilla_report.extract.incidents import incident_reason, looks_like_incident, never_incident
from flotilla_report.schemas.models import VesselRecord, VesselStatus


def test_parse_block_basic(tracker_blocks):
    _, text = tracker_blocks[0]
    record = parse.extract_vessel(text, 1)
    assert record.id == 1
    assert record.name == "Alma"
    assert record.location == "Mediterranean Sea"
    assert record.status is VesselStatus.SAILING
    assert record.last_update_utc == "2 Oct 2025 01:43 UTC"
    assert record.speed == "6.59 knots"
    assert record.course == "90°"
    assert record.position == "31.7377, 33.4533"


def test_standalone_location_and_assumed_intercepted(tracker_blocks):
    _, text = tracker_blocks[2]
    record = parse.extract_vessel(text, 3)
    assert record.name == "Sirius"
    assert record.location == "Off Crete"
    assert record.status is VesselStatus.INTERCEPTED
    assert record.course is None


def test_missing_fields_get_defaults():
    record = parse.extract_vessel("7.\nSPEED\n3 knots", 7)
    assert record.name == "Vessel 7"
    assert record.status is VesselStatus.UNKNOWN
    assert record.location is None
    assert record.last_update_utc is None
    assert record.speed == "3 knots"


def test_label_on_last_line_is_ignored():
    record = parse.extract_vessel("Hope\nPOSITION", 2)
    assert record.name == "Hope"
    assert record.position is None


def test_labels_are_case_insensitive_and_consume_next_line():
    text = "Hope\nLast Update\nsailing\nPosition\n31.1, 34.2"
    record = parse.extract_vessel(text, 1)
    # the value line is consumed, so "sailing" is not read as a status
    assert record.last_update_utc == "sailing"
    assert record.status is VesselStatus.UNKNOWN
    assert record.position == "31.1, 34.2"


def test_extract_vessel_returns_none_on_internal_error(monkeypatch, caplog):
    def boom(text):
        raise RuntimeError("bad markup")

    monkeypatch.setattr(parse, "parse_block", boom)
    assert parse.extract_vessel("anything", 4) is None
    assert "row 4" in caplog.text


def test_extract_all_filters_incidents(tracker_blocks):
    vessels = parse.extract_all(tracker_blocks)
    assert [v.name for v in vessels] == ["Alma", "Sirius", "Conscience"]
    ids = [v.id for v in vessels]
    assert ids == [1, 3, 5]
    assert len(set(ids)) == len(ids)
    assert all(1 <= i <= len(tracker_blocks) for i in ids)


def test_extract_all_with_swapped_predicate(tracker_blocks):
    vessels = parse.extract_all(tracker_blocks, is_incident=never_incident)
    assert len(vessels) == len(tracker_blocks)


def test_extract_all_skips_failed_rows(monkeypatch, tracker_blocks):
    real = parse.extract_vessel
    monkeypatch.setattr(
        parse, "extract_vessel", lambda text, index: None if index == 1 else real(text, index)
    )
    vessels = parse.extract_all(tracker_blocks)
    assert [v.id for v in vessels] == [3, 5]


@pytest.mark.parametrize(
    "name,fields,reason",
    [
        ("Drone Attack near Crete", {"position": "1, 2"}, "incident pattern"),
        ("Reported INCIDENT", {"speed": "1 kn"}, "incident pattern"),
        ("Captain Nikos Sailing", {"course": "10°"}, "name ends with status"),
        ("Family Docked", {"course": "10°"}, "name ends with status"),
        ("Omar Mukhtar", {}, "no vessel data"),
        ("Omar Mukhtar", {"course": "10°"}, None),
    ],
)
def test_incident_reason(name, fields, reason):
    record = VesselRecord(id=1, name=name, **fields)
    assert incident_reason(record) == reason
    assert looks_like_incident(record) is (reason is not None)
