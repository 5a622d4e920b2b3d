"""Unit tests for the data pipeline (parse, fetch via a fake session, file load)."""

import json

import pandas as pd
import pytest
import requests

from cycling_scatter.data_pipeline import (
    EPOCH,
    derive_timestamp,
    fetch_records,
    load_records_from_file,
    parse_records,
    records_to_frame,
)


def test_parse_records_maps_feed_fields(sample_records):
    """Feed keys map onto RaceRecord fields in source order."""
    first = sample_records[0]
    assert first.year == 1998
    assert first.time == "38:30"
    assert first.seconds == 2310
    assert first.name == "A. Clean"
    assert first.doping_note == ""
    assert first.profile_url == "https://example.org/a-clean"
    assert first.place == 1
    assert first.nationality == "ITA"
    assert [r.year for r in sample_records] == [1998, 2005, 1995, 2012]


def test_optional_fields_default(sample_records):
    """Records without Place/Nationality get None and ''."""
    third = sample_records[2]
    assert third.place is None
    assert third.nationality == ""


def test_timestamp_is_epoch_plus_seconds(sample_records):
    for r in sample_records:
        assert r.timestamp == EPOCH + pd.Timedelta(seconds=r.seconds)
    assert derive_timestamp(0) == EPOCH
    assert derive_timestamp(2310).strftime("%M:%S") == "38:30"


def test_has_allegation(sample_records):
    assert [r.has_allegation for r in sample_records] == [False, True, False, True]


def test_parse_records_rejects_non_list():
    with pytest.raises(ValueError, match="JSON array"):
        parse_records({"Year": 1998})


def test_parse_records_rejects_missing_key(raw_payload):
    del raw_payload[1]["Seconds"]
    with pytest.raises(ValueError, match="Record 1 is missing keys: Seconds"):
        parse_records(raw_payload)


def test_parse_records_rejects_negative_seconds(raw_payload):
    raw_payload[0]["Seconds"] = -1
    with pytest.raises(ValueError, match="negative"):
        parse_records(raw_payload)


def test_parse_records_empty_list():
    assert parse_records([]) == []


def test_fetch_records_single_get(fake_session):
    """fetch_records issues exactly one GET with the timeout and parses the body."""
    records = fetch_records("https://example.org/data.json", timeout=5, session=fake_session)
    assert fake_session.calls == [("https://example.org/data.json", 5)]
    assert len(records) == 4


def test_fetch_records_http_error_propagates(make_session):
    session = make_session(payload=[], status_code=404)
    with pytest.raises(requests.HTTPError):
        fetch_records("https://example.org/missing.json", session=session)


def test_fetch_records_malformed_json_raises(make_session):
    session = make_session(json_error=ValueError("Expecting value"))
    with pytest.raises(ValueError, match="Malformed JSON"):
        fetch_records("https://example.org/bad.json", session=session)


def test_load_records_from_file(tmp_path, raw_payload):
    path = tmp_path / "cyclist-data.json"
    path.write_text(json.dumps(raw_payload), encoding="utf-8")
    records = load_records_from_file(path)
    assert [r.name for r in records] == ["A. Clean", "B. Rider", "C. Climber", "D. Descender"]


def test_load_records_from_file_malformed(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ValueError, match="Malformed JSON"):
        load_records_from_file(path)


def test_records_to_frame(sample_records):
    df = records_to_frame(sample_records)
    assert len(df) == 4
    assert list(df["year"]) == [1998, 2005, 1995, 2012]
    assert "timestamp" in df.columns


def test_records_to_frame_empty():
    df = records_to_frame([])
    assert df.empty
    assert "doping_note" in df.columns


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("Year", None, "invalid Year"),
        ("Year", "nineteen", "invalid Year"),
        ("Year", True, "invalid Year"),
        ("Place", [1], "invalid Place"),
        ("Place", {"rank": 1}, "invalid Place"),
        ("Seconds", float("inf"), "non-finite Seconds"),
        ("Seconds", float("nan"), "non-finite Seconds"),
        ("Seconds", "2310", "non-numeric Seconds"),
    ],
)
def test_parse_records_badly_typed_values_raise_value_error(raw_payload, field, value, message):
    """Badly typed Year/Place/Seconds raise ValueError naming the record, not TypeError."""
    raw_payload[2][field] = value
    with pytest.raises(ValueError, match=f"Record 2 has {message}"):
        parse_records(raw_payload)


def test_load_records_from_file_infinite_seconds(tmp_path, raw_payload):
    """json accepts Infinity; the loader rejects it as a bad record."""
    raw_payload[0]["Seconds"] = float("inf")
    path = tmp_path / "cyclist-data.json"
    path.write_text(json.dumps(raw_payload), encoding="utf-8")
    with pytest.raises(ValueError, match="non-finite"):
        load_records_from_file(path)
