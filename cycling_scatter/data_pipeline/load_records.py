"""Load race records from the cyclist-data JSON feed; derive a timestamp per record.

- Data source: one unauthenticated GET returning a JSON array of
  {Year, Time, Seconds, Name, Doping, URL} objects (plus Place and Nationality).
- Pipeline: fetch once, decode, validate, derive the timestamp used by the
  vertical time scale. Records are immutable after load.
- No retries or caching: a failed fetch or malformed body raises.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, NamedTuple, Sequence

import pandas as pd
import requests

from cycling_scatter.utils.config import DATA_URL, REQUEST_TIMEOUT_SEC

logger = logging.getLogger(__name__)

# Elapsed seconds are placed on this origin so the y-axis can be a time scale
EPOCH = pd.Timestamp("1970-01-01 00:00:00")

REQUIRED_KEYS = ("Year", "Time", "Seconds", "Name", "Doping", "URL")


class RaceRecord(NamedTuple):
    """One ride up the climb: rider, year, elapsed time and doping note."""

    year: int
    time: str
    seconds: float
    name: str
    doping_note: str
    profile_url: str
    timestamp: pd.Timestamp
    place: int | None = None
    nationality: str = ""

    @property
    def has_allegation(self) -> bool:
        return self.doping_note != ""


def derive_timestamp(seconds: float) -> pd.Timestamp:
    """Elapsed seconds as a point in time: EPOCH + seconds."""
    return EPOCH + pd.Timedelta(seconds=seconds)


def _as_int(value: Any, field: str, index: int) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Record {index} has invalid {field}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Record {index} has invalid {field}: {value!r}") from e


def _parse_record(raw: dict[str, Any], index: int) -> RaceRecord:
    if not isinstance(raw, dict):
        raise ValueError(f"Record {index} is not an object: {raw!r}")
    missing = [k for k in REQUIRED_KEYS if k not in raw]
    if missing:
        raise ValueError(f"Record {index} is missing keys: {', '.join(missing)}")
    seconds = raw["Seconds"]
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
        raise ValueError(f"Record {index} has non-numeric Seconds: {seconds!r}")
    if not math.isfinite(seconds):
        raise ValueError(f"Record {index} has non-finite Seconds: {seconds}")
    if seconds < 0:
        raise ValueError(f"Record {index} has negative Seconds: {seconds}")
    try:
        timestamp = derive_timestamp(seconds)
    except (OverflowError, ValueError) as e:
        raise ValueError(f"Record {index} has out-of-range Seconds: {seconds}") from e
    place = raw.get("Place")
    return RaceRecord(
        year=_as_int(raw["Year"], "Year", index),
        time=str(raw["Time"]),
        seconds=seconds,
        name=str(raw["Name"]),
        doping_note=str(raw["Doping"] or ""),
        profile_url=str(raw["URL"] or ""),
        timestamp=timestamp,
        place=_as_int(place, "Place", index) if place is not None else None,
        nationality=str(raw.get("Nationality") or ""),
    )


def parse_records(payload: Any) -> list[RaceRecord]:
    """
    Validate a decoded JSON payload and build RaceRecords.

    Parameters
    ----------
    payload : list of dict
        Decoded JSON array, field names as received (Year, Time, Seconds, ...).

    Returns
    -------
    list[RaceRecord]
        One record per element, in source order, each with its timestamp.

    Raises
    ------
    ValueError
        If the payload is not a list, a record lacks a required key,
        Seconds is negative, non-numeric or non-finite, or Year/Place is
        not an integer.
    """
    if not isinstance(payload, list):
        raise ValueError(
            f"Expected a JSON array of race records, got {type(payload).__name__}"
        )
    return [_parse_record(raw, i) for i, raw in enumerate(payload)]


def fetch_records(
    url: str = DATA_URL,
    *,
    timeout: float = REQUEST_TIMEOUT_SEC,
    session: requests.Session | None = None,
) -> list[RaceRecord]:
    """
    Fetch the race records with a single GET and parse them.

    Parameters
    ----------
    url : str
        Endpoint serving the JSON array. Default: config.DATA_URL.
    timeout : float
        Request timeout in seconds.
    session : requests.Session, optional
        Session to issue the request with (e.g. a stub in tests).

    Raises
    ------
    requests.RequestException
        On connection errors or a non-2xx status.
    ValueError
        If the body is not valid JSON or the records are malformed.
    """
    http = session if session is not None else requests
    logger.info("Fetching race records from %s", url)
    response = http.get(url, timeout=timeout)
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as e:
        raise ValueError(f"Malformed JSON from {url}: {e}") from e
    records = parse_records(payload)
    logger.info("Loaded %d race records", len(records))
    return records


def load_records_from_file(path: str | Path) -> list[RaceRecord]:
    """Parse race records from a local JSON file (same format as the feed)."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in {path}: {e}") from e
    records = parse_records(payload)
    logger.info("Loaded %d race records from %s", len(records), path)
    return records


def records_to_frame(records: Sequence[RaceRecord]) -> pd.DataFrame:
    """One row per record; columns named after the RaceRecord fields."""
    if not records:
        return pd.DataFrame(columns=list(RaceRecord._fields))
    return pd.DataFrame([r._asdict() for r in records], columns=list(RaceRecord._fields))
