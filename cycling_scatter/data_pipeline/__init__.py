"""Data pipeline: fetch, parse and tabulate race records."""

from cycling_scatter.data_pipeline.load_records import (
    EPOCH,
    RaceRecord,
    derive_timestamp,
    fetch_records,
    load_records_from_file,
    parse_records,
    records_to_frame,
)

__all__ = [
    "EPOCH",
    "RaceRecord",
    "derive_timestamp",
    "fetch_records",
    "load_records_from_file",
    "parse_records",
    "records_to_frame",
]
