"""Scales: map data domains (years, timestamps) to pixel ranges.

A LinearScale for the competition year and a TimeScale for the derived
timestamps. Tick generation follows the usual 1/2/5 x 10^k stepping for numbers
and standard clock intervals (5 s, 15 s, 1 min, ...) for times, so axes read
cleanly without hardcoding tick positions.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from typing import Sequence

import numpy as np
import pandas as pd

from cycling_scatter.data_pipeline.load_records import RaceRecord

# Standard clock intervals (seconds) used for nice time domains and ticks
TIME_INTERVALS_SEC = (
    1,
    5,
    15,
    30,
    60,
    5 * 60,
    15 * 60,
    30 * 60,
    3600,
    3 * 3600,
    6 * 3600,
    12 * 3600,
    86400,
    2 * 86400,
)


def _tick_step(start: float, stop: float, count: int) -> float:
    """Step of 1, 2 or 5 times a power of ten giving roughly `count` ticks."""
    span = abs(stop - start)
    if span == 0 or count <= 0:
        return 0.0
    step0 = span / count
    step1 = 10 ** math.floor(math.log10(step0))
    error = step0 / step1
    if error >= math.sqrt(50):
        step1 *= 10
    elif error >= math.sqrt(10):
        step1 *= 5
    elif error >= math.sqrt(2):
        step1 *= 2
    return step1


def _interpolate(t: float, r0: float, r1: float) -> float:
    return r0 + t * (r1 - r0)


class LinearScale:
    """Continuous linear mapping from a numeric domain to a pixel range."""

    def __init__(self, domain: tuple[float, float], range_: tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return _interpolate((float(value) - d0) / (d1 - d0), r0, r1)

    def ticks(self, count: int = 10) -> list[float]:
        """Evenly spaced round values inside the domain."""
        d0, d1 = sorted(self.domain)
        step = _tick_step(d0, d1, count)
        if step == 0:
            return [d0]
        i0 = math.ceil(d0 / step)
        i1 = math.floor(d1 / step)
        return [float(v) for v in np.arange(i0, i1 + 1) * step]


def _to_seconds(ts: pd.Timestamp) -> float:
    return pd.Timestamp(ts).value / 1e9


def _from_seconds(sec: float) -> pd.Timestamp:
    return pd.Timestamp(int(round(sec * 1e9)))


def time_interval(start: pd.Timestamp, stop: pd.Timestamp, count: int = 10) -> int:
    """
    Pick the clock interval (seconds) closest to span / count.

    Between two candidate intervals the one with the smaller ratio to the
    target wins. Spans beyond the largest interval fall back to whole days.
    """
    target = abs(_to_seconds(stop) - _to_seconds(start)) / max(count, 1)
    i = bisect_right(TIME_INTERVALS_SEC, target)
    if i == 0:
        return TIME_INTERVALS_SEC[0]
    if i == len(TIME_INTERVALS_SEC):
        days = _tick_step(0, target * count / 86400, count)
        return int(max(1, round(days)) * 86400)
    lo, hi = TIME_INTERVALS_SEC[i - 1], TIME_INTERVALS_SEC[i]
    return lo if target / lo < hi / target else hi


class TimeScale:
    """Linear mapping from timestamps to a pixel range."""

    def __init__(
        self,
        domain: tuple[pd.Timestamp, pd.Timestamp],
        range_: tuple[float, float],
    ):
        self.domain = (pd.Timestamp(domain[0]), pd.Timestamp(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: pd.Timestamp) -> float:
        d0, d1 = (_to_seconds(d) for d in self.domain)
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return _interpolate((_to_seconds(value) - d0) / (d1 - d0), r0, r1)

    def nice(self, count: int = 10) -> TimeScale:
        """Round the domain outward to the chosen clock interval. Returns self."""
        start, stop = self.domain
        step = time_interval(start, stop, count)
        lo = math.floor(_to_seconds(start) / step) * step
        hi = math.ceil(_to_seconds(stop) / step) * step
        self.domain = (_from_seconds(lo), _from_seconds(hi))
        return self

    def ticks(self, count: int = 10) -> list[pd.Timestamp]:
        start, stop = self.domain
        step = time_interval(start, stop, count)
        i0 = math.ceil(_to_seconds(start) / step)
        i1 = math.floor(_to_seconds(stop) / step)
        return [_from_seconds(i * step) for i in range(i0, i1 + 1)]


def build_x_scale(
    records: Sequence[RaceRecord], padding: float, width: float
) -> LinearScale:
    """Year scale: domain [min(year) - 1, max(year) + 1] -> [padding, width - padding]."""
    if not records:
        raise ValueError("Cannot build a year scale without records")
    years = [r.year for r in records]
    return LinearScale((min(years) - 1, max(years) + 1), (padding, width - padding))


def build_y_scale(
    records: Sequence[RaceRecord], padding: float, height: float
) -> TimeScale:
    """Time scale over the record timestamps, made nice; earlier times at the top."""
    if not records:
        raise ValueError("Cannot build a time scale without records")
    stamps = [r.timestamp for r in records]
    return TimeScale((min(stamps), max(stamps)), (padding, height - padding)).nice()


def format_year(value: float) -> str:
    """Integer year, no thousands separator (e.g. '1994')."""
    return str(int(round(value)))


def format_clock(ts: pd.Timestamp) -> str:
    """Elapsed time as mm:ss."""
    return pd.Timestamp(ts).strftime("%M:%S")
