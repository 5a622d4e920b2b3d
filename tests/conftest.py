"""Shared pytest fixtures for the race-time scatter chart tests."""

import sys
from pathlib import Path

# Ensure project root is on sys.path so cycling_scatter and render_chart import (pytest adds tests/ first)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

import matplotlib

matplotlib.use("Agg")

import pytest

from cycling_scatter.data_pipeline import parse_records
from cycling_scatter.visualization import ChartRenderer


@pytest.fixture
def raw_payload():
    """Four rides in feed format: two clean, two with allegations."""
    return [
        {
            "Time": "38:30",
            "Place": 1,
            "Seconds": 2310,
            "Name": "A. Clean",
            "Year": 1998,
            "Nationality": "ITA",
            "Doping": "",
            "URL": "https://example.org/a-clean",
        },
        {
            "Time": "36:40",
            "Place": 2,
            "Seconds": 2200,
            "Name": "B. Rider",
            "Year": 2005,
            "Nationality": "USA",
            "Doping": "Admitted EPO use",
            "URL": "https://example.org/b-rider",
        },
        {
            "Time": "37:15",
            "Seconds": 2235,
            "Name": "C. Climber",
            "Year": 1995,
            "Doping": "",
            "URL": "https://example.org/c-climber?ref=alpe&x=1",
        },
        {
            "Time": "39:50",
            "Seconds": 2390,
            "Name": "D. Descender",
            "Year": 2012,
            "Doping": "Tested positive",
            "URL": "",
        },
    ]


@pytest.fixture
def sample_records(raw_payload):
    return parse_records(raw_payload)


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def renderer(opened_urls):
    """Fresh renderer whose click navigation is recorded instead of opening a browser."""
    return ChartRenderer(navigate=opened_urls.append)


@pytest.fixture
def rendered(renderer, sample_records):
    renderer.render(sample_records)
    return renderer


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests

            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records each GET."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return self.response


@pytest.fixture
def fake_session(raw_payload):
    return FakeSession(FakeResponse(raw_payload))


@pytest.fixture
def make_session():
    def _make(**kwargs):
        return FakeSession(FakeResponse(**kwargs))

    return _make
