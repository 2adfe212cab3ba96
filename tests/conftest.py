"""Shared fixtures: Flask app on in-memory SQLite, test client, history stores."""

from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from clinical_scoring import ClifOrganScoring
from history import DiagnosisHistory, InMemoryStorage


# Kidney-only failure scenario: MAP 70, FiO2 29%, P/F 862.
BASELINE_INPUTS = {
    "bilirubin": "3",
    "creatinine": "4.0",
    "rrt": False,
    "he_grade": 0,
    "inr": "1.5",
    "sbp": "90",
    "dbp": "60",
    "vasopressors": False,
    "pao2": "250",
    "o2_flow": "2",
    "use_spo2": False,
    "spo2": "",
}


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def baseline_inputs():
    return dict(BASELINE_INPUTS)


@pytest.fixture
def scorer():
    return ClifOrganScoring()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def history(storage):
    return DiagnosisHistory(storage, clock=FakeClock())


@pytest.fixture
def app():
    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_clock():
    return FakeClock
