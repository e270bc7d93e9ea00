"""Shared fixtures for the rankcast test suite."""

from datetime import date, datetime
from pathlib import Path

import pytest

from rankcast import models as m
from rankcast.config import RankcastConfig
from rankcast.pipeline import load_history

TEST_DATA = Path(__file__).resolve().parent.parent / "test_data.json"

# Fixed "now" for every test: 18 days before the exam
NOW = datetime(2026, 4, 15, 9, 0)


@pytest.fixture
def cfg():
    return RankcastConfig()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_history():
    return load_history(TEST_DATA)


@pytest.fixture
def test_data_path():
    return TEST_DATA


@pytest.fixture
def minimal_history():
    """One subject at 75% syllabus and a single 480 test: hand-checkable numbers."""
    return m.HistorySnapshot(
        tests=(m.TestRecord(date=date(2026, 4, 10), score=480.0),),
        subjects=(m.SubjectProgress("Physics", chapters_total=4, chapters_completed=3),),
    )


@pytest.fixture
def standard_cycle():
    return m.CycleRecord(
        cycle_start_date=date(2026, 4, 1), cycle_length=28, period_length=5,
    )
