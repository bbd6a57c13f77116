"""
Pytest Configuration and Shared Fixtures

This file contains test fixtures and configuration shared across all tests.
"""

from typing import Dict, List

import pytest

from healthbatch.models.schemas import HealthRecord
from healthbatch.utils.config import get_settings


# ============================================================================
# Settings isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings so environment changes in a test do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================================
# Sample data fixtures
# ============================================================================


@pytest.fixture
def make_record():
    """Factory for raw record dictionaries with sensible defaults."""

    def _make(record_id="1", **overrides) -> Dict:
        record = {
            "id": record_id,
            "subjectId": "P001",
            "category": "heart_rate",
            "value": 72,
            "timestamp": "2024-01-15T10:30:00Z",
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def sample_record(make_record) -> Dict:
    """Returns one complete raw record."""
    return make_record(metadata={"device": "cuff-7", "unit": "bpm"})


@pytest.fixture
def dirty_batch(make_record) -> List[Dict]:
    """
    Six raw records: two share id "2", one has no subjectId.

    Cleaning keeps four: ids 1, 2 (first occurrence), 4 and 5.
    """
    return [
        make_record("1", category="blood_pressure", value=120),
        make_record("2", subjectId="P002", category="heart_rate", value="72"),
        make_record("2", subjectId="P009", category="heart_rate", value=99),
        make_record("3", subjectId=None, category="temperature", value=98.6),
        make_record("4", subjectId="P003", category="temperature", value="98.6"),
        make_record("5", subjectId="P003", category="blood_pressure", value="n/a"),
    ]


@pytest.fixture
def records(make_record) -> List[HealthRecord]:
    """Returns parsed, already-normalized records."""
    return [
        HealthRecord.from_dict(make_record("1", category="bp", value=10)),
        HealthRecord.from_dict(make_record("2", category="hr", value=20)),
        HealthRecord.from_dict(make_record("3", category="bp", value=30)),
        HealthRecord.from_dict(make_record("4", category="hr", value="n/a")),
    ]


# ============================================================================
# Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
