"""
Built-in sample batch.

Six measurements for three subjects, used by the ``demo`` command and as a
stand-in data source when no external API is configured.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from healthbatch.utils.timestamps import format_iso, utc_now

# (id, subject, category, value, age of the measurement)
_SAMPLES = (
    ("1", "P001", "blood_pressure", 120, timedelta(days=1)),
    ("2", "P002", "heart_rate", 72, timedelta(hours=12)),
    ("3", "P001", "blood_pressure", 118, timedelta(0)),
    ("4", "P003", "temperature", 98.6, timedelta(hours=1)),
    ("5", "P002", "heart_rate", 75, timedelta(0)),
    ("6", "P003", "blood_pressure", 122, timedelta(hours=2)),
)


def sample_records(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Return the sample batch as raw JSON-style dictionaries.

    Args:
        now: Reference time the measurement ages are counted back from

    Returns:
        list: Fresh dictionaries on every call
    """
    now = now or utc_now()
    return [
        {
            "id": record_id,
            "subjectId": subject_id,
            "category": category,
            "value": value,
            "timestamp": format_iso(now - age),
        }
        for record_id, subject_id, category, value, age in _SAMPLES
    ]
