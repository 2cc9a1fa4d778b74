import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# ensure project root is on the import path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flotilla_report.common.config import Settings  # noqa: E402

logging.getLogger("sensors").setLevel(logging.WARNING)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixed_now():
    return datetime(2025, 10, 2, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", export_dir=tmp_path / "exports")


@pytest.fixture
def sample_raw():
    return [
        {
            "name": "Test Vessel 1",
            "status": "SAILING",
            "last_update_utc": "2025-10-02T02:20:00Z",
            "speed": "6.59 knots",
            "position": "31.7377, 33.4533",
            "course": "90°",
            "location": "Mediterranean Sea",
        },
        {
            "name": "Test Vessel 2",
            "status": "INTERCEPTED",
            "last_update_utc": "2025-10-02T01:15:00Z",
            "speed": "0 knots",
            "position": "31.5000, 34.0000",
            "course": "0°",
            "location": "Gaza Coast",
        },
    ]


@pytest.fixture
def tracker_blocks():
    return [
        (idx, (FIXTURES / f"row_{idx}.txt").read_text())
        for idx in range(1, 6)
    ]
