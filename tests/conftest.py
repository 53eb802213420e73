"""Shared fixtures for cravelog tests."""

from datetime import datetime, timedelta, timezone

import pytest

from cravelog.models import CravingRecord, Emotion
from cravelog.store import CravingStore

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def make_craving(description="Craving", intensity=5.0, resistance=5.0,
                 timestamp=None, id="", emotions=None) -> CravingRecord:
    return CravingRecord(
        id=id,
        timestamp=timestamp or NOW,
        description=description,
        intensity=intensity,
        resistance=resistance,
        emotions=emotions or [],
    )


@pytest.fixture
def store(tmp_path):
    """Empty initialized craving store."""
    s = CravingStore(tmp_path / "cravings.db")
    s.initialize()
    yield s
    s.close()


@pytest.fixture
def seeded_store(store):
    """Store with a spread of intensities, resistances and ages."""
    records = [
        make_craving("Coffee craving after lunch", 8, 3, NOW - timedelta(days=1),
                     emotions=[Emotion.TIRED]),
        make_craving("Sugar craving at the office", 5, 9, NOW - timedelta(days=10)),
        make_craving("Late night snack", 7, 7, NOW - timedelta(hours=3),
                     emotions=[Emotion.BORED, Emotion.LONELY]),
        make_craving("Cigarette with friends", 9, 8, NOW - timedelta(days=2),
                     emotions=[Emotion.HAPPY]),
    ]
    for r in records:
        store.insert(r)
    return store
