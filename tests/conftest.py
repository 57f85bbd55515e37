# shared fixtures for the mood journal tests
# entry builders, an in-memory sqlite repository, and a fixed clock

from datetime import datetime, timezone
from itertools import count

import pytest

from mood_journal.config import RetryConfig
from mood_journal.schemas import (
    AnalysisStatus,
    EmotionScore,
    EmotionVector,
    MultimodalEmotionReport,
    Sentiment,
    TextEntry,
    VideoEntry,
)
from mood_journal.storage import SQLiteEntryRepository

OWNER_ID = "user-1"
OTHER_OWNER_ID = "user-2"

_ids = count(1)


def ts(day: str, hour: int = 12) -> datetime:
    """2024-01-03 -> aware utc datetime at noon"""
    return datetime.fromisoformat(day).replace(hour=hour, tzinfo=timezone.utc)


def make_text(
    content="a quiet day",
    created="2024-01-01",
    happiness=None,
    fear=0.0,
    sadness=0.0,
    anger=0.0,
    status=None,
    owner_id=OWNER_ID,
    entry_id=None,
):
    mood = None
    if happiness is not None:
        mood = EmotionVector(happiness, fear, sadness, anger, Sentiment.NEUTRAL)
    if status is None:
        status = AnalysisStatus.SUCCESS if mood else AnalysisStatus.PENDING
    created_at = ts(created) if isinstance(created, str) else created
    return TextEntry(
        id=entry_id or f"text-{next(_ids)}",
        owner_id=owner_id,
        created_at=created_at,
        updated_at=created_at,
        content=content,
        analysis_status=status,
        mood_metadata=mood,
    )


def make_report(face=(), prosody=()):
    return MultimodalEmotionReport(
        face=tuple(EmotionScore(n, s) for n, s in face),
        prosody=tuple(EmotionScore(n, s) for n, s in prosody),
    )


def make_video(
    created="2024-01-01",
    report=None,
    status=None,
    owner_id=OWNER_ID,
    entry_id=None,
):
    if status is None:
        status = AnalysisStatus.SUCCESS if report is not None else AnalysisStatus.PENDING
    created_at = ts(created) if isinstance(created, str) else created
    return VideoEntry(
        id=entry_id or f"video-{next(_ids)}",
        owner_id=owner_id,
        created_at=created_at,
        updated_at=created_at,
        media_url="https://cdn.example.com/v.mp4",
        thumbnail_url="https://cdn.example.com/v.jpg",
        duration_seconds=42.0,
        analysis_status=status,
        emotion_report=report,
    )


@pytest.fixture
def repo():
    repository = SQLiteEntryRepository(":memory:")
    yield repository
    repository.close()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 6, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def no_wait_retry():
    return RetryConfig(max_attempts=3, delay_seconds=0.0, backoff_multiplier=2.0)
