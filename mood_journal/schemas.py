"""Core data structures shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class EntryType(str, Enum):
    TEXT = "text"
    VIDEO = "video"


EMOTION_AXES = ("happiness", "fear", "sadness", "anger")


def clamp_unit(value: float) -> float:
    """Pull a score into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


def coerce_sentiment(value: object) -> Sentiment:
    """Match a sentiment label case-insensitively, defaulting to neutral."""
    if isinstance(value, Sentiment):
        return value
    if not isinstance(value, str):
        return Sentiment.NEUTRAL
    try:
        return Sentiment(value.strip().lower())
    except ValueError:
        return Sentiment.NEUTRAL


@dataclass(frozen=True)
class AxisScores:
    """The four emotion axes without a sentiment label."""

    happiness: float
    fear: float
    sadness: float
    anger: float

    def with_sentiment(self, sentiment: object) -> "EmotionVector":
        return EmotionVector(
            happiness=self.happiness,
            fear=self.fear,
            sadness=self.sadness,
            anger=self.anger,
            sentiment=coerce_sentiment(sentiment),
        ).normalized()


@dataclass(frozen=True)
class EmotionVector:
    """Normalized emotion scores attached to an analyzed entry.

    The axes are independent intensities, not a distribution, so they do
    not need to sum to one.
    """

    happiness: float
    fear: float
    sadness: float
    anger: float
    sentiment: Sentiment = Sentiment.NEUTRAL

    def normalized(self) -> "EmotionVector":
        """Return a copy with every axis clamped and the sentiment coerced."""
        return EmotionVector(
            happiness=clamp_unit(self.happiness),
            fear=clamp_unit(self.fear),
            sadness=clamp_unit(self.sadness),
            anger=clamp_unit(self.anger),
            sentiment=coerce_sentiment(self.sentiment),
        )

    def axes(self) -> AxisScores:
        return AxisScores(self.happiness, self.fear, self.sadness, self.anger)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "happiness": self.happiness,
            "fear": self.fear,
            "sadness": self.sadness,
            "anger": self.anger,
            "sentiment": self.sentiment.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmotionVector":
        return cls(
            happiness=float(data.get("happiness", 0.0)),
            fear=float(data.get("fear", 0.0)),
            sadness=float(data.get("sadness", 0.0)),
            anger=float(data.get("anger", 0.0)),
            sentiment=coerce_sentiment(data.get("sentiment")),
        ).normalized()


@dataclass(frozen=True)
class EmotionScore:
    """One raw (name, score) pair from an external emotion channel."""

    name: str
    score: float


def _parse_channel(node: object) -> Tuple[EmotionScore, ...]:
    # Channels arrive either as a bare list or wrapped as {"emotions": [...]}.
    if isinstance(node, dict):
        node = node.get("emotions")
    if not isinstance(node, list):
        return ()
    out: List[EmotionScore] = []
    for item in node:
        if not isinstance(item, dict) or "name" not in item:
            continue
        try:
            score = float(item.get("score"))
        except (TypeError, ValueError, OverflowError):
            continue
        out.append(EmotionScore(name=str(item["name"]), score=score))
    return tuple(out)


@dataclass(frozen=True)
class MultimodalEmotionReport:
    """Raw per-channel emotion scores from the video emotion service."""

    face: Tuple[EmotionScore, ...] = ()
    prosody: Tuple[EmotionScore, ...] = ()

    def all_scores(self) -> List[EmotionScore]:
        return [*self.face, *self.prosody]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.face:
            data["face"] = {"emotions": [{"name": e.name, "score": e.score} for e in self.face]}
        if self.prosody:
            data["prosody"] = {"emotions": [{"name": e.name, "score": e.score} for e in self.prosody]}
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MultimodalEmotionReport":
        data = data or {}
        return cls(face=_parse_channel(data.get("face")), prosody=_parse_channel(data.get("prosody")))


@dataclass(frozen=True)
class TextEntry:
    """A typed-in journal entry."""

    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    content: str = ""
    analysis_status: AnalysisStatus = AnalysisStatus.PENDING
    mood_metadata: Optional[EmotionVector] = None

    @property
    def entry_type(self) -> EntryType:
        return EntryType.TEXT


@dataclass(frozen=True)
class VideoEntry:
    """A recorded video journal entry."""

    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    media_url: str = ""
    thumbnail_url: str = ""
    duration_seconds: float = 0.0
    analysis_status: AnalysisStatus = AnalysisStatus.PENDING
    mood_metadata: Optional[EmotionVector] = None
    emotion_report: Optional[MultimodalEmotionReport] = None
    job_id: Optional[str] = None

    @property
    def entry_type(self) -> EntryType:
        return EntryType.VIDEO


JournalEntry = Union[TextEntry, VideoEntry]


def is_analyzed(entry: JournalEntry) -> bool:
    return entry.analysis_status == AnalysisStatus.SUCCESS


def updated(entry: JournalEntry, **fields: Any) -> JournalEntry:
    """Return a copy of an entry with fields replaced."""
    return replace(entry, **fields)
