"""Deterministic filter pipeline: emotion ranges -> search -> entry type -> sort."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .extraction import extract
from .schemas import (
    EMOTION_AXES,
    AxisScores,
    EntryType,
    JournalEntry,
    TextEntry,
    VideoEntry,
    is_analyzed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmotionRange:
    """Inclusive [min, max] bound on one emotion axis."""

    min: float = 0.0
    max: float = 1.0

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def is_full(self) -> bool:
        return self.min == 0.0 and self.max == 1.0


class SortOrder(str, Enum):
    NEWEST_FIRST = "newest_first"


ALL_ENTRY_TYPES: FrozenSet[EntryType] = frozenset({EntryType.TEXT, EntryType.VIDEO})


@dataclass(frozen=True)
class FilterSpec:
    """User-chosen display criteria for the journal list.

    Ranges are expected to satisfy ``0 <= min <= max <= 1``; validating that
    is up to whoever builds the FilterSpec.
    """

    happiness: EmotionRange = field(default_factory=EmotionRange)
    fear: EmotionRange = field(default_factory=EmotionRange)
    sadness: EmotionRange = field(default_factory=EmotionRange)
    anger: EmotionRange = field(default_factory=EmotionRange)
    entry_types: FrozenSet[EntryType] = ALL_ENTRY_TYPES
    search_text: str = ""
    sort: SortOrder = SortOrder.NEWEST_FIRST

    def is_default_emotion_filter(self) -> bool:
        return all(r.is_full() for r in (self.happiness, self.fear, self.sadness, self.anger))

    def with_range(self, axis: str, emotion_range: EmotionRange) -> "FilterSpec":
        if axis not in EMOTION_AXES:
            raise ValueError(f"Unknown emotion axis: {axis}")
        return replace(self, **{axis: emotion_range})

    def with_search(self, text: str) -> "FilterSpec":
        return replace(self, search_text=text)

    def with_entry_types(self, types: Iterable[EntryType]) -> "FilterSpec":
        selected = frozenset(EntryType(t) for t in types)
        if not selected:
            raise ValueError("At least one entry type must stay selected")
        return replace(self, entry_types=selected)

    def toggle_entry_type(self, entry_type: EntryType) -> "FilterSpec":
        """Flip one type on or off; the last selected type cannot be removed."""
        entry_type = EntryType(entry_type)
        if entry_type in self.entry_types:
            if len(self.entry_types) == 1:
                return self
            return replace(self, entry_types=self.entry_types - {entry_type})
        return replace(self, entry_types=self.entry_types | {entry_type})


DEFAULT_FILTER_SPEC = FilterSpec()


def comparison_scores(entry: JournalEntry) -> Optional[AxisScores]:
    """Axis values the emotion filter compares, or None if unanalyzed."""
    if not is_analyzed(entry):
        return None
    if isinstance(entry, TextEntry):
        return entry.mood_metadata.axes() if entry.mood_metadata else None
    if isinstance(entry, VideoEntry):
        if entry.emotion_report is not None:
            return extract(entry.emotion_report)
        return entry.mood_metadata.axes() if entry.mood_metadata else None
    raise TypeError(f"Unsupported entry type: {type(entry).__name__}")


def apply_emotion_filter(entries: Sequence[JournalEntry], spec: FilterSpec) -> List[JournalEntry]:
    """Keep entries whose four axes all fall inside the requested ranges.

    With every range at [0, 1] nothing is dropped, so unanalyzed entries
    stay visible until the user touches an emotion slider.
    """
    if spec.is_default_emotion_filter():
        return list(entries)

    kept: List[JournalEntry] = []
    for entry in entries:
        scores = comparison_scores(entry)
        if scores is None:
            continue
        if (
            spec.happiness.contains(scores.happiness)
            and spec.fear.contains(scores.fear)
            and spec.sadness.contains(scores.sadness)
            and spec.anger.contains(scores.anger)
        ):
            kept.append(entry)
    return kept


def apply_search_filter(entries: Sequence[JournalEntry], search_text: str) -> List[JournalEntry]:
    """Case-insensitive substring search over text content; video never matches."""
    needle = (search_text or "").strip().lower()
    if not needle:
        return list(entries)

    kept: List[JournalEntry] = []
    for entry in entries:
        if isinstance(entry, VideoEntry):
            continue
        if isinstance(entry, TextEntry):
            if needle in entry.content.lower():
                kept.append(entry)
            continue
        raise TypeError(f"Unsupported entry type: {type(entry).__name__}")
    return kept


def apply_entry_type_filter(entries: Sequence[JournalEntry], entry_types: FrozenSet[EntryType]) -> List[JournalEntry]:
    if ALL_ENTRY_TYPES <= set(entry_types):
        return list(entries)
    return [entry for entry in entries if entry.entry_type in entry_types]


def _timestamp_key(entry: JournalEntry) -> float:
    ts: datetime = entry.created_at
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def sort_entries(entries: Sequence[JournalEntry], order: SortOrder = SortOrder.NEWEST_FIRST) -> List[JournalEntry]:
    """Newest first; entries with equal timestamps keep their relative order."""
    if order != SortOrder.NEWEST_FIRST:
        raise ValueError(f"Unsupported sort order: {order}")
    # sorted() stays stable with reverse=True.
    return sorted(entries, key=_timestamp_key, reverse=True)


def apply_filter_pipeline(entries: Sequence[JournalEntry], spec: FilterSpec = DEFAULT_FILTER_SPEC) -> List[JournalEntry]:
    """Run every stage in order and return a new list; inputs are untouched."""
    filtered = apply_emotion_filter(entries, spec)
    filtered = apply_search_filter(filtered, spec.search_text)
    filtered = apply_entry_type_filter(filtered, spec.entry_types)
    filtered = sort_entries(filtered, spec.sort)
    logger.debug("Filter pipeline kept %d of %d entries", len(filtered), len(entries))
    return filtered
