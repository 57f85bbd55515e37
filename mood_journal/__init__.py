"""Mood journal core: emotion analysis and entry filtering."""

from .config import AppConfig
from .filtering import DEFAULT_FILTER_SPEC, EmotionRange, FilterSpec, apply_filter_pipeline
from .journal import MoodJournal

__all__ = ["AppConfig", "DEFAULT_FILTER_SPEC", "EmotionRange", "FilterSpec", "MoodJournal", "apply_filter_pipeline"]
