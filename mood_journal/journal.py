"""Orchestration layer: entry creation, analysis lifecycle, filtered listing."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .analysis import MoodAnalyzer, build_mood_analyzer
from .config import AppConfig, RetryConfig
from .errors import AnalysisError, EmptyContentError, EntryNotFoundError
from .extraction import extract
from .filtering import DEFAULT_FILTER_SPEC, FilterSpec, apply_filter_pipeline
from .grouping import DateGroup, group_by_date
from .retry import with_retry
from .schemas import AnalysisStatus, JournalEntry, Sentiment, TextEntry, VideoEntry
from .storage import EntryRepository, SQLiteEntryRepository
from .video import VideoEmotionAnalyzer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MoodJournal:
    """High-level service composed of injected collaborators."""

    def __init__(
        self,
        repository: EntryRepository,
        mood_analyzer: MoodAnalyzer,
        video_analyzer: Optional[VideoEmotionAnalyzer] = None,
        retry: Optional[RetryConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.mood_analyzer = mood_analyzer
        self.video_analyzer = video_analyzer
        self.retry = retry or RetryConfig()
        self.clock = clock

    @classmethod
    def from_config(cls, config: AppConfig) -> "MoodJournal":
        return cls(
            repository=SQLiteEntryRepository(config.paths.sqlite_path),
            mood_analyzer=build_mood_analyzer(config.analysis, google_api_key=config.google_api_key),
            video_analyzer=VideoEmotionAnalyzer(config.video, api_key=config.hume_api_key),
            retry=config.retry,
        )

    def create_text_entry(self, owner_id: str, content: str) -> TextEntry:
        if not content or not content.strip():
            raise EmptyContentError()
        now = self.clock()
        entry = TextEntry(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            content=content,
        )
        logger.info("Created text entry %s", entry.id)
        return self.repository.create(entry)

    def create_video_entry(
        self,
        owner_id: str,
        media_url: str,
        thumbnail_url: str = "",
        duration_seconds: float = 0.0,
    ) -> VideoEntry:
        now = self.clock()
        entry = VideoEntry(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            media_url=media_url,
            thumbnail_url=thumbnail_url,
            duration_seconds=duration_seconds,
        )
        logger.info("Created video entry %s", entry.id)
        return self.repository.create(entry)

    def _store_if_present(self, owner_id: str, entry_id: str, **fields: Any) -> Optional[JournalEntry]:
        # The owner may delete the entry while analysis is in flight.
        try:
            return self.repository.update(owner_id, entry_id, updated_at=self.clock(), **fields)
        except EntryNotFoundError:
            logger.info("Entry %s was deleted during analysis; discarding result", entry_id)
            return None

    async def analyze_text_entry(self, owner_id: str, entry_id: str) -> Optional[TextEntry]:
        """Run mood analysis and store the outcome.

        Returns the updated entry, or None if the entry disappeared before
        the result could be stored. AnalysisError is re-raised after the
        entry has been marked as failed.
        """
        entry = self.repository.get(owner_id, entry_id)
        if not isinstance(entry, TextEntry):
            raise TypeError(f"Entry {entry_id} is not a text entry")

        self.repository.update(
            owner_id,
            entry_id,
            analysis_status=AnalysisStatus.LOADING,
            mood_metadata=None,
            updated_at=self.clock(),
        )
        logger.info("Analyzing text entry %s", entry_id)

        try:
            vector = await with_retry(lambda: self.mood_analyzer.analyze(entry.content), self.retry)
        except AnalysisError as exc:
            logger.error("Analysis failed for entry %s (%s): %s", entry_id, exc.kind.value, exc.message)
            self._store_if_present(owner_id, entry_id, analysis_status=AnalysisStatus.ERROR)
            raise
        except Exception:
            logger.exception("Unexpected failure analyzing entry %s", entry_id)
            self._store_if_present(owner_id, entry_id, analysis_status=AnalysisStatus.ERROR)
            raise

        return self._store_if_present(
            owner_id,
            entry_id,
            analysis_status=AnalysisStatus.SUCCESS,
            mood_metadata=vector,
        )

    async def analyze_video_entry(
        self,
        owner_id: str,
        entry_id: str,
        sentiment: Optional[Sentiment] = None,
    ) -> Optional[VideoEntry]:
        """Fetch the multimodal report for a video entry and store it.

        An EmotionVector is only stored when ``sentiment`` is given, since
        the report carries no sentiment signal of its own.
        """
        if self.video_analyzer is None:
            raise TypeError("No video analyzer configured")
        entry = self.repository.get(owner_id, entry_id)
        if not isinstance(entry, VideoEntry):
            raise TypeError(f"Entry {entry_id} is not a video entry")

        self.repository.update(
            owner_id,
            entry_id,
            analysis_status=AnalysisStatus.LOADING,
            mood_metadata=None,
            updated_at=self.clock(),
        )
        logger.info("Analyzing video entry %s", entry_id)

        job_id = entry.job_id
        try:
            if job_id is None:
                job_id = await with_retry(
                    lambda: asyncio.to_thread(self.video_analyzer.submit_job, entry.media_url),
                    self.retry,
                )
                if self._store_if_present(owner_id, entry_id, job_id=job_id) is None:
                    return None
            report = await with_retry(
                lambda: asyncio.to_thread(self.video_analyzer.wait_for_report, job_id),
                self.retry,
            )
        except AnalysisError as exc:
            logger.error("Video analysis failed for entry %s (%s): %s", entry_id, exc.kind.value, exc.message)
            self._store_if_present(owner_id, entry_id, analysis_status=AnalysisStatus.ERROR)
            raise
        except Exception:
            logger.exception("Unexpected failure analyzing video entry %s", entry_id)
            self._store_if_present(owner_id, entry_id, analysis_status=AnalysisStatus.ERROR)
            raise

        mood = extract(report).with_sentiment(sentiment) if sentiment is not None else None
        return self._store_if_present(
            owner_id,
            entry_id,
            analysis_status=AnalysisStatus.SUCCESS,
            emotion_report=report,
            mood_metadata=mood,
        )

    async def analyze_pending(self, owner_id: str) -> List[Optional[JournalEntry]]:
        """Analyze every pending text entry concurrently.

        Failures are stored per entry and do not stop the others.
        """
        pending = [
            e for e in self.repository.list(owner_id)
            if isinstance(e, TextEntry) and e.analysis_status == AnalysisStatus.PENDING
        ]
        results = await asyncio.gather(
            *(self.analyze_text_entry(owner_id, e.id) for e in pending),
            return_exceptions=True,
        )
        out: List[Optional[JournalEntry]] = []
        for entry, result in zip(pending, results):
            if isinstance(result, AnalysisError):
                out.append(self._get_or_none(owner_id, entry.id))
            elif isinstance(result, BaseException):
                raise result
            else:
                out.append(result)
        return out

    def _get_or_none(self, owner_id: str, entry_id: str) -> Optional[JournalEntry]:
        try:
            return self.repository.get(owner_id, entry_id)
        except EntryNotFoundError:
            return None

    def list_entries(self, owner_id: str, spec: FilterSpec = DEFAULT_FILTER_SPEC) -> List[JournalEntry]:
        return apply_filter_pipeline(self.repository.list(owner_id), spec)

    def grouped_entries(
        self,
        owner_id: str,
        spec: FilterSpec = DEFAULT_FILTER_SPEC,
        now: Optional[datetime] = None,
    ) -> Dict[DateGroup, List[JournalEntry]]:
        return group_by_date(self.list_entries(owner_id, spec), now=now or self.clock())

    def delete_entry(self, owner_id: str, entry_id: str) -> None:
        self.repository.delete(owner_id, entry_id)
        logger.info("Deleted entry %s", entry_id)
