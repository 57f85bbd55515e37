"""Owner-scoped entry repository contract and its SQLite implementation."""

from __future__ import annotations

import abc
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dateutil import parser as dt_parser

from .errors import EntryNotFoundError
from .schemas import (
    AnalysisStatus,
    EmotionVector,
    EntryType,
    JournalEntry,
    MultimodalEmotionReport,
    TextEntry,
    VideoEntry,
    updated,
)


class EntryRepository(abc.ABC):
    """CRUD over journal entries; every call only sees the owner's rows."""

    @abc.abstractmethod
    def list(self, owner_id: str) -> List[JournalEntry]:
        ...

    @abc.abstractmethod
    def get(self, owner_id: str, entry_id: str) -> JournalEntry:
        ...

    @abc.abstractmethod
    def create(self, entry: JournalEntry) -> JournalEntry:
        ...

    @abc.abstractmethod
    def update(self, owner_id: str, entry_id: str, **fields: Any) -> JournalEntry:
        ...

    @abc.abstractmethod
    def delete(self, owner_id: str, entry_id: str) -> None:
        ...

    def exists(self, owner_id: str, entry_id: str) -> bool:
        try:
            self.get(owner_id, entry_id)
        except EntryNotFoundError:
            return False
        return True


def _to_utc_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _parse_iso(raw: str) -> datetime:
    return dt_parser.isoparse(raw)


def _dump_json(value: Optional[Dict[str, Any]]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def _load_json(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    return json.loads(raw)


def entry_to_row(entry: JournalEntry) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "id": entry.id,
        "owner_id": entry.owner_id,
        "entry_type": entry.entry_type.value,
        "content": None,
        "media_url": None,
        "thumbnail_url": None,
        "duration_seconds": None,
        "analysis_status": entry.analysis_status.value,
        "mood_metadata": _dump_json(entry.mood_metadata.to_dict() if entry.mood_metadata else None),
        "emotion_report": None,
        "job_id": None,
        "created_at": _to_utc_iso(entry.created_at),
        "updated_at": _to_utc_iso(entry.updated_at),
    }
    if isinstance(entry, TextEntry):
        row["content"] = entry.content
    elif isinstance(entry, VideoEntry):
        row["media_url"] = entry.media_url
        row["thumbnail_url"] = entry.thumbnail_url
        row["duration_seconds"] = float(entry.duration_seconds)
        row["emotion_report"] = _dump_json(entry.emotion_report.to_dict() if entry.emotion_report else None)
        row["job_id"] = entry.job_id
    else:
        raise TypeError(f"Unsupported entry type: {type(entry).__name__}")
    return row


def row_to_entry(row: Dict[str, Any]) -> JournalEntry:
    mood = _load_json(row.get("mood_metadata"))
    common = {
        "id": row["id"],
        "owner_id": row["owner_id"],
        "created_at": _parse_iso(row["created_at"]),
        "updated_at": _parse_iso(row["updated_at"]),
        "analysis_status": AnalysisStatus(row["analysis_status"]),
        "mood_metadata": EmotionVector.from_dict(mood) if mood else None,
    }
    entry_type = EntryType(row["entry_type"])
    if entry_type == EntryType.TEXT:
        return TextEntry(content=row.get("content") or "", **common)
    report = _load_json(row.get("emotion_report"))
    return VideoEntry(
        media_url=row.get("media_url") or "",
        thumbnail_url=row.get("thumbnail_url") or "",
        duration_seconds=float(row.get("duration_seconds") or 0.0),
        emotion_report=MultimodalEmotionReport.from_dict(report) if report is not None else None,
        job_id=row.get("job_id"),
        **common,
    )


class SQLiteEntryRepository(EntryRepository):
    """Persists journal entries in a local SQLite file."""

    COLUMNS = (
        "id",
        "owner_id",
        "entry_type",
        "content",
        "media_url",
        "thumbnail_url",
        "duration_seconds",
        "analysis_status",
        "mood_metadata",
        "emotion_report",
        "job_id",
        "created_at",
        "updated_at",
    )

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS entries (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                entry_type TEXT NOT NULL,
                content TEXT,
                media_url TEXT,
                thumbnail_url TEXT,
                duration_seconds REAL,
                analysis_status TEXT NOT NULL,
                mood_metadata TEXT,
                emotion_report TEXT,
                job_id TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_entries_owner ON entries(owner_id)")
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_entries_created ON entries(created_at)")
        self.conn.commit()

    def list(self, owner_id: str) -> List[JournalEntry]:
        rows = self.conn.execute(
            "SELECT * FROM entries WHERE owner_id = ? ORDER BY created_at DESC",
            (owner_id,),
        ).fetchall()
        return [row_to_entry(dict(row)) for row in rows]

    def get(self, owner_id: str, entry_id: str) -> JournalEntry:
        row = self.conn.execute(
            "SELECT * FROM entries WHERE id = ? AND owner_id = ?",
            (entry_id, owner_id),
        ).fetchone()
        if row is None:
            raise EntryNotFoundError(entry_id)
        return row_to_entry(dict(row))

    def create(self, entry: JournalEntry) -> JournalEntry:
        row = entry_to_row(entry)
        placeholders = ",".join("?" for _ in self.COLUMNS)
        self.conn.execute(
            f"INSERT INTO entries ({','.join(self.COLUMNS)}) VALUES ({placeholders})",
            [row[col] for col in self.COLUMNS],
        )
        self.conn.commit()
        return row_to_entry(row)

    def update(self, owner_id: str, entry_id: str, **fields: Any) -> JournalEntry:
        """Replace the given fields wholesale; id and owner cannot change."""
        if "id" in fields or "owner_id" in fields:
            raise ValueError("id and owner_id are immutable")
        current = self.get(owner_id, entry_id)
        row = entry_to_row(updated(current, **fields))
        assignments = ", ".join(f"{col} = ?" for col in self.COLUMNS[2:])
        self.conn.execute(
            f"UPDATE entries SET {assignments} WHERE id = ? AND owner_id = ?",
            [row[col] for col in self.COLUMNS[2:]] + [entry_id, owner_id],
        )
        self.conn.commit()
        return row_to_entry(row)

    def delete(self, owner_id: str, entry_id: str) -> None:
        cur = self.conn.execute(
            "DELETE FROM entries WHERE id = ? AND owner_id = ?",
            (entry_id, owner_id),
        )
        self.conn.commit()
        if cur.rowcount == 0:
            raise EntryNotFoundError(entry_id)

    def close(self) -> None:
        self.conn.close()
