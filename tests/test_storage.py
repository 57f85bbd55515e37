# tests for storage.py
# owner scoping, variant round-trips through sqlite, and update semantics

import pytest

from mood_journal.errors import EntryNotFoundError
from mood_journal.schemas import AnalysisStatus, EmotionVector, Sentiment, TextEntry, VideoEntry
from mood_journal.storage import SQLiteEntryRepository
from tests.conftest import OTHER_OWNER_ID, OWNER_ID, make_report, make_text, make_video


class TestCreateAndGet:

    def test_text_roundtrip(self, repo):
        entry = make_text("happy day", happiness=0.8, fear=0.2)
        repo.create(entry)
        loaded = repo.get(OWNER_ID, entry.id)
        assert isinstance(loaded, TextEntry)
        assert loaded == entry

    def test_video_roundtrip(self, repo):
        entry = make_video(report=make_report(face=[("joy", 0.7)], prosody=[("rage", 0.1)]))
        repo.create(entry)
        loaded = repo.get(OWNER_ID, entry.id)
        assert isinstance(loaded, VideoEntry)
        assert loaded.emotion_report == entry.emotion_report
        assert loaded.duration_seconds == 42.0
        assert loaded.created_at == entry.created_at

    def test_empty_report_survives(self, repo):
        entry = make_video(report=make_report())
        repo.create(entry)
        assert repo.get(OWNER_ID, entry.id).emotion_report is not None

    def test_missing_entry(self, repo):
        with pytest.raises(EntryNotFoundError):
            repo.get(OWNER_ID, "nope")


class TestOwnerScoping:

    def test_list_only_returns_own_entries_newest_first(self, repo):
        old = repo.create(make_text("old", "2024-01-01"))
        new = repo.create(make_text("new", "2024-01-05"))
        repo.create(make_text("theirs", owner_id=OTHER_OWNER_ID))
        assert [e.id for e in repo.list(OWNER_ID)] == [new.id, old.id]

    def test_cannot_read_other_owner(self, repo):
        theirs = repo.create(make_text("theirs", owner_id=OTHER_OWNER_ID))
        with pytest.raises(EntryNotFoundError):
            repo.get(OWNER_ID, theirs.id)
        assert not repo.exists(OWNER_ID, theirs.id)

    def test_cannot_update_or_delete_other_owner(self, repo):
        theirs = repo.create(make_text("theirs", owner_id=OTHER_OWNER_ID))
        with pytest.raises(EntryNotFoundError):
            repo.update(OWNER_ID, theirs.id, content="hijacked")
        with pytest.raises(EntryNotFoundError):
            repo.delete(OWNER_ID, theirs.id)
        assert repo.get(OTHER_OWNER_ID, theirs.id).content == "theirs"


class TestUpdateDelete:

    def test_update_replaces_metadata_wholesale(self, repo):
        entry = repo.create(make_text("x", happiness=0.9, fear=0.9))
        vector = EmotionVector(0.1, 0.2, 0.3, 0.4, Sentiment.NEGATIVE)
        updated = repo.update(OWNER_ID, entry.id, mood_metadata=vector, analysis_status=AnalysisStatus.SUCCESS)
        assert updated.mood_metadata == vector
        assert repo.get(OWNER_ID, entry.id).mood_metadata == vector

    def test_identity_fields_are_immutable(self, repo):
        entry = repo.create(make_text("x"))
        with pytest.raises(ValueError):
            repo.update(OWNER_ID, entry.id, owner_id=OTHER_OWNER_ID)

    def test_delete(self, repo):
        entry = repo.create(make_text("x"))
        repo.delete(OWNER_ID, entry.id)
        assert repo.list(OWNER_ID) == []
        with pytest.raises(EntryNotFoundError):
            repo.delete(OWNER_ID, entry.id)


def test_file_backed_repository(tmp_path):
    db_path = tmp_path / "nested" / "journal.db"
    repo = SQLiteEntryRepository(str(db_path))
    entry = repo.create(make_text("persisted"))
    repo.close()

    reopened = SQLiteEntryRepository(str(db_path))
    assert reopened.get(OWNER_ID, entry.id).content == "persisted"
    reopened.close()
