# tests for config.py
# yaml loading, path resolution, section defaults and env key fallback

from pathlib import Path

from mood_journal.config import AppConfig

SAMPLE_YAML = """
paths:
  sqlite_path: store/journal.db
analysis:
  model: gemini-test
  temperature: 0.1
retry:
  max_attempts: 4
"""


class TestAppConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("HUME_API_KEY", raising=False)
        cfg = AppConfig.from_dict({}, base_dir=Path("/srv/app"))
        assert cfg.analysis.model == "gemini-2.5-flash"
        assert cfg.retry.max_attempts == 2
        assert cfg.video.max_poll_attempts == 60
        assert cfg.paths.sqlite_path == str(Path("/srv/app/data/journal.db").resolve())
        assert cfg.google_api_key is None

    def test_from_yaml_resolves_relative_to_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML, encoding="utf-8")
        cfg = AppConfig.from_yaml(str(path))
        assert cfg.paths.sqlite_path == str((tmp_path / "store" / "journal.db").resolve())
        assert cfg.analysis.model == "gemini-test"
        assert cfg.analysis.temperature == 0.1
        assert cfg.retry.max_attempts == 4
        assert cfg.retry.delay_seconds == 1.0

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert AppConfig.from_yaml(str(path)).analysis.provider == "google"

    def test_api_keys_fall_back_to_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-env")
        monkeypatch.setenv("HUME_API_KEY", "h-env")
        cfg = AppConfig.from_dict({"google_api_key": "g-file"})
        assert cfg.google_api_key == "g-file"
        assert cfg.hume_api_key == "h-env"
