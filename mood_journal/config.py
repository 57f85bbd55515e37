"""Configuration loading for the mood journal core."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def _resolve_path(raw_path: str, base_dir: Path) -> str:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


@dataclass
class PathsConfig:
    """Filesystem locations used by the local entry store."""

    sqlite_path: str = "data/journal.db"


@dataclass
class AnalysisConfig:
    """Text mood analysis settings."""

    provider: str = "google"
    model: str = "gemini-2.5-flash"
    temperature: float = 0.3
    timeout_seconds: float = 30.0


@dataclass
class VideoConfig:
    """Batch video emotion service settings."""

    base_url: str = "https://api.hume.ai/v0"
    request_timeout_seconds: float = 30.0
    poll_interval_seconds: float = 2.0
    max_poll_attempts: int = 60


@dataclass
class RetryConfig:
    """Caller-side retry policy for analysis calls."""

    max_attempts: int = 2
    delay_seconds: float = 1.0
    backoff_multiplier: float = 2.0


@dataclass
class AppConfig:
    """Top-level app configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    google_api_key: Optional[str] = None
    hume_api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "AppConfig":
        """Build config from a dictionary."""
        base = Path.cwd() if base_dir is None else base_dir

        paths_data = data.get("paths", {})
        paths = PathsConfig(
            sqlite_path=_resolve_path(paths_data.get("sqlite_path", "data/journal.db"), base),
        )

        return cls(
            paths=paths,
            analysis=AnalysisConfig(**data.get("analysis", {})),
            video=VideoConfig(**data.get("video", {})),
            retry=RetryConfig(**data.get("retry", {})),
            google_api_key=data.get("google_api_key") or os.getenv("GEMINI_API_KEY"),
            hume_api_key=data.get("hume_api_key") or os.getenv("HUME_API_KEY"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "AppConfig":
        """Load config from YAML."""
        config_path = Path(path).resolve()
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data, base_dir=config_path.parent)
