"""CLI entrypoint for adding a journal entry and analyzing it."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mood_journal.config import AppConfig  # noqa: E402
from mood_journal.errors import AnalysisError  # noqa: E402
from mood_journal.extraction import extract  # noqa: E402
from mood_journal.journal import MoodJournal  # noqa: E402
from mood_journal.schemas import VideoEntry  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add a journal entry and analyze its mood.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument("--owner", default="local-user", help="Owner id for the entry.")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--text", help="Text entry content.")
    group.add_argument("--video-url", help="Publicly reachable URL of a recorded video entry.")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    config = AppConfig.from_yaml(args.config)
    journal = MoodJournal.from_config(config)

    if args.text is not None:
        entry = journal.create_text_entry(args.owner, args.text)
        analyze = journal.analyze_text_entry(args.owner, entry.id)
    else:
        entry = journal.create_video_entry(args.owner, args.video_url)
        analyze = journal.analyze_video_entry(args.owner, entry.id)

    try:
        result = await analyze
    except AnalysisError as exc:
        print(f"Analysis failed ({exc.kind.value}, retryable={exc.retryable}): {exc.message}")
        return 1

    print(f"Entry {entry.id}: {result.analysis_status.value if result else 'discarded'}")
    if result is not None and result.mood_metadata is not None:
        for key, value in result.mood_metadata.to_dict().items():
            print(f"{key}: {value}")
    elif isinstance(result, VideoEntry) and result.emotion_report is not None:
        for key, value in vars(extract(result.emotion_report)).items():
            print(f"{key}: {value:.3f}")
    return 0


def main() -> None:
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
