"""End-to-end demo: create entries -> analyze mood -> filter -> group by date."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mood_journal.config import AppConfig  # noqa: E402
from mood_journal.filtering import EmotionRange, FilterSpec  # noqa: E402
from mood_journal.grouping import GROUP_LABELS  # noqa: E402
from mood_journal.journal import MoodJournal  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

DEMO_OWNER = "demo-user"
DEMO_ENTRIES = [
    "Finally finished the garden bed with my sister. Happy, tired, sunburnt.",
    "Couldn't sleep again. Kept replaying the meeting and what I should have said.",
    "The landlord ignored the leak for the third week. I am so done with this.",
]


async def main() -> None:
    config = AppConfig.from_yaml(str(PROJECT_ROOT / "config.yaml"))
    journal = MoodJournal.from_config(config)

    if not journal.repository.list(DEMO_OWNER):
        for text in DEMO_ENTRIES:
            journal.create_text_entry(DEMO_OWNER, text)

    results = await journal.analyze_pending(DEMO_OWNER)
    logger.info("Analyzed %d pending entries", len(results))

    print("== All entries ==")
    for entry in journal.list_entries(DEMO_OWNER):
        mood = entry.mood_metadata.to_dict() if entry.mood_metadata else entry.analysis_status.value
        print(f"- {entry.created_at:%Y-%m-%d %H:%M} {mood}")

    spec = FilterSpec().with_range("happiness", EmotionRange(0.5, 1.0))
    print("\n== Happier entries, grouped ==")
    for group, entries in journal.grouped_entries(DEMO_OWNER, spec).items():
        if not entries:
            continue
        print(GROUP_LABELS[group])
        for entry in entries:
            preview = " ".join(getattr(entry, "content", "").split()[:12])
            print(f"  {preview}...")


if __name__ == "__main__":
    asyncio.run(main())
