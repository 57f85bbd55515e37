"""Bucket an already ordered entry list into display date groups."""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .schemas import JournalEntry


class DateGroup(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    EARLIER = "earlier"


GROUP_LABELS = {
    DateGroup.TODAY: "Today",
    DateGroup.YESTERDAY: "Yesterday",
    DateGroup.THIS_WEEK: "This Week",
    DateGroup.EARLIER: "Earlier",
}


def _start_of_day(ts: datetime) -> datetime:
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def _in_zone(ts: datetime, reference: datetime) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    if reference.tzinfo is None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts.astimezone(reference.tzinfo)


def group_by_date(
    entries: Sequence[JournalEntry],
    now: Optional[datetime] = None,
) -> Dict[DateGroup, List[JournalEntry]]:
    """Split entries into today / yesterday / this week / earlier.

    Weeks start on Monday. Order inside each group follows the input, so
    feed this the output of the filter pipeline.
    """
    now = now or datetime.now(timezone.utc)
    today = _start_of_day(now)
    yesterday = today - timedelta(days=1)
    week_start = today - timedelta(days=today.weekday())

    grouped: Dict[DateGroup, List[JournalEntry]] = OrderedDict((group, []) for group in DateGroup)
    for entry in entries:
        day = _start_of_day(_in_zone(entry.created_at, now))
        if day >= today:
            grouped[DateGroup.TODAY].append(entry)
        elif day >= yesterday:
            grouped[DateGroup.YESTERDAY].append(entry)
        elif day >= week_start:
            grouped[DateGroup.THIS_WEEK].append(entry)
        else:
            grouped[DateGroup.EARLIER].append(entry)
    return grouped
