# tests for grouping.py
# today / yesterday / this week / earlier boundaries (weeks start monday)

from datetime import datetime, timedelta, timezone

from mood_journal.grouping import GROUP_LABELS, DateGroup, group_by_date
from tests.conftest import make_text

# wednesday
NOW = datetime(2024, 3, 6, 15, 0, tzinfo=timezone.utc)


def at(dt):
    return make_text(created=dt)


class TestGroupByDate:

    def test_groups_in_display_order(self):
        grouped = group_by_date([], now=NOW)
        assert list(grouped) == [DateGroup.TODAY, DateGroup.YESTERDAY, DateGroup.THIS_WEEK, DateGroup.EARLIER]
        assert all(v == [] for v in grouped.values())

    def test_boundaries(self):
        today_midnight = at(datetime(2024, 3, 6, 0, 0, tzinfo=timezone.utc))
        yesterday_late = at(datetime(2024, 3, 5, 23, 59, tzinfo=timezone.utc))
        monday = at(datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc))
        last_sunday = at(datetime(2024, 3, 3, 20, 0, tzinfo=timezone.utc))

        grouped = group_by_date([today_midnight, yesterday_late, monday, last_sunday], now=NOW)
        assert grouped[DateGroup.TODAY] == [today_midnight]
        assert grouped[DateGroup.YESTERDAY] == [yesterday_late]
        assert grouped[DateGroup.THIS_WEEK] == [monday]
        assert grouped[DateGroup.EARLIER] == [last_sunday]

    def test_on_monday_yesterday_is_not_this_week(self):
        monday_now = datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc)
        sunday = at(monday_now - timedelta(days=1))
        grouped = group_by_date([sunday], now=monday_now)
        assert grouped[DateGroup.YESTERDAY] == [sunday]

    def test_uses_reference_timezone(self):
        # 02:00 utc on the 6th is still the 5th in new york-ish utc-5
        tz = timezone(timedelta(hours=-5))
        now_local = datetime(2024, 3, 6, 12, 0, tzinfo=tz)
        entry = at(datetime(2024, 3, 6, 2, 0, tzinfo=timezone.utc))
        assert group_by_date([entry], now=now_local)[DateGroup.YESTERDAY] == [entry]

    def test_preserves_input_order_within_group(self):
        a = at(datetime(2024, 3, 6, 14, 0, tzinfo=timezone.utc))
        b = at(datetime(2024, 3, 6, 9, 0, tzinfo=timezone.utc))
        assert group_by_date([a, b], now=NOW)[DateGroup.TODAY] == [a, b]

    def test_future_entries_count_as_today(self):
        tomorrow = at(NOW + timedelta(days=1))
        assert group_by_date([tomorrow], now=NOW)[DateGroup.TODAY] == [tomorrow]


def test_every_group_has_a_label():
    assert set(GROUP_LABELS) == set(DateGroup)
