import datetime as dt

import pytest

from conftest import DAY, MIN, NOW, make_record
from core import aggregator
from core.session_pairer import pair
from domain.models import Stats


def sample_records():
    return [
        make_record("write", 25, "focus", ts=NOW - 2 * 3600),
        make_record("write", 5, "break", ts=NOW - 2 * 3600 + 5 * MIN),
        make_record("read", 25, "focus", ts=NOW - 3600, completed=False),
        make_record("write", 50, "focus", ts=NOW - 3 * DAY),
        make_record("read", 10, "break", ts=NOW - 10 * DAY),
    ]


def test_empty_set_is_all_zero():
    assert aggregator.compute_stats([], NOW) == Stats()
    assert aggregator.compute_stats([], NOW, window="today") == Stats()


def test_filter_that_matches_nothing_is_all_zero():
    assert aggregator.compute_stats(sample_records(), NOW, task="nope") == Stats()


def test_all_time_stats():
    stats = aggregator.compute_stats(sample_records(), NOW)
    assert stats.total_focus_minutes == 100
    assert stats.total_break_minutes == 15
    # distinct labels among focus records
    assert stats.total_task_count == 2
    assert stats.completed_count == 2
    # 115 minutes over ceil(10 days) = 10 days
    assert stats.average_minutes_per_day == 12


def test_today_window():
    stats = aggregator.compute_stats(sample_records(), NOW, window=aggregator.WINDOW_TODAY)
    assert stats.total_focus_minutes == 50
    assert stats.total_break_minutes == 5
    assert stats.total_task_count == 2
    assert stats.completed_count == 1
    # oldest is two hours old: minimum one day
    assert stats.average_minutes_per_day == 55


def test_week_window_and_task_filter():
    week = aggregator.compute_stats(sample_records(), NOW, window=aggregator.WINDOW_WEEK)
    assert week.total_focus_minutes == 100
    assert week.total_break_minutes == 5

    write = aggregator.compute_stats(
        sample_records(), NOW, window=aggregator.WINDOW_WEEK, task="write"
    )
    assert write.total_focus_minutes == 75
    assert write.total_task_count == 1


def test_week_boundary_is_inclusive():
    edge = make_record("x", 10, "focus", ts=NOW - 7 * DAY)
    outside = make_record("x", 10, "focus", ts=NOW - 7 * DAY - 1)
    assert aggregator.focus_minutes([edge, outside], NOW, aggregator.WINDOW_WEEK) == 10


def test_unknown_window():
    with pytest.raises(ValueError):
        aggregator.compute_stats(sample_records(), NOW, window="month")


def test_per_task_totals_and_weekly_average():
    records = sample_records()
    assert aggregator.focus_minutes_by_task(records) == {"write": 75, "read": 25}
    # 100 focus minutes this week / 7
    assert aggregator.weekly_average_focus_minutes(records, NOW) == 14


def test_unique_task_names_skips_blanks_and_keeps_recency():
    records = sample_records() + [make_record("  ", 25, "focus", ts=NOW)]
    assert aggregator.unique_task_names(records) == ["read", "write"]
    assert aggregator.unique_task_names(records, kind="break") == ["write", "read"]


def test_history_grouping_and_pages():
    sessions = pair(sample_records())
    today_only = aggregator.today_sessions(sessions, NOW)
    assert [s.task for s in today_only] == ["read", "write"]

    groups = aggregator.group_by_date(sessions)
    today = dt.datetime.fromtimestamp(NOW).date()
    assert groups[0][0] == today
    assert len(groups[0][1]) == 2
    assert groups[1][0] == today - dt.timedelta(days=3)

    page, pages = aggregator.paginate(sessions, 2, page_size=2)
    assert pages == 2
    assert len(page) == 1
    assert aggregator.paginate([], 5) == ([], 1)


def test_record_dates_in_month():
    d = dt.datetime(2026, 3, 11, 12, 0)
    records = [
        make_record(ts=int(d.timestamp())),
        make_record(ts=int((d - dt.timedelta(days=1)).timestamp())),
        make_record(ts=int((d - dt.timedelta(days=20)).timestamp())),
    ]
    assert aggregator.record_dates_in_month(records, 2026, 3) == [
        dt.date(2026, 3, 10),
        dt.date(2026, 3, 11),
    ]
