# -*- coding: utf-8 -*-
"""
Statistics over a user's task records.

Everything here recomputes from the full record list; callers re-run it on
each feed delivery instead of keeping running tallies.
"""
from __future__ import annotations

import datetime as dt
import math
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from domain.models import BREAK, FOCUS, Session, Stats, TaskRecord

DAY_SEC = 24 * 60 * 60
WEEK_SEC = 7 * DAY_SEC

WINDOW_TODAY = "today"
WINDOW_WEEK = "this_week"

T = TypeVar("T")


def _local_date(ts: int) -> dt.date:
    return dt.datetime.fromtimestamp(ts).date()


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---- windows ----
def is_today(ts: int, now: int) -> bool:
    return _local_date(ts) == _local_date(now)


def in_this_week(ts: int, now: int) -> bool:
    return ts >= now - WEEK_SEC


def window_predicate(window: Optional[str], now: int) -> Callable[[TaskRecord], bool]:
    if window is None:
        return lambda r: True
    if window == WINDOW_TODAY:
        return lambda r: is_today(r.timestamp, now)
    if window == WINDOW_WEEK:
        return lambda r: in_this_week(r.timestamp, now)
    raise ValueError(f"Unknown window: {window!r}")


def filter_records(
    records: Iterable[TaskRecord],
    now: int,
    window: Optional[str] = None,
    task: Optional[str] = None,
    kind: Optional[str] = None,
) -> List[TaskRecord]:
    keep = window_predicate(window, now)
    out = []
    for r in records:
        if task is not None and r.task != task:
            continue
        if kind is not None and r.kind != kind:
            continue
        if keep(r):
            out.append(r)
    return out


# ---- core stats ----
def compute_stats(
    records: Iterable[TaskRecord],
    now: int,
    window: Optional[str] = None,
    task: Optional[str] = None,
) -> Stats:
    items = filter_records(records, now, window=window, task=task)
    if not items:
        return Stats()

    focus_total = 0
    break_total = 0
    labels = set()
    completed = 0
    for r in items:
        if r.kind == FOCUS:
            focus_total += r.duration
            labels.add(r.task)
            if r.completed:
                completed += 1
        elif r.kind == BREAK:
            break_total += r.duration

    oldest = min(r.timestamp for r in items)
    days = max(1, math.ceil((now - oldest) / DAY_SEC))

    return Stats(
        total_focus_minutes=focus_total,
        total_break_minutes=break_total,
        total_task_count=len(labels),
        completed_count=completed,
        average_minutes_per_day=_round_half_up((focus_total + break_total) / days),
    )


def focus_minutes(
    records: Iterable[TaskRecord],
    now: int,
    window: Optional[str] = None,
    task: Optional[str] = None,
) -> int:
    return sum(
        r.duration for r in filter_records(records, now, window, task, kind=FOCUS)
    )


def focus_minutes_by_task(records: Iterable[TaskRecord]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for r in records:
        if r.kind == FOCUS:
            out[r.task] = out.get(r.task, 0) + r.duration
    return out


def weekly_average_focus_minutes(records: Iterable[TaskRecord], now: int) -> int:
    return _round_half_up(focus_minutes(records, now, WINDOW_WEEK) / 7)


def unique_task_names(
    records: Iterable[TaskRecord], kind: Optional[str] = None
) -> List[str]:
    """Non-blank labels, most recent first, each once."""
    seen = set()
    out = []
    for r in sorted(records, key=lambda x: x.timestamp, reverse=True):
        if kind is not None and r.kind != kind:
            continue
        if not r.task.strip() or r.task in seen:
            continue
        seen.add(r.task)
        out.append(r.task)
    return out


# ---- history views ----
def today_sessions(sessions: Iterable[Session], now: int) -> List[Session]:
    return [s for s in sessions if is_today(s.timestamp, now)]


def sessions_on(sessions: Iterable[Session], day: dt.date) -> List[Session]:
    return [s for s in sessions if _local_date(s.timestamp) == day]


def group_by_date(sessions: Iterable[Session]) -> List[Tuple[dt.date, List[Session]]]:
    """Sessions bucketed by local date, newest date first."""
    buckets: Dict[dt.date, List[Session]] = {}
    for s in sessions:
        buckets.setdefault(_local_date(s.timestamp), []).append(s)
    out = []
    for day in sorted(buckets, reverse=True):
        items = sorted(buckets[day], key=lambda s: s.timestamp, reverse=True)
        out.append((day, items))
    return out


def paginate(items: Sequence[T], page: int, page_size: int = 10) -> Tuple[List[T], int]:
    """
    Returns (items on page, page count). Pages start at 1; out-of-range
    pages are clamped. An empty input has one empty page.
    """
    page_size = max(1, int(page_size))
    pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(1, int(page)), pages)
    start = (page - 1) * page_size
    return list(items[start : start + page_size]), pages


def record_dates_in_month(
    records: Iterable[TaskRecord], year: int, month: int
) -> List[dt.date]:
    days = set()
    for r in records:
        d = _local_date(r.timestamp)
        if d.year == year and d.month == month:
            days.add(d)
    return sorted(days)
