# -*- coding: utf-8 -*-

import datetime as dt
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core import aggregator
from core.logger import get_logger
from core.session_pairer import ANCHOR_BREAK_START, PAIRING_WINDOW_SEC, pair
from domain.models import Session, Stats, TaskRecord
from services.session_context import SessionContext
from storage.feed import ChangeFeed, Subscription

logger = get_logger("services.stats")


def _now_ts() -> int:
    return int(time.time())


@dataclass
class StatsView:
    """Everything the UI shows, rebuilt from scratch on every delivery."""

    sessions: List[Session] = field(default_factory=list)
    today_sessions: List[Session] = field(default_factory=list)
    overall: Stats = field(default_factory=Stats)
    today: Stats = field(default_factory=Stats)
    this_week: Stats = field(default_factory=Stats)
    weekly_average_focus: int = 0
    focus_by_task: Dict[str, int] = field(default_factory=dict)
    task_names: List[str] = field(default_factory=list)
    recent_task_names: List[str] = field(default_factory=list)


class StatsService:
    """
    Keeps the signed-in user's record set current through the live feed
    and derives sessions and statistics from it.
    """

    def __init__(
        self,
        record_feed: ChangeFeed,
        session: SessionContext,
        clock: Callable[[], int] = _now_ts,
        pairing_window_sec: int = PAIRING_WINDOW_SEC,
        pairing_anchor: str = ANCHOR_BREAK_START,
        recent_limit: int = 10,
    ):
        self.record_feed = record_feed
        self.session = session
        self.clock = clock
        self.pairing_window_sec = pairing_window_sec
        self.pairing_anchor = pairing_anchor
        self.recent_limit = recent_limit

        self.records: List[TaskRecord] = []
        self.selected_task: Optional[str] = None
        self.selected_date: Optional[dt.date] = None
        self.view = StatsView()

        self._sub: Optional[Subscription] = None
        self._listeners: List[Callable[[StatsView], None]] = []
        self._detach_session = session.add_listener(self._on_login, self._on_logout)

    # ----- lifecycle -----
    def _on_login(self, user_id: str) -> None:
        self._unsubscribe()
        self._sub = self.record_feed.subscribe(user_id, self._on_records)

    def _on_logout(self) -> None:
        self._unsubscribe()
        self._on_records([])

    def _unsubscribe(self) -> None:
        if self._sub is not None:
            self._sub.unsubscribe()
            self._sub = None

    def close(self) -> None:
        self._unsubscribe()
        self._detach_session()

    @property
    def subscribed(self) -> bool:
        return self._sub is not None and self._sub.active

    # ----- listeners -----
    def add_listener(self, fn: Callable[[StatsView], None]) -> None:
        self._listeners.append(fn)

    def set_selected_task(self, task: Optional[str]) -> None:
        """None means all tasks."""
        self.selected_task = task
        self.recompute()

    def set_selected_date(self, day: Optional[dt.date]) -> None:
        """Restrict history to one local date; None shows every date."""
        self.selected_date = day
        for fn in list(self._listeners):
            fn(self.view)

    # ----- derivation -----
    def _on_records(self, records: List[TaskRecord]) -> None:
        self.records = list(records)
        self.recompute()

    def recompute(self) -> StatsView:
        now = int(self.clock())
        records = self.records
        task = self.selected_task

        sessions = pair(records, self.pairing_window_sec, self.pairing_anchor)
        self.view = StatsView(
            sessions=sessions,
            today_sessions=aggregator.today_sessions(sessions, now),
            overall=aggregator.compute_stats(records, now, task=task),
            today=aggregator.compute_stats(
                records, now, window=aggregator.WINDOW_TODAY, task=task
            ),
            this_week=aggregator.compute_stats(
                records, now, window=aggregator.WINDOW_WEEK, task=task
            ),
            weekly_average_focus=aggregator.weekly_average_focus_minutes(records, now),
            focus_by_task=aggregator.focus_minutes_by_task(records),
            task_names=aggregator.unique_task_names(records),
            recent_task_names=aggregator.unique_task_names(records[: self.recent_limit]),
        )
        logger.debug("Recomputed views from %d records", len(records))
        for fn in list(self._listeners):
            fn(self.view)
        return self.view

    # ----- history -----
    def history_page(self, page: int = 1, page_size: int = 10):
        """
        Sessions grouped by date, newest first, one page of sessions. With a
        selected date only that date's sessions are paged.
        """
        sessions = self.view.sessions
        if self.selected_date is not None:
            sessions = aggregator.sessions_on(sessions, self.selected_date)
        items, pages = aggregator.paginate(sessions, page, page_size)
        return aggregator.group_by_date(items), pages

    def calendar_days(self, year: int, month: int) -> List[dt.date]:
        """Local dates in the month that have at least one record."""
        return aggregator.record_dates_in_month(self.records, year, month)
