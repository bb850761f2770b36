# services/goal_service.py
# -*- coding: utf-8 -*-

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from core import goal_tracker
from core.logger import get_logger
from domain.errors import PersistenceError, ValidationError
from domain.models import GoalProgress, NamedGoal, StandingGoals
from services.session_context import SessionContext
from services.stats_service import StatsService
from storage.feed import ChangeFeed, Subscription
from storage.repos import GoalRepo

logger = get_logger("services.goals")


def _positive_minutes(value, what: str) -> int:
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} must be a whole number of minutes.")
    if minutes <= 0:
        raise ValidationError(f"{what} must be greater than zero.")
    return minutes


class GoalService:
    def __init__(
        self,
        goal_repo: GoalRepo,
        goal_feed: ChangeFeed,
        stats_service: StatsService,
        session: SessionContext,
        default_daily_minutes: int = 120,
        default_weekly_minutes: int = 600,
    ):
        self.goals = goal_repo
        self.goal_feed = goal_feed
        self.stats = stats_service
        self.session = session
        self.default_daily_minutes = default_daily_minutes
        self.default_weekly_minutes = default_weekly_minutes

        self.named_goals: List[NamedGoal] = []
        self.standing: Optional[StandingGoals] = None

        self._sub: Optional[Subscription] = None
        self._listeners: List[Callable[[], None]] = []
        self._detach_session = session.add_listener(self._on_login, self._on_logout)
        # records changing also moves progress
        stats_service.add_listener(lambda _view: self._emit())

    # ----- lifecycle -----
    def _on_login(self, user_id: str) -> None:
        self._unsubscribe()
        self.standing = self.load_standing_goals()
        self._sub = self.goal_feed.subscribe(user_id, self._on_goals)

    def _on_logout(self) -> None:
        self._unsubscribe()
        self.named_goals = []
        self.standing = None
        self._emit()

    def _unsubscribe(self) -> None:
        if self._sub is not None:
            self._sub.unsubscribe()
            self._sub = None

    def close(self) -> None:
        self._unsubscribe()
        self._detach_session()

    def add_listener(self, fn: Callable[[], None]) -> None:
        self._listeners.append(fn)

    def _emit(self) -> None:
        for fn in list(self._listeners):
            fn()

    def _on_goals(self, goals: List[NamedGoal]) -> None:
        self.named_goals = list(goals)
        self._emit()

    def _require_user(self) -> str:
        user_id = self.session.current_user()
        if user_id is None:
            raise ValidationError("Sign in to manage goals.")
        return user_id

    # ----- named goals -----
    def create_goal(self, title: str, target_minutes) -> Optional[NamedGoal]:
        """
        Validation problems raise ValidationError. A store failure is
        logged and returns None.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Goal task name cannot be empty.")
        target = _positive_minutes(target_minutes, "Target")
        user_id = self._require_user()
        try:
            goal = self.goals.create(user_id, title, target)
        except PersistenceError as e:
            logger.error("Creating goal %r failed: %s", title, e.message)
            return None
        logger.info("Created goal %s (%r, %s min)", goal.id, title, target)
        return goal

    def delete_goal(self, goal_id: str) -> bool:
        """Deleting an unknown id is a no-op."""
        user_id = self.session.current_user()
        if user_id is None or not goal_id:
            return False
        try:
            removed = self.goals.delete(user_id, goal_id)
        except PersistenceError as e:
            logger.error("Deleting goal %s failed: %s", goal_id, e.message)
            return False
        if removed:
            logger.info("Deleted goal %s", goal_id)
        return removed

    def named_progress(self) -> List[Tuple[NamedGoal, GoalProgress]]:
        return goal_tracker.named_goals_progress(
            self.named_goals, self.stats.records, int(self.stats.clock())
        )

    # ----- standing goals -----
    def load_standing_goals(self) -> StandingGoals:
        user_id = self.session.current_user() or ""
        stored = None
        if user_id:
            try:
                stored = self.goals.get_standing(user_id)
            except PersistenceError as e:
                logger.error("Loading standing goals failed: %s", e.message)
        if stored is not None:
            return stored
        return StandingGoals(
            user_id=user_id,
            daily_minutes=self.default_daily_minutes,
            weekly_minutes=self.default_weekly_minutes,
        )

    def save_standing_goals(self, daily_minutes, weekly_minutes) -> StandingGoals:
        daily = _positive_minutes(daily_minutes, "Daily goal")
        weekly = _positive_minutes(weekly_minutes, "Weekly goal")
        user_id = self._require_user()
        try:
            self.standing = self.goals.upsert_standing(user_id, daily, weekly)
        except PersistenceError as e:
            logger.error("Saving standing goals failed: %s", e.message)
            return self.standing or self.load_standing_goals()
        logger.info("Standing goals for %s: %s/day, %s/week", user_id, daily, weekly)
        self._emit()
        return self.standing

    def standing_progress(self) -> Dict[str, GoalProgress]:
        standing = self.standing or self.load_standing_goals()
        return goal_tracker.standing_progress(
            standing, self.stats.records, int(self.stats.clock())
        )
