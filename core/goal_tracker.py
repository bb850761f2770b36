# -*- coding: utf-8 -*-

from typing import Dict, Iterable, List, Tuple

from core.aggregator import WINDOW_TODAY, WINDOW_WEEK, focus_minutes
from domain.models import GoalProgress, NamedGoal, StandingGoals, TaskRecord


def progress(done_minutes: int, target_minutes: int) -> GoalProgress:
    done = max(0, int(done_minutes))
    target = int(target_minutes)
    if target <= 0:
        # stored targets are validated > 0; treat a bad row as unmet
        return GoalProgress(done, target, 0.0, False)
    percent = min(100.0, 100.0 * done / target)
    return GoalProgress(done, target, percent, done >= target)


def named_goal_progress(
    goal: NamedGoal, records: Iterable[TaskRecord], now: int
) -> GoalProgress:
    # all-time, no window
    return progress(focus_minutes(records, now, task=goal.title), goal.target_minutes)


def named_goals_progress(
    goals: Iterable[NamedGoal], records: Iterable[TaskRecord], now: int
) -> List[Tuple[NamedGoal, GoalProgress]]:
    items = list(records)
    return [(g, named_goal_progress(g, items, now)) for g in goals]


def standing_progress(
    standing: StandingGoals, records: Iterable[TaskRecord], now: int
) -> Dict[str, GoalProgress]:
    items = list(records)
    return {
        "daily": progress(
            focus_minutes(items, now, WINDOW_TODAY), standing.daily_minutes
        ),
        "weekly": progress(
            focus_minutes(items, now, WINDOW_WEEK), standing.weekly_minutes
        ),
    }
