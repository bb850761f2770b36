# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Optional

FOCUS = "focus"
BREAK = "break"
KINDS = (FOCUS, BREAK)

UNNAMED_LABEL = "unnamed"


@dataclass(frozen=True)
class TaskRecord:
    id: str
    user_id: str
    task: str
    duration: int  # minutes
    kind: str  # focus | break
    completed: bool
    timestamp: int  # epoch seconds, taken when the interval finished

    @property
    def display_task(self) -> str:
        return self.task.strip() or UNNAMED_LABEL


@dataclass(frozen=True)
class RecordFilter:
    kind: Optional[str] = None
    task: Optional[str] = None
    since: Optional[int] = None


@dataclass(frozen=True)
class Session:
    focus: TaskRecord
    paired_break: Optional[TaskRecord] = None

    @property
    def task(self) -> str:
        return self.focus.task

    @property
    def timestamp(self) -> int:
        return self.focus.timestamp

    @property
    def completed(self) -> bool:
        return self.focus.completed

    @property
    def focus_duration(self) -> int:
        return self.focus.duration

    @property
    def break_duration(self) -> int:
        return self.paired_break.duration if self.paired_break else 0

    @property
    def total_duration(self) -> int:
        return self.focus_duration + self.break_duration


@dataclass(frozen=True)
class Stats:
    total_focus_minutes: int = 0
    total_break_minutes: int = 0
    total_task_count: int = 0
    completed_count: int = 0
    average_minutes_per_day: int = 0


@dataclass(frozen=True)
class NamedGoal:
    id: str
    user_id: str
    title: str
    target_minutes: int
    created_at: int


@dataclass(frozen=True)
class StandingGoals:
    user_id: str
    daily_minutes: int
    weekly_minutes: int
    updated_at: Optional[int] = None


@dataclass(frozen=True)
class GoalProgress:
    done_minutes: int
    target_minutes: int
    percent: float
    completed: bool
