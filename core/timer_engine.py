# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Optional

from domain.models import BREAK, FOCUS

FOCUS_MIN_RANGE = (1, 60)
BREAK_MIN_RANGE = (1, 30)


def clamp_minutes(value, lo: int, hi: int) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        v = lo
    return min(hi, max(lo, v))


def format_time(seconds: int) -> str:
    m = max(0, seconds) // 60
    s = max(0, seconds) % 60
    return f"{m:02d}:{s:02d}"


@dataclass
class EngineSnapshot:
    phase: str  # "focus" | "break"
    remaining_sec: int
    is_running: bool
    focus_minutes: int
    break_minutes: int
    task_label: str

    @property
    def phase_length_sec(self) -> int:
        minutes = self.focus_minutes if self.phase == FOCUS else self.break_minutes
        return minutes * 60

    @property
    def progress_percent(self) -> float:
        total = self.phase_length_sec
        if total <= 0:
            return 0.0
        return self.remaining_sec / total * 100


@dataclass(frozen=True)
class CompletedInterval:
    kind: str
    duration: int  # minutes
    task: str


class TimerEngine:
    """
    Pure focus/break countdown (no UI, no storage).
    The owner calls tick() once per elapsed second while running.
    """

    def __init__(self, focus_minutes: int = 25, break_minutes: int = 5):
        self.focus_minutes = clamp_minutes(focus_minutes, *FOCUS_MIN_RANGE)
        self.break_minutes = clamp_minutes(break_minutes, *BREAK_MIN_RANGE)

        self.phase = FOCUS
        self.remaining_sec = self.focus_minutes * 60
        self.is_running = False
        self.task_label = ""

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            phase=self.phase,
            remaining_sec=self.remaining_sec,
            is_running=self.is_running,
            focus_minutes=self.focus_minutes,
            break_minutes=self.break_minutes,
            task_label=self.task_label,
        )

    def _phase_length_sec(self) -> int:
        if self.phase == FOCUS:
            return self.focus_minutes * 60
        return self.break_minutes * 60

    def start(self) -> bool:
        """Returns False when already running."""
        if self.is_running:
            return False
        self.is_running = True
        return True

    def pause(self) -> None:
        self.is_running = False

    def stop(self) -> None:
        # phase and label survive a stop
        self.is_running = False
        self.remaining_sec = self._phase_length_sec()

    def set_task_label(self, label: str) -> None:
        self.task_label = label or ""

    def set_focus_minutes(self, minutes) -> int:
        self.focus_minutes = clamp_minutes(minutes, *FOCUS_MIN_RANGE)
        if self.phase == FOCUS:
            self.remaining_sec = self.focus_minutes * 60
        return self.focus_minutes

    def set_break_minutes(self, minutes) -> int:
        self.break_minutes = clamp_minutes(minutes, *BREAK_MIN_RANGE)
        if self.phase == BREAK:
            self.remaining_sec = self.break_minutes * 60
        return self.break_minutes

    def tick(self) -> Optional[CompletedInterval]:
        """
        Advance one second.
        Returns the finished interval when this tick hit zero, else None.
        """
        if not self.is_running:
            return None

        if self.remaining_sec > 0:
            self.remaining_sec -= 1

        if self.remaining_sec > 0:
            return None
        return self._complete()

    def _complete(self) -> CompletedInterval:
        done = CompletedInterval(
            kind=self.phase,
            duration=self.focus_minutes if self.phase == FOCUS else self.break_minutes,
            task=self.task_label,
        )

        if self.phase == FOCUS:
            # break follows automatically
            self.phase = BREAK
            self.remaining_sec = self.break_minutes * 60
        else:
            # cycle closed, next focus needs an explicit start
            self.phase = FOCUS
            self.remaining_sec = self.focus_minutes * 60
            self.is_running = False
            self.task_label = ""

        return done
