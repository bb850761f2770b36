# -*- coding: utf-8 -*-

import time
from typing import Any, Callable, Optional

from core.logger import get_logger
from core.timer_engine import CompletedInterval, EngineSnapshot, TimerEngine
from domain.errors import PersistenceError
from domain.models import TaskRecord
from services.audio import AudioCue
from services.session_context import SessionContext
from storage.repos import RecordRepo

logger = get_logger("services.timer")

TICK_MS = 1000


def _now_ts() -> int:
    return int(time.time())


class TimerService:
    """
    Orchestrates:
    - TimerEngine state
    - the one-second tick job (Tk-style after/after_cancel scheduler)
    - persisting finished intervals for the signed-in user
    - completion cue and UI callbacks
    """

    def __init__(
        self,
        record_repo: RecordRepo,
        session: SessionContext,
        scheduler: Any = None,
        audio: Optional[AudioCue] = None,
        clock: Callable[[], int] = _now_ts,
        focus_minutes: int = 25,
        break_minutes: int = 5,
    ):
        self.record_repo = record_repo
        self.session = session
        self.audio = audio
        self.clock = clock

        self.engine = TimerEngine(focus_minutes=focus_minutes, break_minutes=break_minutes)

        self._scheduler = scheduler
        self._tick_job = None

        self._on_tick: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_phase_change: Optional[Callable[[EngineSnapshot], None]] = None
        self._on_state_change: Optional[Callable[[EngineSnapshot], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[EngineSnapshot], None]) -> None:
        self._on_state_change = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    # ----- Public API -----
    def set_scheduler(self, scheduler: Any) -> None:
        """Anything with after(ms, fn) -> job and after_cancel(job), e.g. a Tk widget."""
        self._stop_tick_loop()
        self._scheduler = scheduler
        if self.engine.is_running:
            self._ensure_tick_loop()

    def get_snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    @property
    def has_pending_tick(self) -> bool:
        return self._tick_job is not None

    def set_task_label(self, label: str) -> None:
        self.engine.set_task_label(label)
        self._emit_state_change()

    def set_focus_minutes(self, minutes) -> int:
        value = self.engine.set_focus_minutes(minutes)
        self._emit_state_change()
        self._emit_tick()
        return value

    def set_break_minutes(self, minutes) -> int:
        value = self.engine.set_break_minutes(minutes)
        self._emit_state_change()
        self._emit_tick()
        return value

    def start(self) -> None:
        if not self.engine.start():
            return
        self._ensure_tick_loop()
        self._emit_state_change()
        self._emit_tick()

    def pause(self) -> None:
        self.engine.pause()
        self._stop_tick_loop()
        self._emit_state_change()
        self._emit_tick()

    def stop(self) -> None:
        self.engine.stop()
        self._stop_tick_loop()
        self._emit_state_change()
        self._emit_tick()

    def close(self) -> None:
        self.engine.pause()
        self._stop_tick_loop()

    def tick(self) -> Optional[CompletedInterval]:
        """
        One elapsed second. Called by the scheduled job, or directly by
        callers that drive time themselves.
        """
        if not self.engine.is_running:
            return None

        done = self.engine.tick()
        self._emit_tick()

        if done is not None:
            self._play_cue(done.kind)
            self._persist(done)
            if not self.engine.is_running:
                self._stop_tick_loop()
                self._emit_state_change()
            self._emit_phase_change()
        return done

    # ----- Tick loop -----
    def _ensure_tick_loop(self) -> None:
        if self._scheduler is None or self._tick_job is not None:
            return
        self._tick_job = self._scheduler.after(TICK_MS, self._tick_once)

    def _stop_tick_loop(self) -> None:
        if self._tick_job is not None:
            job, self._tick_job = self._tick_job, None
            if self._scheduler is not None:
                self._scheduler.after_cancel(job)

    def _tick_once(self) -> None:
        self._tick_job = None
        if not self.engine.is_running:
            return
        self.tick()
        if self.engine.is_running:
            self._ensure_tick_loop()

    # ----- Completion side effects -----
    def _play_cue(self, kind: str) -> None:
        if self.audio is None:
            return
        try:
            self.audio.play(kind)
        except Exception:
            logger.debug("Completion cue raised", exc_info=True)

    def _persist(self, done: CompletedInterval) -> Optional[str]:
        user_id = self.session.current_user()
        label = done.task or ""
        if user_id is None:
            logger.info("%s interval finished while signed out, not saved", done.kind)
            return None
        if label == "":
            logger.info("%s interval finished without a task label, not saved", done.kind)
            return None

        record = TaskRecord(
            id="",
            user_id=user_id,
            task=label,
            duration=done.duration,
            kind=done.kind,
            completed=True,
            timestamp=int(self.clock()),
        )
        try:
            rid = self.record_repo.append(record)
        except PersistenceError as e:
            # the phase already advanced; a lost record is acceptable
            logger.error("Saving %s record for %r failed: %s", done.kind, label, e.message)
            return None
        logger.info("Saved %s record %s (%s min, %r)", done.kind, rid, done.duration, label)
        return rid
