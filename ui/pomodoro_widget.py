# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import List

from core.timer_engine import BREAK_MIN_RANGE, FOCUS_MIN_RANGE, EngineSnapshot, format_time
from domain.models import FOCUS
from services.timer_service import TimerService


class PomodoroWidget(ttk.Frame):
    def __init__(self, master, timer_service: TimerService):
        super().__init__(master)

        self.timer_service = timer_service

        self._build_ui()

        # the widget's own after() drives the one-second tick
        self.timer_service.set_scheduler(self)
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_phase_change(self._on_phase_change)
        self.timer_service.set_on_state_change(self._on_state_change)

        self._render(self.timer_service.get_snapshot())
        self._update_buttons()

    def _build_ui(self):
        self.columnconfigure(0, weight=1)
        snap = self.timer_service.get_snapshot()

        self.phase_var = tk.StringVar(value="Focus")
        self.time_var = tk.StringVar(value=format_time(snap.remaining_sec))
        self.info_var = tk.StringVar(value="")

        ttk.Label(self, text="Pomodoro", font=("Sans", 12, "bold")).grid(
            row=0, column=0, sticky="w", pady=(0, 6)
        )
        ttk.Label(self, textvariable=self.phase_var).grid(row=1, column=0, sticky="w")
        ttk.Label(self, textvariable=self.time_var, font=("Sans", 32, "bold")).grid(
            row=2, column=0, sticky="w", pady=(8, 4)
        )

        self.progress = ttk.Progressbar(self, maximum=100, mode="determinate")
        self.progress.grid(row=3, column=0, sticky="ew", pady=(0, 8))

        # settings
        settings = ttk.Frame(self)
        settings.grid(row=4, column=0, sticky="w", pady=(0, 6))

        ttk.Label(settings, text="Focus (min)").grid(row=0, column=0, sticky="w")
        self.focus_var = tk.StringVar(value=str(snap.focus_minutes))
        self.focus_spin = ttk.Spinbox(
            settings,
            from_=FOCUS_MIN_RANGE[0],
            to=FOCUS_MIN_RANGE[1],
            width=4,
            textvariable=self.focus_var,
            command=self._apply_focus,
        )
        self.focus_spin.grid(row=0, column=1, padx=(4, 12))
        # command only fires on the arrows; typed values land on Return/FocusOut
        self.focus_spin.bind("<Return>", lambda _e: self._apply_focus())
        self.focus_spin.bind("<FocusOut>", lambda _e: self._apply_focus())

        ttk.Label(settings, text="Break (min)").grid(row=0, column=2, sticky="w")
        self.break_var = tk.StringVar(value=str(snap.break_minutes))
        self.break_spin = ttk.Spinbox(
            settings,
            from_=BREAK_MIN_RANGE[0],
            to=BREAK_MIN_RANGE[1],
            width=4,
            textvariable=self.break_var,
            command=self._apply_break,
        )
        self.break_spin.grid(row=0, column=3, padx=(4, 0))
        self.break_spin.bind("<Return>", lambda _e: self._apply_break())
        self.break_spin.bind("<FocusOut>", lambda _e: self._apply_break())

        # task label: pick a recent one or type a new one
        task_row = ttk.Frame(self)
        task_row.grid(row=5, column=0, sticky="ew", pady=(0, 6))
        task_row.columnconfigure(1, weight=1)
        ttk.Label(task_row, text="Task").grid(row=0, column=0, sticky="w")
        self.task_var = tk.StringVar(value=snap.task_label)
        self.task_box = ttk.Combobox(task_row, textvariable=self.task_var)
        self.task_box.grid(row=0, column=1, sticky="ew", padx=(6, 0))
        self.task_var.trace_add("write", lambda *_: self._apply_task())

        ttk.Label(self, textvariable=self.info_var).grid(
            row=6, column=0, sticky="w", pady=(0, 8)
        )

        btns = ttk.Frame(self)
        btns.grid(row=7, column=0, sticky="w")
        self.start_btn = ttk.Button(btns, text="Start", command=self.timer_service.start)
        self.pause_btn = ttk.Button(btns, text="Pause", command=self.timer_service.pause)
        self.stop_btn = ttk.Button(btns, text="Stop", command=self.timer_service.stop)
        self.start_btn.grid(row=0, column=0, padx=(0, 6))
        self.pause_btn.grid(row=0, column=1, padx=(0, 6))
        self.stop_btn.grid(row=0, column=2)

    def set_recent_tasks(self, names: List[str]) -> None:
        self.task_box.configure(values=names)

    # ---- settings ----
    def _apply_focus(self):
        value = self.timer_service.set_focus_minutes(self.focus_var.get())
        self.focus_var.set(str(value))

    def _apply_break(self):
        value = self.timer_service.set_break_minutes(self.break_var.get())
        self.break_var.set(str(value))

    def _apply_task(self):
        if self.task_var.get() != self.timer_service.get_snapshot().task_label:
            self.timer_service.set_task_label(self.task_var.get())

    def _update_buttons(self):
        snap = self.timer_service.get_snapshot()
        if snap.is_running:
            self.start_btn.state(["disabled"])
            self.pause_btn.state(["!disabled"])
        else:
            self.start_btn.state(["!disabled"])
            self.pause_btn.state(["disabled"])

    # ---- service callbacks ----
    def _on_tick(self, snap: EngineSnapshot):
        self._render(snap)

    def _on_phase_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons()
        if snap.phase == FOCUS:
            # cycle finished, label was cleared
            self.task_var.set(snap.task_label)
            self.info_var.set("Cycle done. Start when ready.")
        else:
            self.info_var.set("Break time.")

    def _on_state_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons()

    def _render(self, snap: EngineSnapshot):
        self.time_var.set(format_time(snap.remaining_sec))
        self.phase_var.set("Focus" if snap.phase == FOCUS else "Break")
        self.progress["value"] = snap.progress_percent
        if snap.task_label == "":
            self.info_var.set("No task label: this interval will not be saved")
        elif snap.is_running:
            self.info_var.set("Running...")
        else:
            self.info_var.set("Paused" if snap.remaining_sec < snap.phase_length_sec else "Ready")
