# -*- coding: utf-8 -*-

import datetime as dt
import tkinter as tk
from tkinter import ttk
from typing import Dict, Optional

from domain.errors import ValidationError
from domain.models import UNNAMED_LABEL, Stats
from services.goal_service import GoalService
from services.stats_service import StatsService, StatsView
from services.timer_service import TimerService
from ui.pomodoro_widget import PomodoroWidget

ALL_TASKS = "(all tasks)"
ALL_DATES = "(all dates)"


def _fmt_stats(title: str, s: Stats) -> str:
    return (
        f"{title}\n"
        f"  focus: {s.total_focus_minutes} min   break: {s.total_break_minutes} min\n"
        f"  tasks: {s.total_task_count}   completed: {s.completed_count}\n"
        f"  avg/day: {s.average_minutes_per_day} min"
    )


def _fmt_breakdown(view: StatsView) -> str:
    lines = ["Focus by task"]
    for task, minutes in sorted(view.focus_by_task.items(), key=lambda kv: -kv[1]):
        lines.append(f"  {task or UNNAMED_LABEL}: {minutes} min")
    lines.append("")
    lines.append(f"Today's sessions ({len(view.today_sessions)})")
    for s in view.today_sessions:
        when = dt.datetime.fromtimestamp(s.timestamp).strftime("%H:%M")
        lines.append(f"  {when}  {s.focus.display_task}  {s.total_duration} min")
    return "\n".join(lines)


class MainWindow:
    def __init__(
        self,
        timer_service: TimerService,
        stats_service: StatsService,
        goal_service: GoalService,
        feeds=(),
        poll_sec: int = 5,
        page_size: int = 10,
    ):
        self.timer_service = timer_service
        self.stats_service = stats_service
        self.goal_service = goal_service
        self.feeds = list(feeds)
        self.poll_ms = max(1, int(poll_sec)) * 1000
        self.page_size = page_size

        self.root = tk.Tk()
        self.root.title("focuslog")
        self.root.geometry("900x480")

        self.page = 1
        today = dt.date.today()
        self.cal_year, self.cal_month = today.year, today.month
        self._goal_index_to_id: Dict[int, str] = {}
        self._poll_job: Optional[str] = None

        self._build_ui()

        self.stats_service.add_listener(self._on_stats)
        self.goal_service.add_listener(self._refresh_goals)
        self._on_stats(self.stats_service.view)
        self._refresh_goals()
        self._schedule_poll()

    def _build_ui(self):
        outer = ttk.Frame(self.root, padding=10)
        outer.pack(fill="both", expand=True)
        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(0, weight=1)

        # LEFT: timer
        self.pomodoro = PomodoroWidget(outer, timer_service=self.timer_service)
        self.pomodoro.grid(row=0, column=0, sticky="nsew", padx=(0, 10))

        # RIGHT: tabs
        tabs = ttk.Notebook(outer)
        tabs.grid(row=0, column=1, sticky="nsew")

        # history
        hist = ttk.Frame(tabs, padding=8)
        hist.columnconfigure(1, weight=1)
        hist.rowconfigure(1, weight=1)

        cal = ttk.Frame(hist)
        cal.grid(row=0, column=0, columnspan=3, sticky="ew", pady=(0, 6))
        ttk.Button(cal, text="<<", width=3, command=lambda: self._turn_month(-1)).pack(side="left")
        self.month_var = tk.StringVar(value="")
        ttk.Label(cal, textvariable=self.month_var, width=10, anchor="center").pack(side="left")
        ttk.Button(cal, text=">>", width=3, command=lambda: self._turn_month(1)).pack(side="left")
        self.date_var = tk.StringVar(value=ALL_DATES)
        self.date_picker = ttk.Combobox(cal, textvariable=self.date_var, state="readonly", width=12)
        self.date_picker.pack(side="left", padx=(10, 0))
        self.date_picker.bind("<<ComboboxSelected>>", self._on_date)

        self.history_list = tk.Listbox(hist, height=14)
        self.history_list.grid(row=1, column=0, columnspan=3, sticky="nsew")
        ttk.Button(hist, text="<", command=lambda: self._turn_page(-1)).grid(
            row=2, column=0, sticky="w", pady=(6, 0)
        )
        self.page_var = tk.StringVar(value="1 / 1")
        ttk.Label(hist, textvariable=self.page_var).grid(row=2, column=1, pady=(6, 0))
        ttk.Button(hist, text=">", command=lambda: self._turn_page(1)).grid(
            row=2, column=2, sticky="e", pady=(6, 0)
        )
        tabs.add(hist, text="History")

        # stats
        stats = ttk.Frame(tabs, padding=8)
        self.task_filter_var = tk.StringVar(value=ALL_TASKS)
        self.task_filter = ttk.Combobox(
            stats, textvariable=self.task_filter_var, state="readonly"
        )
        self.task_filter.grid(row=0, column=0, sticky="w")
        self.task_filter.bind("<<ComboboxSelected>>", self._on_filter)
        self.stats_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.stats_var, justify="left").grid(
            row=1, column=0, sticky="nw", pady=(8, 0)
        )
        self.breakdown_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.breakdown_var, justify="left").grid(
            row=1, column=1, sticky="nw", padx=(20, 0), pady=(8, 0)
        )
        tabs.add(stats, text="Stats")

        # goals
        goals = ttk.Frame(tabs, padding=8)
        goals.columnconfigure(1, weight=1)
        self.standing_var = tk.StringVar(value="")
        ttk.Label(goals, textvariable=self.standing_var, justify="left").grid(
            row=0, column=0, columnspan=4, sticky="w"
        )
        self.daily_var = tk.StringVar()
        self.weekly_var = tk.StringVar()
        ttk.Entry(goals, textvariable=self.daily_var, width=6).grid(row=1, column=0, sticky="w")
        ttk.Entry(goals, textvariable=self.weekly_var, width=6).grid(row=1, column=1, sticky="w")
        ttk.Button(goals, text="Save daily/weekly", command=self._save_standing).grid(
            row=1, column=2, sticky="w"
        )

        self.goal_title_var = tk.StringVar()
        self.goal_target_var = tk.StringVar()
        ttk.Entry(goals, textvariable=self.goal_title_var).grid(
            row=2, column=0, columnspan=2, sticky="ew", pady=(10, 0)
        )
        ttk.Entry(goals, textvariable=self.goal_target_var, width=6).grid(
            row=2, column=2, sticky="w", pady=(10, 0)
        )
        ttk.Button(goals, text="Add goal", command=self._add_goal).grid(
            row=2, column=3, sticky="w", pady=(10, 0)
        )
        self.goal_list = tk.Listbox(goals, height=8)
        self.goal_list.grid(row=3, column=0, columnspan=4, sticky="nsew", pady=(6, 0))
        ttk.Button(goals, text="Delete selected", command=self._delete_goal).grid(
            row=4, column=0, sticky="w", pady=(6, 0)
        )
        self.err_var = tk.StringVar(value="")
        ttk.Label(goals, textvariable=self.err_var, foreground="red").grid(
            row=5, column=0, columnspan=4, sticky="w"
        )
        tabs.add(goals, text="Goals")

    def run(self):
        try:
            self.root.mainloop()
        finally:
            if self._poll_job is not None:
                self.root.after_cancel(self._poll_job)
                self._poll_job = None

    # ----- feed polling (writes from other processes) -----
    def _schedule_poll(self):
        self._poll_job = self.root.after(self.poll_ms, self._poll_once)

    def _poll_once(self):
        for feed in self.feeds:
            feed.poll()
        # rolling windows move with the clock even without new records
        self.stats_service.recompute()
        self._schedule_poll()

    # ----- stats / history -----
    def _on_stats(self, view: StatsView):
        self.pomodoro.set_recent_tasks(view.recent_task_names)
        self.task_filter.configure(values=[ALL_TASKS] + view.task_names)
        self.stats_var.set(
            "\n\n".join(
                [
                    _fmt_stats("Today", view.today),
                    _fmt_stats("Last 7 days", view.this_week)
                    + f"\n  weekly avg focus/day: {view.weekly_average_focus} min",
                    _fmt_stats("All time", view.overall),
                ]
            )
        )
        self.breakdown_var.set(_fmt_breakdown(view))
        self._render_calendar()
        self._render_history()

    def _on_filter(self, event=None):
        value = self.task_filter_var.get()
        self.stats_service.set_selected_task(None if value == ALL_TASKS else value)

    def _turn_page(self, delta: int):
        self.page += delta
        self._render_history()

    def _turn_month(self, delta: int):
        idx = self.cal_year * 12 + (self.cal_month - 1) + delta
        self.cal_year, self.cal_month = divmod(idx, 12)
        self.cal_month += 1
        self._render_calendar()

    def _render_calendar(self):
        self.month_var.set(f"{self.cal_year}-{self.cal_month:02d}")
        days = self.stats_service.calendar_days(self.cal_year, self.cal_month)
        self.date_picker.configure(values=[ALL_DATES] + [d.isoformat() for d in days])

    def _on_date(self, event=None):
        value = self.date_var.get()
        day = None if value == ALL_DATES else dt.date.fromisoformat(value)
        self.page = 1
        self.stats_service.set_selected_date(day)

    def _render_history(self):
        groups, pages = self.stats_service.history_page(self.page, self.page_size)
        self.page = min(max(1, self.page), pages)
        self.page_var.set(f"{self.page} / {pages}")

        self.history_list.delete(0, tk.END)
        for day, sessions in groups:
            self.history_list.insert(tk.END, day.isoformat())
            for s in sessions:
                when = dt.datetime.fromtimestamp(s.timestamp).strftime("%H:%M")
                label = s.focus.display_task
                line = f"  {when}  {label}  total {s.total_duration} min (focus {s.focus_duration}"
                if s.break_duration:
                    line += f", break {s.break_duration}"
                self.history_list.insert(tk.END, line + ")")

    # ----- goals -----
    def _refresh_goals(self):
        standing = self.goal_service.standing or self.goal_service.load_standing_goals()
        prog = self.goal_service.standing_progress()
        self.standing_var.set(
            f"Daily: {prog['daily'].done_minutes}/{standing.daily_minutes} min "
            f"({round(prog['daily'].percent)}%)\n"
            f"Weekly: {prog['weekly'].done_minutes}/{standing.weekly_minutes} min "
            f"({round(prog['weekly'].percent)}%)"
        )
        if not self.daily_var.get():
            self.daily_var.set(str(standing.daily_minutes))
            self.weekly_var.set(str(standing.weekly_minutes))

        self.goal_list.delete(0, tk.END)
        self._goal_index_to_id.clear()
        for i, (goal, p) in enumerate(self.goal_service.named_progress()):
            mark = "done" if p.completed else f"{round(p.percent)}%"
            self.goal_list.insert(
                tk.END, f"{goal.title}: {p.done_minutes}/{goal.target_minutes} min ({mark})"
            )
            self._goal_index_to_id[i] = goal.id

    def _save_standing(self):
        try:
            self.goal_service.save_standing_goals(self.daily_var.get(), self.weekly_var.get())
            self.err_var.set("")
        except ValidationError as e:
            self.err_var.set(e.message)

    def _add_goal(self):
        try:
            self.goal_service.create_goal(self.goal_title_var.get(), self.goal_target_var.get())
            self.goal_title_var.set("")
            self.goal_target_var.set("")
            self.err_var.set("")
        except ValidationError as e:
            self.err_var.set(e.message)

    def _delete_goal(self):
        sel = self.goal_list.curselection()
        if not sel:
            return
        goal_id = self._goal_index_to_id.get(int(sel[0]))
        if goal_id:
            self.goal_service.delete_goal(goal_id)
