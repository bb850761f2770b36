#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import getpass
import logging
import sys

from core.config import load_config
from core.logger import get_logger, setup_logging
from domain.errors import ConfigError
from services.audio import AudioCue
from services.goal_service import GoalService
from services.session_context import SessionContext
from services.stats_service import StatsService
from services.timer_service import TimerService
from storage.db import Database
from storage.feed import ChangeFeed
from storage.repos import GoalRepo, RecordRepo


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Focus/break timer with task log and goals")
    parser.add_argument("--config", help="YAML file overriding defaults")
    parser.add_argument("--db", help="SQLite database path")
    parser.add_argument("--user", help="user id to sign in as (default: OS login name)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"focuslog: {e.get_user_message()}", file=sys.stderr)
        return 2
    if args.db:
        config.db_path = args.db

    setup_logging(config.log_dir, log_level=getattr(logging, args.log_level))
    logger = get_logger("app")

    db = Database(db_path=config.db_path)
    db.init_schema()
    logger.info("Using database %s", config.db_path)

    record_repo = RecordRepo(db)
    goal_repo = GoalRepo(db)
    record_feed = ChangeFeed("records", record_repo, record_repo.query_by_user, db=db)
    goal_feed = ChangeFeed("goals", goal_repo, goal_repo.list_for_user, db=db)

    session = SessionContext()
    timer_service = TimerService(
        record_repo,
        session,
        audio=AudioCue(config.focus_cue_path, config.break_cue_path),
        focus_minutes=config.focus_minutes,
        break_minutes=config.break_minutes,
    )
    stats_service = StatsService(
        record_feed,
        session,
        pairing_window_sec=config.pairing_window_sec,
        pairing_anchor=config.pairing_anchor,
        recent_limit=config.recent_limit,
    )
    goal_service = GoalService(
        goal_repo,
        goal_feed,
        stats_service,
        session,
        default_daily_minutes=config.daily_goal_minutes,
        default_weekly_minutes=config.weekly_goal_minutes,
    )

    # imported late: tkinter is only needed for the window
    from ui.main_window import MainWindow

    session.login(args.user or getpass.getuser())
    window = MainWindow(
        timer_service,
        stats_service,
        goal_service,
        feeds=(record_feed, goal_feed),
        poll_sec=config.feed_poll_sec,
        page_size=config.history_page_size,
    )
    try:
        window.run()
    finally:
        timer_service.close()
        goal_service.close()
        stats_service.close()
        session.logout()
        record_feed.close()
        goal_feed.close()
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
