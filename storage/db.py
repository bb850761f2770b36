#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sqlite3
from pathlib import Path

from core.logger import get_logger

logger = get_logger("storage.db")


class Database:
    def __init__(self, db_path: str = "focuslog.db"):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON;")

    def _table_exists(self, name: str) -> bool:
        r = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (name,),
        ).fetchone()
        return bool(r)

    def _cols(self, table: str):
        try:
            return [
                r["name"]
                for r in self.conn.execute(f"PRAGMA table_info({table});").fetchall()
            ]
        except sqlite3.Error:
            return []

    def init_schema(self):
        cur = self.conn.cursor()

        # --- task records (append-only) ---
        # records imported from the document-store layout carry "type";
        # rebuild so no legacy NOT NULL column is left behind
        cols = self._cols("task_records")
        if "type" in cols and "kind" not in cols:
            logger.info("Migrating task_records.type -> kind")
            cur.execute("ALTER TABLE task_records RENAME TO task_records_legacy;")
            cur.execute("DROP INDEX IF EXISTS idx_records_user_ts;")

        cur.execute("""
            CREATE TABLE IF NOT EXISTS task_records (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                task TEXT NOT NULL DEFAULT '',
                duration INTEGER NOT NULL CHECK (duration > 0),
                kind TEXT NOT NULL,
                completed INTEGER NOT NULL DEFAULT 1,
                timestamp INTEGER NOT NULL
            );
        """)

        if self._table_exists("task_records_legacy"):
            cur.execute("""
                INSERT OR IGNORE INTO task_records(id, user_id, task, duration, kind, completed, timestamp)
                SELECT id, user_id, COALESCE(task, ''), duration, type, COALESCE(completed, 1), timestamp
                FROM task_records_legacy
                WHERE duration > 0;
            """)
            cur.execute("DROP TABLE task_records_legacy;")

        # --- named goals ---
        cur.execute("""
            CREATE TABLE IF NOT EXISTS goals (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                target_minutes INTEGER NOT NULL,
                created_at INTEGER NOT NULL
            );
        """)

        # --- standing goals (one row per user) ---
        cur.execute("""
            CREATE TABLE IF NOT EXISTS standing_goals (
                user_id TEXT PRIMARY KEY,
                daily_minutes INTEGER NOT NULL,
                weekly_minutes INTEGER NOT NULL,
                created_at INTEGER NOT NULL,
                updated_at INTEGER
            );
        """)

        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_records_user_ts "
            "ON task_records(user_id, timestamp DESC);"
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_goals_user ON goals(user_id);")

        self.conn.commit()

    def data_version(self) -> int:
        # changes only when another connection commits
        return int(self.conn.execute("PRAGMA data_version;").fetchone()[0])

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            logger.warning("Closing %s failed", self.db_path, exc_info=True)
