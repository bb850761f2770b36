#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sqlite3
import time
import uuid
from typing import Callable, List, Optional

from core.logger import get_logger
from domain.errors import PersistenceError, PreconditionError
from domain.models import KINDS, NamedGoal, RecordFilter, StandingGoals, TaskRecord
from storage.db import Database

logger = get_logger("storage.repos")

ChangeListener = Callable[[str], None]


def _now_ts() -> int:
    return int(time.time())


def _is_precondition(e: sqlite3.Error) -> bool:
    msg = str(e).lower()
    return isinstance(e, sqlite3.OperationalError) and (
        "no such table" in msg or "no such column" in msg or "no such index" in msg
    )


class NotifyingRepo:
    """Base for repos whose writes must reach live feeds."""

    def __init__(self, db: Database):
        self.db = db
        self._listeners: List[ChangeListener] = []

    def add_change_listener(self, fn: ChangeListener) -> Callable[[], None]:
        self._listeners.append(fn)

        def remove() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)

        return remove

    def _notify(self, user_id: str) -> None:
        for fn in list(self._listeners):
            fn(user_id)

    def _write(self, operation: str, sql: str, params: tuple) -> int:
        try:
            cur = self.db.conn.execute(sql, params)
            self.db.conn.commit()
            return cur.rowcount
        except sqlite3.Error as e:
            try:
                self.db.conn.rollback()
            except sqlite3.Error:
                logger.warning("Rollback after failed %s also failed", operation)
            raise PersistenceError(f"{operation} failed: {e}", operation=operation) from e

    def _read(self, sql: str, params: tuple) -> List[sqlite3.Row]:
        try:
            return self.db.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            if _is_precondition(e):
                raise PreconditionError(f"Query cannot run: {e}", query=sql) from e
            raise PersistenceError(f"Query failed: {e}", operation="query") from e


class RecordRepo(NotifyingRepo):
    def append(self, record: TaskRecord) -> str:
        """
        Store a completed interval. The id on the passed record is ignored;
        a fresh one is assigned and returned.
        """
        if record.kind not in KINDS:
            raise PersistenceError(f"Invalid kind: {record.kind!r}", operation="append")
        if record.duration <= 0:
            raise PersistenceError("Duration must be positive.", operation="append")

        rid = str(uuid.uuid4())
        self._write(
            "append",
            """
            INSERT INTO task_records(id, user_id, task, duration, kind, completed, timestamp)
            VALUES(?,?,?,?,?,?,?)
            """,
            (
                rid,
                record.user_id,
                record.task or "",
                int(record.duration),
                record.kind,
                1 if record.completed else 0,
                int(record.timestamp),
            ),
        )
        self._notify(record.user_id)
        return rid

    def query_by_user(
        self,
        user_id: str,
        record_filter: Optional[RecordFilter] = None,
        limit: Optional[int] = None,
    ) -> List[TaskRecord]:
        """Newest first."""
        where = ["user_id = ?"]
        params: list = [user_id]
        if record_filter is not None:
            if record_filter.kind is not None:
                where.append("kind = ?")
                params.append(record_filter.kind)
            if record_filter.task is not None:
                where.append("task = ?")
                params.append(record_filter.task)
            if record_filter.since is not None:
                where.append("timestamp >= ?")
                params.append(int(record_filter.since))

        sql = (
            "SELECT id, user_id, task, duration, kind, completed, timestamp "
            f"FROM task_records WHERE {' AND '.join(where)} "
            "ORDER BY timestamp DESC, rowid DESC"
        )
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        rows = self._read(sql, tuple(params))
        return [
            TaskRecord(
                id=r["id"],
                user_id=r["user_id"],
                task=r["task"] or "",
                duration=int(r["duration"]),
                kind=r["kind"],
                completed=bool(r["completed"]),
                timestamp=int(r["timestamp"]),
            )
            for r in rows
        ]


class GoalRepo(NotifyingRepo):
    # ---- named goals ----
    def create(self, user_id: str, title: str, target_minutes: int) -> NamedGoal:
        gid = str(uuid.uuid4())
        ts = _now_ts()
        self._write(
            "create goal",
            "INSERT INTO goals(id, user_id, title, target_minutes, created_at) VALUES(?,?,?,?,?)",
            (gid, user_id, title, int(target_minutes), ts),
        )
        self._notify(user_id)
        return NamedGoal(
            id=gid,
            user_id=user_id,
            title=title,
            target_minutes=int(target_minutes),
            created_at=ts,
        )

    def delete(self, user_id: str, goal_id: str) -> bool:
        """Returns False when nothing matched."""
        n = self._write(
            "delete goal",
            "DELETE FROM goals WHERE id=? AND user_id=?",
            (goal_id, user_id),
        )
        if n:
            self._notify(user_id)
        return bool(n)

    def list_for_user(self, user_id: str) -> List[NamedGoal]:
        rows = self._read(
            """
            SELECT id, user_id, title, target_minutes, created_at
            FROM goals WHERE user_id=? ORDER BY created_at ASC, rowid ASC
            """,
            (user_id,),
        )
        return [NamedGoal(**dict(r)) for r in rows]

    # ---- standing goals ----
    def get_standing(self, user_id: str) -> Optional[StandingGoals]:
        rows = self._read(
            """
            SELECT user_id, daily_minutes, weekly_minutes, updated_at
            FROM standing_goals WHERE user_id=?
            """,
            (user_id,),
        )
        return StandingGoals(**dict(rows[0])) if rows else None

    def upsert_standing(
        self, user_id: str, daily_minutes: int, weekly_minutes: int
    ) -> StandingGoals:
        ts = _now_ts()
        self._write(
            "save standing goals",
            """
            INSERT INTO standing_goals(user_id, daily_minutes, weekly_minutes, created_at, updated_at)
            VALUES(?, ?, ?, ?, NULL)
            ON CONFLICT(user_id) DO UPDATE SET
                daily_minutes=excluded.daily_minutes,
                weekly_minutes=excluded.weekly_minutes,
                updated_at=?
            """,
            (user_id, int(daily_minutes), int(weekly_minutes), ts, ts),
        )
        self._notify(user_id)
        return self.get_standing(user_id)
