import datetime as dt
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from domain.models import TaskRecord  # noqa: E402
from services.session_context import SessionContext  # noqa: E402
from storage.db import Database  # noqa: E402
from storage.feed import ChangeFeed  # noqa: E402
from storage.repos import GoalRepo, RecordRepo  # noqa: E402

# local noon keeps "today" and "this week" far from day boundaries
NOW = int(dt.datetime(2026, 3, 11, 12, 0, 0).timestamp())
MIN = 60
DAY = 24 * 60 * 60


class FakeScheduler:
    """Tk-style after/after_cancel without a display."""

    def __init__(self):
        self.jobs = {}
        self._next = 0

    def after(self, ms, fn):
        self._next += 1
        job = f"after#{self._next}"
        self.jobs[job] = fn
        return job

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def run_pending(self):
        for job, fn in list(self.jobs.items()):
            self.jobs.pop(job, None)
            fn()


class Clock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


def make_record(task="write", duration=25, kind="focus", ts=NOW, completed=True, rid=None, user="u1"):
    make_record.counter += 1
    return TaskRecord(
        id=rid or f"r{make_record.counter}",
        user_id=user,
        task=task,
        duration=duration,
        kind=kind,
        completed=completed,
        timestamp=ts,
    )


make_record.counter = 0


@pytest.fixture
def db(tmp_path):
    database = Database(db_path=str(tmp_path / "focuslog.db"))
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def record_repo(db):
    return RecordRepo(db)


@pytest.fixture
def goal_repo(db):
    return GoalRepo(db)


@pytest.fixture
def record_feed(db, record_repo):
    feed = ChangeFeed("records", record_repo, record_repo.query_by_user, db=db)
    yield feed
    feed.close()


@pytest.fixture
def goal_feed(db, goal_repo):
    feed = ChangeFeed("goals", goal_repo, goal_repo.list_for_user, db=db)
    yield feed
    feed.close()


@pytest.fixture
def session():
    return SessionContext()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock():
    return Clock()
