import pytest

from conftest import DAY, NOW, make_record
from core import goal_tracker
from domain.errors import ValidationError
from domain.models import NamedGoal, StandingGoals
from services.goal_service import GoalService
from services.stats_service import StatsService


def test_progress_is_clamped():
    over = goal_tracker.progress(25, 10)
    assert over.percent == 100
    assert over.completed is True

    none = goal_tracker.progress(0, 10)
    assert none.percent == 0
    assert none.completed is False

    half = goal_tracker.progress(5, 10)
    assert half.percent == pytest.approx(50.0)
    assert half.completed is False

    exact = goal_tracker.progress(10, 10)
    assert exact.completed is True


def test_named_goal_counts_only_focus_under_its_label_all_time():
    goal = NamedGoal(id="g1", user_id="u1", title="write", target_minutes=60, created_at=NOW)
    records = [
        make_record("write", 25, "focus", ts=NOW - 30 * DAY),
        make_record("write", 25, "focus", ts=NOW),
        make_record("write", 5, "break", ts=NOW),
        make_record("read", 25, "focus", ts=NOW),
    ]
    p = goal_tracker.named_goal_progress(goal, records, NOW)
    assert p.done_minutes == 50
    assert p.completed is False


def test_standing_progress_uses_today_and_week():
    standing = StandingGoals(user_id="u1", daily_minutes=50, weekly_minutes=100)
    records = [
        make_record("write", 25, "focus", ts=NOW),
        make_record("write", 50, "focus", ts=NOW - 2 * DAY),
        make_record("write", 5, "break", ts=NOW),
    ]
    p = goal_tracker.standing_progress(standing, records, NOW)
    assert p["daily"].done_minutes == 25
    assert p["daily"].percent == pytest.approx(50.0)
    assert p["weekly"].done_minutes == 75
    assert p["weekly"].completed is False


@pytest.fixture
def services(record_feed, goal_repo, goal_feed, session, clock):
    stats = StatsService(record_feed, session, clock=clock)
    goals = GoalService(goal_repo, goal_feed, stats, session)
    yield stats, goals
    goals.close()
    stats.close()


def test_create_goal_validation(services, session):
    _, goals = services
    session.login("u1")
    with pytest.raises(ValidationError):
        goals.create_goal("   ", 30)
    with pytest.raises(ValidationError):
        goals.create_goal("write", 0)
    with pytest.raises(ValidationError):
        goals.create_goal("write", "abc")
    # ValidationError is also a ValueError
    with pytest.raises(ValueError):
        goals.create_goal("write", -5)
    assert goals.named_goals == []


def test_goal_progress_follows_live_records(services, session, record_repo):
    _, goals = services
    session.login("u1")
    goal = goals.create_goal("write", 30)
    assert [g.id for g in goals.named_goals] == [goal.id]

    [(_, p)] = goals.named_progress()
    assert p.done_minutes == 0

    record_repo.append(make_record("write", 25, "focus", ts=NOW))
    [(_, p)] = goals.named_progress()
    assert p.done_minutes == 25
    assert p.completed is False

    record_repo.append(make_record("write", 25, "focus", ts=NOW))
    [(_, p)] = goals.named_progress()
    assert p.percent == 100
    assert p.completed is True


def test_delete_goal_is_idempotent(services, session):
    _, goals = services
    session.login("u1")
    goal = goals.create_goal("write", 30)

    assert goals.delete_goal(goal.id) is True
    assert goals.named_goals == []
    assert goals.delete_goal(goal.id) is False
    assert goals.delete_goal("missing") is False


def test_goals_are_scoped_to_user(services, session):
    _, goals = services
    session.login("u1")
    goal = goals.create_goal("write", 30)
    session.login("u2")
    assert goals.named_goals == []
    assert goals.delete_goal(goal.id) is False
    session.login("u1")
    assert [g.id for g in goals.named_goals] == [goal.id]


def test_standing_goals_defaults_then_create_then_update(services, session, goal_repo):
    _, goals = services
    session.login("u1")

    first = goals.load_standing_goals()
    assert (first.daily_minutes, first.weekly_minutes) == (120, 600)
    assert goal_repo.get_standing("u1") is None

    goals.save_standing_goals(90, 450)
    goals.save_standing_goals(60, 300)

    stored = goal_repo.get_standing("u1")
    assert (stored.daily_minutes, stored.weekly_minutes) == (60, 300)
    assert stored.updated_at is not None
    rows = goal_repo.db.conn.execute("SELECT COUNT(1) AS c FROM standing_goals").fetchone()
    assert rows["c"] == 1

    with pytest.raises(ValidationError):
        goals.save_standing_goals(0, 300)


def test_standing_progress_through_service(services, session, record_repo):
    _, goals = services
    session.login("u1")
    goals.save_standing_goals(50, 100)
    record_repo.append(make_record("write", 25, "focus", ts=NOW))

    p = goals.standing_progress()
    assert p["daily"].percent == pytest.approx(50.0)
    assert p["weekly"].percent == pytest.approx(25.0)


def test_signed_out_goal_creation_is_rejected(services):
    _, goals = services
    with pytest.raises(ValidationError):
        goals.create_goal("write", 30)
