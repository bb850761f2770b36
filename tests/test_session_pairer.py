import pytest

from conftest import DAY, MIN, NOW, make_record
from core.session_pairer import pair

T = NOW - 3600


def test_break_right_after_focus_pairs():
    focus = make_record("write", 25, "focus", ts=T)
    brk = make_record("write", 5, "break", ts=T + 5 * MIN)

    sessions = pair([brk, focus])

    assert len(sessions) == 1
    assert sessions[0].paired_break == brk
    assert sessions[0].total_duration == 30


def test_break_finishing_25_minutes_later_does_not_pair():
    # break started 20 minutes after the focus finished
    focus = make_record("write", 25, "focus", ts=T)
    brk = make_record("write", 5, "break", ts=T + 25 * MIN)

    sessions = pair([focus, brk])

    assert len(sessions) == 1
    assert sessions[0].paired_break is None
    assert sessions[0].total_duration == 25


def test_literal_timestamp_anchor():
    focus = make_record("write", 25, "focus", ts=T)
    exactly_five = make_record("write", 5, "break", ts=T + 5 * MIN)
    short = make_record("write", 3, "break", ts=T + 3 * MIN)

    assert pair([focus, exactly_five], anchor="timestamp")[0].paired_break is None
    assert pair([focus, short], anchor="timestamp")[0].paired_break == short


def test_label_must_match():
    focus = make_record("write", 25, "focus", ts=T)
    brk = make_record("read", 5, "break", ts=T + 5 * MIN)
    assert pair([focus, brk])[0].paired_break is None


def test_empty_labels_pair_with_each_other():
    focus = make_record("", 25, "focus", ts=T)
    brk = make_record("", 5, "break", ts=T + 5 * MIN)
    other = make_record("write", 5, "break", ts=T + 5 * MIN)
    assert pair([other, focus, brk])[0].paired_break == brk


def test_nearest_break_wins():
    focus = make_record("write", 25, "focus", ts=T)
    far = make_record("write", 5, "break", ts=T + 5 * MIN + 200)
    near = make_record("write", 5, "break", ts=T + 5 * MIN + 30)
    assert pair([far, near, focus])[0].paired_break == near


def test_equal_gaps_keep_input_order():
    focus = make_record("write", 25, "focus", ts=T)
    before = make_record("write", 5, "break", ts=T + 5 * MIN - 60)
    after = make_record("write", 5, "break", ts=T + 5 * MIN + 60)
    assert pair([before, after, focus])[0].paired_break == before
    assert pair([after, before, focus])[0].paired_break == after


def test_orphan_breaks_are_dropped_and_order_is_newest_first():
    older = make_record("a", 25, "focus", ts=T - DAY)
    newer = make_record("b", 25, "focus", ts=T)
    orphan = make_record("c", 5, "break", ts=T + 5 * MIN)

    sessions = pair([older, orphan, newer])

    assert [s.focus for s in sessions] == [newer, older]


def test_duplicate_timestamps_are_kept():
    a = make_record("a", 25, "focus", ts=T)
    b = make_record("b", 25, "focus", ts=T)
    assert [s.focus for s in pair([a, b])] == [a, b]


def test_pairing_is_idempotent():
    records = [
        make_record("write", 25, "focus", ts=T),
        make_record("write", 5, "break", ts=T + 5 * MIN),
        make_record("read", 25, "focus", ts=T + 40 * MIN),
        make_record("read", 5, "break", ts=T + 90 * MIN),
    ]
    assert pair(records) == pair(records)
    assert pair(records) == pair(list(reversed(records)))


def test_unknown_anchor_rejected():
    with pytest.raises(ValueError):
        pair([], anchor="end")
