# -*- coding: utf-8 -*-

from typing import Iterable, List, Optional

from domain.models import BREAK, FOCUS, Session, TaskRecord

PAIRING_WINDOW_SEC = 300

ANCHOR_BREAK_START = "break_start"
ANCHOR_TIMESTAMP = "timestamp"
ANCHORS = (ANCHOR_BREAK_START, ANCHOR_TIMESTAMP)


def _gap_sec(focus: TaskRecord, brk: TaskRecord, anchor: str) -> int:
    if anchor == ANCHOR_TIMESTAMP:
        return abs(brk.timestamp - focus.timestamp)
    # records are stamped on completion, so the break began duration minutes earlier
    break_start = brk.timestamp - brk.duration * 60
    return abs(break_start - focus.timestamp)


def find_break(
    focus: TaskRecord,
    records: List[TaskRecord],
    window_sec: int = PAIRING_WINDOW_SEC,
    anchor: str = ANCHOR_BREAK_START,
) -> Optional[TaskRecord]:
    """Nearest same-label break inside the window; ties keep input order."""
    best: Optional[TaskRecord] = None
    best_gap = None
    for r in records:
        if r.kind != BREAK or r.task != focus.task:
            continue
        gap = _gap_sec(focus, r, anchor)
        if gap >= window_sec:
            continue
        if best_gap is None or gap < best_gap:
            best = r
            best_gap = gap
    return best


def pair(
    records: Iterable[TaskRecord],
    window_sec: int = PAIRING_WINDOW_SEC,
    anchor: str = ANCHOR_BREAK_START,
) -> List[Session]:
    """
    Join each focus record with at most one adjacent break of the same label.
    Breaks without a focus partner are dropped. Newest session first.
    """
    if anchor not in ANCHORS:
        raise ValueError(f"Unknown pairing anchor: {anchor!r}")

    items = list(records)
    sessions = [
        Session(focus=r, paired_break=find_break(r, items, window_sec, anchor))
        for r in items
        if r.kind == FOCUS
    ]
    # sort is stable, duplicate timestamps keep input order
    sessions.sort(key=lambda s: s.timestamp, reverse=True)
    return sessions
