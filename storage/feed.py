# -*- coding: utf-8 -*-
"""
Live query feeds.

A feed re-runs its query and hands the *full* current result to every
subscriber of the affected user whenever the backing repo reports a write.
poll() catches writes made by other processes through PRAGMA data_version.
"""
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from core.logger import get_logger
from domain.errors import FocusLogError, PreconditionError
from storage.db import Database
from storage.repos import NotifyingRepo

logger = get_logger("storage.feed")

T = TypeVar("T")


class Subscription:
    def __init__(self, feed: "ChangeFeed", user_id: str, key: int):
        self._feed = feed
        self.user_id = user_id
        self._key = key

    @property
    def active(self) -> bool:
        return self._feed._has(self._key)

    def unsubscribe(self) -> None:
        self._feed._remove(self._key)


class ChangeFeed(Generic[T]):
    def __init__(
        self,
        name: str,
        repo: NotifyingRepo,
        fetch: Callable[..., List[T]],
        db: Optional[Database] = None,
    ):
        self.name = name
        self._fetch = fetch
        self._db = db
        self._subs: Dict[int, dict] = {}
        self._next_key = 1
        self._last_version: Optional[int] = (
            db.data_version() if db is not None else None
        )
        self._detach = repo.add_change_listener(self._on_change)

    def subscribe(
        self,
        user_id: str,
        callback: Callable[[List[T]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        **query: Any,
    ) -> Subscription:
        key = self._next_key
        self._next_key += 1
        self._subs[key] = {
            "user_id": user_id,
            "callback": callback,
            "on_error": on_error,
            "query": query,
        }
        logger.debug("%s: subscribed user=%s key=%s", self.name, user_id, key)
        self._deliver(self._subs[key])
        return Subscription(self, user_id, key)

    def subscriber_count(self, user_id: Optional[str] = None) -> int:
        if user_id is None:
            return len(self._subs)
        return sum(1 for s in self._subs.values() if s["user_id"] == user_id)

    def poll(self) -> bool:
        """Re-deliver everything if another connection committed. Returns True if it did."""
        if self._db is None:
            return False
        version = self._db.data_version()
        changed = version != self._last_version
        self._last_version = version
        if changed:
            for sub in list(self._subs.values()):
                self._deliver(sub)
        return changed

    def close(self) -> None:
        self._subs.clear()
        self._detach()

    # ---- internals ----
    def _has(self, key: int) -> bool:
        return key in self._subs

    def _remove(self, key: int) -> None:
        if self._subs.pop(key, None) is not None:
            logger.debug("%s: unsubscribed key=%s", self.name, key)

    def _on_change(self, user_id: str) -> None:
        for sub in list(self._subs.values()):
            if sub["user_id"] == user_id:
                self._deliver(sub)

    def _deliver(self, sub: dict) -> None:
        try:
            items = self._fetch(sub["user_id"], **sub["query"])
        except PreconditionError as e:
            logger.error(
                "%s: store is missing a table or index, delivering empty result: %s",
                self.name,
                e.message,
            )
            sub["callback"]([])
            if sub["on_error"]:
                sub["on_error"](e)
            return
        except FocusLogError as e:
            logger.error("%s: query failed: %s", self.name, e.message)
            if sub["on_error"]:
                sub["on_error"](e)
            return
        sub["callback"](items)
