# -*- coding: utf-8 -*-

from typing import Callable, List, Optional, Tuple

from core.logger import get_logger

logger = get_logger("services.session")

LoginFn = Callable[[str], None]
LogoutFn = Callable[[], None]


class SessionContext:
    """
    Holds the signed-in user and fans login/logout out to the services
    that were handed this context. Identity itself is decided elsewhere.
    """

    def __init__(self):
        self._user_id: Optional[str] = None
        self._listeners: List[Tuple[Optional[LoginFn], Optional[LogoutFn]]] = []

    def current_user(self) -> Optional[str]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def add_listener(
        self,
        on_login: Optional[LoginFn] = None,
        on_logout: Optional[LogoutFn] = None,
    ) -> Callable[[], None]:
        """
        Register callbacks. If a user is already signed in, on_login fires
        right away. Returns a function that removes the pair.
        """
        entry = (on_login, on_logout)
        self._listeners.append(entry)
        if self._user_id is not None and on_login:
            on_login(self._user_id)

        def remove() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return remove

    def login(self, user_id: str) -> None:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("User id cannot be empty.")
        if self._user_id == user_id:
            return
        if self._user_id is not None:
            self.logout()
        self._user_id = user_id
        logger.info("User %s signed in", user_id)
        for on_login, _ in list(self._listeners):
            if on_login:
                on_login(user_id)

    def logout(self) -> None:
        if self._user_id is None:
            return
        logger.info("User %s signed out", self._user_id)
        self._user_id = None
        for _, on_logout in list(self._listeners):
            if on_logout:
                on_logout()
