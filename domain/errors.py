# -*- coding: utf-8 -*-
"""
Exception hierarchy for focuslog.

- FocusLogError: base of every known failure
- PersistenceError: the store refused a write (offline, locked, denied)
- PreconditionError: a query cannot run against the current store layout
- ValidationError: input rejected before it reaches the store
- ConfigError: an explicitly requested config file is unusable
"""
from typing import Optional


class FocusLogError(Exception):
    """Base class for expected focuslog failures."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def get_user_message(self) -> str:
        if self.hint:
            return f"{self.message} ({self.hint})"
        return self.message


class PersistenceError(FocusLogError):
    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, hint="The record was not saved.")
        self.operation = operation


class PreconditionError(FocusLogError):
    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(
            message, hint="Run Database.init_schema() to create tables and indexes."
        )
        self.query = query


class ValidationError(FocusLogError, ValueError):
    pass


class ConfigError(FocusLogError):
    def __init__(self, message: str, config_path: Optional[str] = None):
        hint = f"Check config file: {config_path}" if config_path else None
        super().__init__(message, hint)
        self.config_path = config_path
