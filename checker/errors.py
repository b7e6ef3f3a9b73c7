"""
Typed failures raised by the checker components.

Every failure that aborts a run derives from CheckerError so the entry point
can absorb it in one place.
"""

from typing import Optional


class CheckerError(Exception):
    """Base class for all checker failures."""


class ConfigError(CheckerError):
    """Configuration is missing or invalid."""


class FetchError(CheckerError):
    """The watched page could not be fetched."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class StoreError(CheckerError):
    """A read or write against the key-value store failed."""

    def __init__(self, message: str, operation: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.key = key


class NotifyError(CheckerError):
    """A push notification could not be delivered."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
