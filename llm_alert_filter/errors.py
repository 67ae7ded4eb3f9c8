"""Exception types shared across the alert filter."""

from __future__ import annotations

from typing import Sequence


class AlertFilterError(Exception):
    """Base class for errors raised by the alert filter."""


class AuthError(AlertFilterError):
    """Raised when an inbound Slack request fails signature verification."""


class DecodeError(AlertFilterError):
    """Raised when a state token or inbound payload cannot be decoded."""


class DecisionError(AlertFilterError):
    """Raised when the judgment call does not yield a usable verdict."""


class StoreError(AlertFilterError):
    """Raised when the feedback store cannot be written or queried."""


class RemoteApiError(AlertFilterError):
    """Raised when Slack rejects an API call."""

    def __init__(self, operation: str, error: str | None) -> None:
        self.operation = operation
        self.error = error or "unknown_error"
        super().__init__(f"Slack {operation} failed: {self.error}")


class NotificationBatchError(AlertFilterError):
    """Raised when one or more lines of a log batch could not be processed."""

    def __init__(self, log_group: str, errors: Sequence[Exception]) -> None:
        self.log_group = log_group
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} log line(s) failed for {log_group}")
