"""Feedback records and their SQLAlchemy mapping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from llm_alert_filter.db import Base


class Feedback(Base):
    """A persisted piece of operator feedback for one log message."""

    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    log_group: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    needs_notification: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)


def utc_now_seconds() -> datetime:
    """Return the current UTC instant truncated to whole seconds."""

    return datetime.now(UTC).replace(microsecond=0)


@dataclass(frozen=True)
class FeedbackRecord:
    """Read-only projection of a feedback row."""

    id: str
    created_at: datetime
    log_group: str
    message: str
    needs_notification: bool
    reason: str | None = None

    @classmethod
    def create(
        cls,
        *,
        log_group: str,
        message: str,
        needs_notification: bool,
        reason: str | None = None,
    ) -> "FeedbackRecord":
        """Build a new record with a generated id and the current instant."""

        return cls(
            id=str(uuid4()),
            created_at=utc_now_seconds(),
            log_group=log_group,
            message=message,
            needs_notification=needs_notification,
            reason=reason,
        )

    @classmethod
    def from_row(cls, row: Feedback) -> "FeedbackRecord":
        created_at = row.created_at
        # SQLite drops tzinfo on the way back out.
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            id=row.id,
            created_at=created_at,
            log_group=row.log_group,
            message=row.message,
            needs_notification=row.needs_notification,
            reason=row.reason,
        )

    def to_row(self) -> Feedback:
        return Feedback(
            id=self.id,
            created_at=self.created_at,
            log_group=self.log_group,
            message=self.message,
            needs_notification=self.needs_notification,
            reason=self.reason,
        )
