"""Services for storing and querying operator feedback."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
import structlog

from llm_alert_filter.db import session_scope
from llm_alert_filter.errors import StoreError
from llm_alert_filter.models import Feedback, FeedbackRecord

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class FeedbackPage:
    """One page of a feedback query plus the cursor for the next page."""

    items: List[FeedbackRecord] = field(default_factory=list)
    next_cursor: str | None = None


PageFetcher = Callable[..., FeedbackPage]


def save_feedback(
    record: FeedbackRecord,
    *,
    session_factory: sessionmaker[Session] | None = None,
) -> FeedbackRecord:
    """Persist a new feedback record. Duplicate submissions produce duplicate rows."""

    try:
        with session_scope(session_factory) as session:
            session.add(record.to_row())
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to save feedback {record.id}") from exc
    return record


def query_feedback_page(
    log_group: str,
    *,
    cursor: str | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    session_factory: sessionmaker[Session] | None = None,
) -> FeedbackPage:
    """Return a single page of feedback for *log_group* ordered by id."""

    stmt = select(Feedback).where(Feedback.log_group == log_group)
    if cursor is not None:
        stmt = stmt.where(Feedback.id > cursor)
    stmt = stmt.order_by(Feedback.id).limit(limit)

    try:
        with session_scope(session_factory) as session:
            rows = session.execute(stmt).scalars().all()
            items = [FeedbackRecord.from_row(row) for row in rows]
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to query feedback for {log_group}") from exc

    next_cursor = items[-1].id if len(items) == limit else None
    return FeedbackPage(items=items, next_cursor=next_cursor)


def list_feedback_by_log_group(
    log_group: str,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    fetch_page: PageFetcher = query_feedback_page,
) -> List[FeedbackRecord]:
    """Return every feedback record for *log_group*, following the page cursors.

    A failing page aborts the whole listing so decisions are never made on a
    partial history.
    """

    log = structlog.get_logger().bind(log_group=log_group)
    results: List[FeedbackRecord] = []
    cursor: str | None = None
    pages = 0

    while True:
        try:
            page = fetch_page(log_group, cursor=cursor, limit=page_size)
        except StoreError:
            log.error("feedback_query_failed", page=pages + 1)
            raise
        except Exception as exc:
            log.error("feedback_query_failed", page=pages + 1, error=str(exc))
            raise StoreError(f"Failed to query feedback for {log_group}") from exc

        pages += 1
        results.extend(page.items)
        if page.next_cursor is None:
            break
        cursor = page.next_cursor

    log.info("feedback_loaded", count=len(results), pages=pages)
    return results
