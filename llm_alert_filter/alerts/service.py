"""Alert workflow: decide and post alerts, then collect operator feedback.

Per alert the flow is ``Posted -> AwaitingFeedback -> Closed``. Opening the
feedback form may happen any number of times; submitting it is terminal and
replaces the alert's button with a received marker. No state is kept between
calls: everything the submission needs rides in the modal's state token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, List, Sequence

import structlog

from llm_alert_filter.config import AppSettings
from llm_alert_filter.db import get_session_factory
from llm_alert_filter.errors import AlertFilterError, NotificationBatchError
from llm_alert_filter.judgment import NotificationJudge, format_rfc3339
from llm_alert_filter.models import FeedbackRecord, utc_now_seconds
from llm_alert_filter.slack_client import SlackClient

from .messages import build_alert_closed_message, build_alert_message
from .modal import build_feedback_modal
from .state import PendingAlertState, decode_state, encode_state
from .storage import DEFAULT_PAGE_SIZE, list_feedback_by_log_group, query_feedback_page, save_feedback


@dataclass(frozen=True)
class LineOutcome:
    message: str
    notified: bool = False
    error: AlertFilterError | None = None


@dataclass
class NotificationReport:
    """Per-line results of processing one log batch."""

    log_group: str
    outcomes: List[LineOutcome] = field(default_factory=list)

    @property
    def notified(self) -> List[str]:
        return [outcome.message for outcome in self.outcomes if outcome.notified]

    @property
    def errors(self) -> List[AlertFilterError]:
        return [outcome.error for outcome in self.outcomes if outcome.error is not None]

    def raise_for_errors(self) -> None:
        """Raise :class:`NotificationBatchError` if any line failed."""

        errors = self.errors
        if errors:
            raise NotificationBatchError(self.log_group, errors)


@dataclass
class AlertWorkflow:
    slack_client: SlackClient
    judge: NotificationJudge
    channel_id: str
    page_size: int = DEFAULT_PAGE_SIZE
    list_feedback: Callable[..., List[FeedbackRecord]] = list_feedback_by_log_group
    store_feedback: Callable[[FeedbackRecord], FeedbackRecord] = save_feedback
    clock: Callable[[], datetime] = utc_now_seconds

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "AlertWorkflow":
        session_factory = get_session_factory(settings.database_url)
        return cls(
            slack_client=SlackClient(token=settings.bot_token, timeout=settings.outbound_timeout),
            judge=NotificationJudge(
                model_id=settings.model_id,
                top_p=settings.top_p,
                temperature=settings.temperature,
                region=settings.aws_region,
                timeout=settings.outbound_timeout,
            ),
            channel_id=settings.channel_id,
            page_size=settings.feedback_page_size,
            list_feedback=partial(
                list_feedback_by_log_group,
                fetch_page=partial(query_feedback_page, session_factory=session_factory),
            ),
            store_feedback=partial(save_feedback, session_factory=session_factory),
        )

    def notify_if_needed(self, log_group: str, messages: Sequence[str]) -> NotificationReport:
        """Decide on and post alerts for each log line, in arrival order.

        A failing line is recorded in the report and processing moves on to
        the next one; the caller decides what to do with the failures.
        """

        report = NotificationReport(log_group=log_group)
        log = structlog.get_logger().bind(log_group=log_group, channel=self.channel_id)

        for index, message in enumerate(messages):
            line_log = log.bind(line=index)
            try:
                notified = self._notify_line(log_group, message)
            except AlertFilterError as exc:
                line_log.error("log_line_failed", error=str(exc), error_type=type(exc).__name__)
                report.outcomes.append(LineOutcome(message=message, error=exc))
                continue

            line_log.info("alert_posted" if notified else "notification_suppressed")
            report.outcomes.append(LineOutcome(message=message, notified=notified))

        return report

    def _notify_line(self, log_group: str, message: str) -> bool:
        # Re-queried per line so feedback recorded mid-batch is taken into account.
        feedback = self.list_feedback(log_group, page_size=self.page_size)
        timestamp = format_rfc3339(self.clock())
        if not self.judge.needs_notification(feedback, message, timestamp):
            return False

        payload = build_alert_message(log_group=log_group, message=message)
        self.slack_client.post_message(
            channel=self.channel_id,
            text=payload["text"],
            blocks=payload["blocks"],
        )
        return True

    def open_feedback_form(
        self,
        *,
        trigger_id: str,
        message_timestamp: str,
        log_group: str,
        message: str,
    ) -> None:
        """Open the feedback modal for the alert posted at *message_timestamp*."""

        token = encode_state(
            PendingAlertState(
                message_timestamp=message_timestamp,
                log_group=log_group,
                message=message,
            )
        )
        self.slack_client.open_view(trigger_id=trigger_id, view=build_feedback_modal(token))
        structlog.get_logger().info(
            "feedback_form_opened",
            log_group=log_group,
            message_ts=message_timestamp,
        )

    def record_feedback(
        self,
        token: str,
        needs_notification: bool,
        reason: str | None = None,
    ) -> FeedbackRecord:
        """Persist the operator's verdict and close the alert it refers to."""

        state = decode_state(token)
        if reason is not None:
            reason = reason.strip() or None

        record = FeedbackRecord.create(
            log_group=state.log_group,
            message=state.message,
            needs_notification=needs_notification,
            reason=reason,
        )
        self.store_feedback(record)

        log = structlog.get_logger().bind(
            feedback_id=record.id,
            log_group=state.log_group,
            message_ts=state.message_timestamp,
        )
        log.info("feedback_recorded", needs_notification=needs_notification)

        payload = build_alert_closed_message(log_group=state.log_group, message=state.message)
        self.slack_client.update_message(
            channel=self.channel_id,
            ts=state.message_timestamp,
            text=payload["text"],
            blocks=payload["blocks"],
        )
        log.info("alert_closed")
        return record
