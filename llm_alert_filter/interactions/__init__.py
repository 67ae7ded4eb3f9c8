"""Utilities for handling Slack interaction payloads."""

from __future__ import annotations

import structlog

from llm_alert_filter.alerts.service import AlertWorkflow

from .payloads import (
    FeedbackSubmission,
    InteractionEvent,
    OpenFeedbackForm,
    OtherBlockAction,
    OtherViewSubmission,
    parse_interaction,
)


def dispatch_interaction(event: InteractionEvent, workflow: AlertWorkflow) -> None:
    """Hand a decoded interaction to the workflow. Unknown kinds are acknowledged and ignored."""

    log = structlog.get_logger()

    if isinstance(event, OpenFeedbackForm):
        log.info("interaction_received", kind="open_feedback_form", message_ts=event.message_timestamp)
        workflow.open_feedback_form(
            trigger_id=event.trigger_id,
            message_timestamp=event.message_timestamp,
            log_group=event.log_group,
            message=event.message,
        )
    elif isinstance(event, FeedbackSubmission):
        log.info("interaction_received", kind="feedback_submission")
        workflow.record_feedback(event.token, event.needs_notification, event.reason)
    elif isinstance(event, OtherBlockAction):
        log.info("interaction_ignored", kind="block_actions", action_ids=list(event.action_ids))
    elif isinstance(event, OtherViewSubmission):
        log.info("interaction_ignored", kind="view_submission", callback_id=event.callback_id)
    else:  # pragma: no cover - guarded by the payload union
        raise TypeError(f"Unsupported interaction event: {event!r}")


__all__ = [
    "FeedbackSubmission",
    "InteractionEvent",
    "OpenFeedbackForm",
    "OtherBlockAction",
    "OtherViewSubmission",
    "dispatch_interaction",
    "parse_interaction",
]
