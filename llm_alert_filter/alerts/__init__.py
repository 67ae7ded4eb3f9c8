"""Alert posting, feedback collection, and the state carried between them."""

from .messages import (
    OPEN_FEEDBACK_ACTION_ID,
    build_alert_closed_message,
    build_alert_message,
)
from .modal import FEEDBACK_CALLBACK_ID, build_feedback_modal
from .service import AlertWorkflow, LineOutcome, NotificationReport
from .state import PendingAlertState, decode_state, encode_state
from .storage import FeedbackPage, list_feedback_by_log_group, query_feedback_page, save_feedback

__all__ = [
    "AlertWorkflow",
    "LineOutcome",
    "NotificationReport",
    "PendingAlertState",
    "encode_state",
    "decode_state",
    "FeedbackPage",
    "save_feedback",
    "query_feedback_page",
    "list_feedback_by_log_group",
    "build_alert_message",
    "build_alert_closed_message",
    "build_feedback_modal",
    "OPEN_FEEDBACK_ACTION_ID",
    "FEEDBACK_CALLBACK_ID",
]
