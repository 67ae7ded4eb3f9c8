"""Block Kit message builders for log alerts."""

from __future__ import annotations

from typing import Any, Dict, List

OPEN_FEEDBACK_ACTION_ID = "open_feedback_form"
FEEDBACK_BUTTON_BLOCK_ID = "feedback_button"
LOG_GROUP_BLOCK_ID = "log_group"
MESSAGE_BLOCK_ID = "message"

ALERT_TITLE = ":rotating_light: An error has occurred :rotating_light:"
FEEDBACK_RECEIVED_TEXT = "_Feedback received_"


# Text goes out verbatim: opening the feedback form reads the log group and
# message back from these blocks. Slack rejects sections over 3000 characters.
def _base_alert_blocks(log_group: str, message: str) -> List[Dict[str, Any]]:
    return [
        {
            "type": "header",
            "block_id": "header",
            "text": {"type": "plain_text", "text": ALERT_TITLE, "emoji": True},
        },
        {
            "type": "section",
            "block_id": "log_group_header",
            "text": {"type": "mrkdwn", "text": "*CloudWatch Logs log group*"},
        },
        {
            "type": "section",
            "block_id": LOG_GROUP_BLOCK_ID,
            "text": {"type": "plain_text", "text": log_group},
        },
        {
            "type": "section",
            "block_id": "message_header",
            "text": {"type": "mrkdwn", "text": "*Log message*"},
        },
        {
            "type": "section",
            "block_id": MESSAGE_BLOCK_ID,
            "text": {"type": "plain_text", "text": message},
        },
        {"type": "divider", "block_id": "divider"},
    ]


def _fallback_text(log_group: str) -> str:
    return f"An error has occurred in {log_group}"


def build_alert_message(*, log_group: str, message: str) -> Dict[str, Any]:
    """Build the alert posted for a log line, with a button to give feedback."""

    blocks = _base_alert_blocks(log_group, message)
    blocks.append(
        {
            "type": "actions",
            "block_id": FEEDBACK_BUTTON_BLOCK_ID,
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Feedback", "emoji": True},
                    "style": "primary",
                    "value": "send_feedback",
                    "action_id": OPEN_FEEDBACK_ACTION_ID,
                }
            ],
        }
    )
    return {"text": _fallback_text(log_group), "blocks": blocks}


def build_alert_closed_message(*, log_group: str, message: str) -> Dict[str, Any]:
    """Return the alert with its feedback button replaced by a received marker."""

    blocks = _base_alert_blocks(log_group, message)
    blocks.append(
        {
            "type": "section",
            "block_id": "feedback_received",
            "text": {"type": "mrkdwn", "text": FEEDBACK_RECEIVED_TEXT},
        }
    )
    return {"text": f"{_fallback_text(log_group)} (feedback received)", "blocks": blocks}
