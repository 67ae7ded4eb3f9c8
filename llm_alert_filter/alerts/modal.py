"""Feedback modal shown when an operator presses the alert's feedback button."""

from __future__ import annotations

from typing import Any, Dict

FEEDBACK_CALLBACK_ID = "send_feedback"
NEEDS_NOTIFICATION_BLOCK_ID = "needs_notification"
NEEDS_NOTIFICATION_ACTION_ID = "needs_notification"
REASON_BLOCK_ID = "reason"
REASON_ACTION_ID = "reason"


def _option(label: str, value: str) -> Dict[str, Any]:
    return {"text": {"type": "plain_text", "text": label}, "value": value}


def build_feedback_modal(private_metadata: str) -> Dict[str, Any]:
    """Build the modal payload, carrying the encoded alert state in ``private_metadata``."""

    not_needed = _option("Not needed", "false")
    needed = _option("Needed", "true")

    return {
        "type": "modal",
        "callback_id": FEEDBACK_CALLBACK_ID,
        "private_metadata": private_metadata,
        "title": {"type": "plain_text", "text": "Feedback"},
        "blocks": [
            {
                "type": "section",
                "block_id": NEEDS_NOTIFICATION_BLOCK_ID,
                "text": {"type": "plain_text", "text": "Does this error need a notification?"},
                "accessory": {
                    "type": "static_select",
                    "action_id": NEEDS_NOTIFICATION_ACTION_ID,
                    "initial_option": not_needed,
                    "options": [not_needed, needed],
                },
            },
            {
                "type": "input",
                "block_id": REASON_BLOCK_ID,
                "label": {"type": "plain_text", "text": "Reason"},
                "element": {
                    "type": "plain_text_input",
                    "action_id": REASON_ACTION_ID,
                    "multiline": True,
                },
                "optional": True,
            },
        ],
        "close": {"type": "plain_text", "text": "Cancel"},
        "submit": {"type": "plain_text", "text": "Submit"},
    }
