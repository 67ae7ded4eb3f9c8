"""Tests for alert message and feedback modal builders."""

import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm_alert_filter.alerts.messages import (  # noqa: E402
    FEEDBACK_RECEIVED_TEXT,
    OPEN_FEEDBACK_ACTION_ID,
    build_alert_closed_message,
    build_alert_message,
)
from llm_alert_filter.alerts.modal import FEEDBACK_CALLBACK_ID, build_feedback_modal  # noqa: E402
from llm_alert_filter.interactions import parse_interaction  # noqa: E402


def test_alert_message_layout():
    payload = build_alert_message(log_group="/svc/a", message="OOM killed")

    blocks = payload["blocks"]
    assert [block["type"] for block in blocks] == [
        "header",
        "section",
        "section",
        "section",
        "section",
        "divider",
        "actions",
    ]
    by_id = {block["block_id"]: block for block in blocks}
    assert by_id["log_group"]["text"]["text"] == "/svc/a"
    assert by_id["message"]["text"]["text"] == "OOM killed"
    button = by_id["feedback_button"]["elements"][0]
    assert button["action_id"] == OPEN_FEEDBACK_ACTION_ID
    assert "/svc/a" in payload["text"]


def test_closed_message_replaces_button_with_marker():
    payload = build_alert_closed_message(log_group="/svc/a", message="OOM killed")

    blocks = payload["blocks"]
    assert all(block["type"] != "actions" for block in blocks)
    assert blocks[:-1] == build_alert_message(log_group="/svc/a", message="OOM killed")["blocks"][:-1]
    assert blocks[-1]["text"]["text"] == FEEDBACK_RECEIVED_TEXT


def test_long_log_line_survives_alert_and_feedback_form_intact():
    message = "Traceback (most recent call last):\n" + "frame " * 600
    assert len(message) > 3000
    payload = build_alert_message(log_group="/svc/a", message=message)
    interaction = {
        "type": "block_actions",
        "trigger_id": "trigger-1",
        "actions": [{"action_id": OPEN_FEEDBACK_ACTION_ID}],
        "message": {"ts": "1700000000.000100", "blocks": payload["blocks"]},
    }

    event = parse_interaction({"payload": json.dumps(interaction)})

    assert event.message == message
    assert event.log_group == "/svc/a"


def test_feedback_modal_carries_token_and_inputs():
    view = build_feedback_modal("H4sIAAAAAAAA/token==")

    assert view["type"] == "modal"
    assert view["callback_id"] == FEEDBACK_CALLBACK_ID
    assert view["private_metadata"] == "H4sIAAAAAAAA/token=="
    select = view["blocks"][0]["accessory"]
    assert select["action_id"] == "needs_notification"
    assert [option["value"] for option in select["options"]] == ["false", "true"]
    assert select["initial_option"]["value"] == "false"
    reason = view["blocks"][1]
    assert reason["block_id"] == "reason"
    assert reason["optional"] is True
