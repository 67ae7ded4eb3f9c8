"""Ask a Bedrock model whether a log line warrants a notification.

The model sees every piece of operator feedback recorded for the log group
alongside the new log line and answers through a single tool whose input is
``{"needs_notification": <bool>}``. The policy rules live in
:data:`SYSTEM_PROMPT`; this module never second-guesses the returned verdict.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Iterable, Mapping, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel
import structlog

from .errors import DecisionError
from .models import FeedbackRecord

TOOL_NAME = "judge_needs_notification"
VERDICT_FIELD = "needs_notification"

SYSTEM_PROMPT = """
<role>
You are a log monitor.
</role>
<question>
Refer to the list of past notification feedback (`feedback`) to determine whether a notification is required for the currently occurring error log (`target_log`).
</question>
<data_info>
- feedback: A list of feedback regarding notifications from the operator
  - created_at: The date and time when the feedback was added
  - message: The content of the error log that received feedback
  - needs_notification: Whether a notification is required (`true` means required, `false` means not required)
  - reason: Reasons for necessity or non-necessity (optional)
- target_log: The error log subject to the decision
  - message: The content of the log
  - timestamp: The date and time when the log was generated
</data_info>
<rule>
- Think step-by-step.
- Make a decision only if sufficient inference can be drawn from the feedback content; if not, always return `true`.
- Treat feedback as similar if the `message` in both `feedback` and `target_log` matches 80% or more.
- If the referenced `feedback` for inference contains a `reason`, take its content into account.
- If similar feedback contradict each other, prioritize the feedback with the most recent `created_at` timestamp.
</rule>
"""

TOOL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        VERDICT_FIELD: {
            "type": "boolean",
            "description": "If notification is necessary, set to true, otherwise set to false.",
        },
    },
    "required": [VERDICT_FIELD],
}


class FeedbackDto(BaseModel):
    created_at: str
    message: str
    needs_notification: bool
    reason: str | None = None

    @classmethod
    def from_record(cls, record: FeedbackRecord) -> "FeedbackDto":
        return cls(
            created_at=format_rfc3339(record.created_at),
            message=record.message,
            needs_notification=record.needs_notification,
            reason=record.reason,
        )


class TargetLog(BaseModel):
    message: str
    timestamp: str


def format_rfc3339(value: datetime) -> str:
    """Render a UTC datetime as RFC3339 with second precision and a ``Z`` suffix."""

    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_user_content(feedback: Iterable[FeedbackRecord], message: str, timestamp: str) -> str:
    """Embed the feedback history and the candidate log line as JSON."""

    items = [FeedbackDto.from_record(record).model_dump() for record in feedback]
    feedback_json = json.dumps(items, ensure_ascii=False, separators=(",", ":"))
    target_json = TargetLog(message=message, timestamp=timestamp).model_dump_json()
    return f"<feedback>{feedback_json}</feedback><target_log>{target_json}</target_log>"


def extract_needs_notification(response: Mapping[str, Any]) -> bool:
    """Return the verdict carried by the last ``toolUse`` entry of a Converse response."""

    message = (response.get("output") or {}).get("message")
    if not isinstance(message, Mapping):
        raise DecisionError("Output is not a message")

    verdict: bool | None = None
    for content in message.get("content") or []:
        tool_use = content.get("toolUse") if isinstance(content, Mapping) else None
        if tool_use is None:
            continue

        tool_input = tool_use.get("input")
        if not isinstance(tool_input, Mapping):
            raise DecisionError("Tool input is not an object")
        if VERDICT_FIELD not in tool_input:
            raise DecisionError(f"{VERDICT_FIELD} not found in tool input")
        value = tool_input[VERDICT_FIELD]
        if not isinstance(value, bool):
            raise DecisionError(f"{VERDICT_FIELD} is not a boolean")
        verdict = value

    if verdict is None:
        raise DecisionError("No toolUse entry found in model output")
    return verdict


class NotificationJudge:
    """Bedrock Converse client specialised for the notify/suppress decision."""

    def __init__(
        self,
        *,
        model_id: str,
        top_p: float,
        temperature: float,
        client=None,
        region: str | None = None,
        timeout: int = 10,
    ) -> None:
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=region,
            config=Config(read_timeout=timeout, connect_timeout=timeout),
        )
        self.model_id = model_id
        self.top_p = top_p
        self.temperature = temperature

    def build_request(self, feedback: Sequence[FeedbackRecord], message: str, timestamp: str) -> dict[str, Any]:
        return {
            "modelId": self.model_id,
            "system": [{"text": SYSTEM_PROMPT}],
            "messages": [
                {
                    "role": "user",
                    "content": [{"text": build_user_content(feedback, message, timestamp)}],
                }
            ],
            "inferenceConfig": {"topP": self.top_p, "temperature": self.temperature},
            "toolConfig": {
                "tools": [
                    {
                        "toolSpec": {
                            "name": TOOL_NAME,
                            "description": "Determines if notification is required.",
                            "inputSchema": {"json": TOOL_INPUT_SCHEMA},
                        }
                    }
                ]
            },
        }

    def needs_notification(self, feedback: Sequence[FeedbackRecord], message: str, timestamp: str) -> bool:
        """Return ``True`` when the model decides the log line should be alerted."""

        log = structlog.get_logger().bind(model_id=self.model_id, feedback_count=len(feedback))
        request = self.build_request(feedback, message, timestamp)
        try:
            response = self._client.converse(**request)
        except (BotoCoreError, ClientError) as exc:
            log.error("judgment_call_failed", error=str(exc))
            raise DecisionError("Judgment call failed") from exc

        verdict = extract_needs_notification(response)
        log.info("judgment_completed", needs_notification=verdict, stop_reason=response.get("stopReason"))
        return verdict
