"""Decode Slack interaction payloads into the events the workflow understands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Mapping, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from llm_alert_filter.alerts.messages import LOG_GROUP_BLOCK_ID, MESSAGE_BLOCK_ID, OPEN_FEEDBACK_ACTION_ID
from llm_alert_filter.alerts.modal import (
    FEEDBACK_CALLBACK_ID,
    NEEDS_NOTIFICATION_ACTION_ID,
    NEEDS_NOTIFICATION_BLOCK_ID,
    REASON_ACTION_ID,
    REASON_BLOCK_ID,
)
from llm_alert_filter.errors import DecodeError


class TextObject(BaseModel):
    text: str


class MessageBlock(BaseModel):
    block_id: str | None = None
    text: TextObject | None = None


class InteractionMessage(BaseModel):
    ts: str
    blocks: List[MessageBlock] = Field(default_factory=list)


class BlockAction(BaseModel):
    action_id: str


class BlockActionsPayload(BaseModel):
    type: Literal["block_actions"]
    trigger_id: str | None = None
    actions: List[BlockAction] = Field(default_factory=list)
    message: InteractionMessage | None = None


class ViewState(BaseModel):
    values: Dict[str, Dict[str, Dict[str, Any]]] = Field(default_factory=dict)


class SubmittedView(BaseModel):
    callback_id: str | None = None
    private_metadata: str = ""
    state: ViewState = Field(default_factory=ViewState)


class ViewSubmissionPayload(BaseModel):
    type: Literal["view_submission"]
    view: SubmittedView


InteractionPayload = Annotated[
    Union[BlockActionsPayload, ViewSubmissionPayload],
    Field(discriminator="type"),
]

_PAYLOAD_ADAPTER: TypeAdapter = TypeAdapter(InteractionPayload)


@dataclass(frozen=True)
class OpenFeedbackForm:
    trigger_id: str
    message_timestamp: str
    log_group: str
    message: str


@dataclass(frozen=True)
class OtherBlockAction:
    action_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FeedbackSubmission:
    token: str
    needs_notification: bool
    reason: str | None = None


@dataclass(frozen=True)
class OtherViewSubmission:
    callback_id: str | None = None


InteractionEvent = Union[OpenFeedbackForm, OtherBlockAction, FeedbackSubmission, OtherViewSubmission]


def _block_text(message: InteractionMessage, block_id: str) -> str | None:
    for block in message.blocks:
        if block.block_id == block_id and block.text is not None:
            return block.text.text
    return None


def _to_block_event(payload: BlockActionsPayload) -> InteractionEvent:
    action_ids = tuple(action.action_id for action in payload.actions)
    if OPEN_FEEDBACK_ACTION_ID not in action_ids:
        return OtherBlockAction(action_ids=action_ids)

    if not payload.trigger_id:
        raise DecodeError("Trigger id not found")
    if payload.message is None:
        raise DecodeError("Alert message not found")

    log_group = _block_text(payload.message, LOG_GROUP_BLOCK_ID)
    if log_group is None:
        raise DecodeError("Log group not found")
    message = _block_text(payload.message, MESSAGE_BLOCK_ID)
    if message is None:
        raise DecodeError("Message not found")

    return OpenFeedbackForm(
        trigger_id=payload.trigger_id,
        message_timestamp=payload.message.ts,
        log_group=log_group,
        message=message,
    )


def _parse_bool(raw: Any) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise DecodeError(f"Unexpected needs_notification value: {raw!r}")


def _to_view_event(payload: ViewSubmissionPayload) -> InteractionEvent:
    view = payload.view
    if view.callback_id != FEEDBACK_CALLBACK_ID:
        return OtherViewSubmission(callback_id=view.callback_id)

    values = view.state.values
    selected = (
        values.get(NEEDS_NOTIFICATION_BLOCK_ID, {})
        .get(NEEDS_NOTIFICATION_ACTION_ID, {})
        .get("selected_option")
    )
    if not isinstance(selected, Mapping):
        raise DecodeError("Needs notification not found")
    needs_notification = _parse_bool(selected.get("value"))

    reason = values.get(REASON_BLOCK_ID, {}).get(REASON_ACTION_ID, {}).get("value")
    if reason is not None and not isinstance(reason, str):
        raise DecodeError("Reason is not text")

    return FeedbackSubmission(
        token=view.private_metadata,
        needs_notification=needs_notification,
        reason=reason,
    )


def parse_interaction(form: Mapping[str, str]) -> InteractionEvent:
    """Decode the ``payload`` form field of a Slack interaction request."""

    raw = form.get("payload")
    if not raw:
        raise DecodeError("Payload not found")

    try:
        payload = _PAYLOAD_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise DecodeError("Failed to parse payload") from exc

    if isinstance(payload, BlockActionsPayload):
        return _to_block_event(payload)
    return _to_view_event(payload)
