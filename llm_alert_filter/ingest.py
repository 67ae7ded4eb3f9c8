"""Entry point for CloudWatch Logs subscription events."""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import zlib
from typing import Any, List, Mapping
from uuid import uuid4

from pydantic import BaseModel, Field
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from llm_alert_filter.alerts.service import AlertWorkflow, NotificationReport
from llm_alert_filter.config import AppSettings, get_settings
from llm_alert_filter.errors import DecodeError
from llm_alert_filter.logging_config import configure_logging


class LogEvent(BaseModel):
    id: str | None = None
    timestamp: int | None = None
    message: str


class LogsData(BaseModel):
    log_group: str = Field(..., alias="logGroup")
    log_events: List[LogEvent] = Field(default_factory=list, alias="logEvents")


class LogBatch(BaseModel):
    """Log lines from one log group, in arrival order."""

    log_group: str
    messages: List[str] = Field(default_factory=list)


def decode_log_batch(event: Mapping[str, Any]) -> LogBatch:
    """Decode the base64+gzip ``awslogs.data`` envelope into a :class:`LogBatch`."""

    try:
        data = event["awslogs"]["data"]
        compressed = base64.b64decode(data, validate=True)
        payload = json.loads(gzip.decompress(compressed))
        logs = LogsData.model_validate(payload)
    except (KeyError, TypeError, binascii.Error, OSError, EOFError, zlib.error, ValueError) as exc:
        # ValueError covers both JSONDecodeError and pydantic's ValidationError.
        raise DecodeError("Malformed CloudWatch Logs event") from exc

    return LogBatch(
        log_group=logs.log_group,
        messages=[log_event.message for log_event in logs.log_events],
    )


def process_log_batch(batch: LogBatch, workflow: AlertWorkflow) -> NotificationReport:
    log = structlog.get_logger().bind(log_group=batch.log_group, line_count=len(batch.messages))
    if not batch.messages:
        log.info("log_batch_empty")
        return NotificationReport(log_group=batch.log_group)

    report = workflow.notify_if_needed(batch.log_group, batch.messages)
    log.info(
        "log_batch_processed",
        notified=len(report.notified),
        failed=len(report.errors),
    )
    return report


def handle_log_event(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    settings: AppSettings | None = None,
    workflow: AlertWorkflow | None = None,
) -> dict[str, int]:
    """Lambda-style handler: decide on every line of the batch, then surface failures."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    trace_id = getattr(context, "aws_request_id", None) or str(uuid4())
    bind_contextvars(trace_id=trace_id)
    try:
        batch = decode_log_batch(event)
        workflow = workflow or AlertWorkflow.from_settings(settings)
        report = process_log_batch(batch, workflow)
        report.raise_for_errors()
        return {"processed": len(report.outcomes), "notified": len(report.notified)}
    finally:
        unbind_contextvars("trace_id")
