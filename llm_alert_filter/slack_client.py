"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
import structlog

from .errors import RemoteApiError


class SlackClient:
    """Encapsulate Slack WebClient interactions and normalise their failures."""

    def __init__(
        self,
        *,
        token: str | None = None,
        client: WebClient | None = None,
        timeout: int = 10,
    ) -> None:
        if client is None and token is None:
            raise ValueError("Either an instantiated client or a bot token must be provided.")

        self._client = client or WebClient(token=token, timeout=timeout)

    @property
    def client(self) -> WebClient:
        """Expose the underlying WebClient for advanced use cases."""

        return self._client

    def _call(self, operation: str, func: Callable[..., Any], **kwargs: Any) -> Mapping[str, Any]:
        log = structlog.get_logger().bind(operation=operation)
        try:
            response = func(**kwargs)
        except SlackApiError as exc:
            status_code = getattr(exc.response, "status_code", None) if getattr(exc, "response", None) else None
            error_code = exc.response.get("error") if getattr(exc, "response", None) else str(exc)
            log.error("slack_call_failed", error=error_code, status_code=status_code)
            raise RemoteApiError(operation, error_code) from exc
        except OSError as exc:
            # URLError, timeouts and connection resets from the HTTP transport.
            log.error("slack_call_failed", error=str(exc), error_type=type(exc).__name__)
            raise RemoteApiError(operation, str(exc)) from exc

        if not response.get("ok", False):
            error_code = response.get("error")
            log.error("slack_call_failed", error=error_code)
            raise RemoteApiError(operation, error_code)
        return response

    def post_message(
        self,
        *,
        channel: str,
        text: str,
        blocks: Sequence[Mapping[str, Any]],
    ) -> Mapping[str, Any]:
        """Post a message with Block Kit content to a Slack channel."""

        return self._call(
            "chat.postMessage",
            self._client.chat_postMessage,
            channel=channel,
            text=text,
            blocks=list(blocks),
        )

    def update_message(
        self,
        *,
        channel: str,
        ts: str,
        text: str,
        blocks: Sequence[Mapping[str, Any]],
    ) -> Mapping[str, Any]:
        """Update an existing Slack message."""

        return self._call(
            "chat.update",
            self._client.chat_update,
            channel=channel,
            ts=ts,
            text=text,
            blocks=list(blocks),
        )

    def open_view(self, *, trigger_id: str, view: Mapping[str, Any]) -> Mapping[str, Any]:
        """Open a modal view in response to an interaction."""

        return self._call("views.open", self._client.views_open, trigger_id=trigger_id, view=dict(view))
