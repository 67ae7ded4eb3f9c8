"""Unit tests for the Slack WebClient wrapper."""

from pathlib import Path
import sys
from urllib.error import URLError

import pytest
from slack_sdk.errors import SlackApiError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm_alert_filter.errors import RemoteApiError  # noqa: E402
from llm_alert_filter.slack_client import SlackClient  # noqa: E402


class DummyResponse(dict):
    """Minimal Slack response stub for error handling tests."""

    def __init__(self, error: str = "invalid_arguments", status_code: int = 400) -> None:
        super().__init__({"ok": False, "error": error})
        self.status_code = status_code

    @property
    def data(self) -> dict[str, str]:
        return dict(self)


class DummyWebClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.calls = []
        self.response = response
        self.error = error

    def _respond(self, name, kwargs):
        self.calls.append((name, kwargs))
        if self.error is not None:
            raise self.error
        return self.response or {"ok": True, "message": kwargs}

    def chat_postMessage(self, **kwargs):
        return self._respond("post", kwargs)

    def chat_update(self, **kwargs):
        return self._respond("update", kwargs)

    def views_open(self, **kwargs):
        return self._respond("views_open", kwargs)


def test_requires_token_or_client():
    with pytest.raises(ValueError):
        SlackClient()


def test_post_message_uses_underlying_client():
    dummy = DummyWebClient()
    client = SlackClient(client=dummy)

    response = client.post_message(channel="C123", text="hello", blocks=[{"type": "section"}])

    assert dummy.calls == [
        ("post", {"channel": "C123", "text": "hello", "blocks": [{"type": "section"}]}),
    ]
    assert response["ok"] is True
    assert client.client is dummy


def test_update_message_uses_underlying_client():
    dummy = DummyWebClient()
    client = SlackClient(client=dummy)

    client.update_message(
        channel="C123",
        ts="123.456",
        text="updated",
        blocks=[{"type": "section", "text": {"type": "mrkdwn", "text": "Hi"}}],
    )

    assert dummy.calls[-1] == (
        "update",
        {
            "channel": "C123",
            "ts": "123.456",
            "text": "updated",
            "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": "Hi"}}],
        },
    )


def test_open_view_uses_underlying_client():
    dummy = DummyWebClient()
    client = SlackClient(client=dummy)

    client.open_view(trigger_id="trigger-1", view={"type": "modal"})

    assert dummy.calls == [("views_open", {"trigger_id": "trigger-1", "view": {"type": "modal"}})]


def test_not_ok_response_raises_remote_api_error():
    dummy = DummyWebClient(response={"ok": False, "error": "message_not_found"})
    client = SlackClient(client=dummy)

    with pytest.raises(RemoteApiError) as err:
        client.update_message(channel="C123", ts="1.0", text="x", blocks=[])

    assert err.value.operation == "chat.update"
    assert err.value.error == "message_not_found"


def test_slack_api_error_is_translated():
    dummy = DummyWebClient(error=SlackApiError("expired", DummyResponse("expired_trigger_id")))
    client = SlackClient(client=dummy)

    with pytest.raises(RemoteApiError) as err:
        client.open_view(trigger_id="trigger-1", view={})

    assert err.value.error == "expired_trigger_id"
    assert "expired_trigger_id" in str(err.value)
    assert isinstance(err.value.__cause__, SlackApiError)


@pytest.mark.parametrize(
    "error",
    [URLError("timed out"), TimeoutError("read timed out"), ConnectionResetError("reset by peer")],
)
def test_transport_errors_are_translated(error):
    dummy = DummyWebClient(error=error)
    client = SlackClient(client=dummy)

    with pytest.raises(RemoteApiError) as err:
        client.post_message(channel="C123", text="hello", blocks=[])

    assert err.value.operation == "chat.postMessage"
    assert err.value.__cause__ is error
