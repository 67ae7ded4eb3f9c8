"""Tests for the pending alert state token."""

import base64
import gzip
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm_alert_filter.alerts.state import PendingAlertState, decode_state, encode_state  # noqa: E402
from llm_alert_filter.errors import DecodeError  # noqa: E402


@pytest.mark.parametrize(
    "state",
    [
        PendingAlertState(message_timestamp="123.45", log_group="/svc/a", message="OOM killed"),
        PendingAlertState(message_timestamp="", log_group="", message=""),
        PendingAlertState(
            message_timestamp="1700000000.000100",
            log_group="/aws/lambda/日本語",
            message='Traceback "quoted"\n\tat line 3 — \U0001f525',
        ),
        PendingAlertState(message_timestamp="1.2", log_group="/svc/b", message="x" * 5000),
    ],
)
def test_decode_reverses_encode(state):
    assert decode_state(encode_state(state)) == state


def test_token_is_padded_standard_base64_of_gzip():
    state = PendingAlertState(message_timestamp="123.45", log_group="/svc/a", message="OOM killed")

    token = encode_state(state)
    raw = base64.b64decode(token, validate=True)

    assert raw[:2] == b"\x1f\x8b"
    assert len(token) % 4 == 0
    assert gzip.decompress(raw) == b'{"message_timestamp":"123.45","log_group":"/svc/a","message":"OOM killed"}'


def test_encoding_is_deterministic():
    state = PendingAlertState(message_timestamp="9.9", log_group="/svc/c", message="disk full")

    assert encode_state(state) == encode_state(state)


def _token(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


@pytest.mark.parametrize(
    "token",
    [
        "not base64 at all!",
        "トークン",
        _token(b"plain bytes, not gzip"),
        _token(gzip.compress(b"not json")[:-6]),
        _token(gzip.compress(b"not json")),
        _token(gzip.compress(b'{"log_group":"/svc/a","message":"m"}')),
        _token(gzip.compress(b'{"message_timestamp":1,"log_group":"/svc/a","message":"m"}')),
        _token(gzip.compress(b'{"message_timestamp":"1","log_group":"/a","message":"m","extra":1}')),
        _token(gzip.compress(b"[]")),
    ],
)
def test_malformed_tokens_raise_decode_error(token):
    with pytest.raises(DecodeError):
        decode_state(token)
