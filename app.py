"""Application entry point for the Slack feedback webhook."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from flask import Flask, g, jsonify, request
from sqlalchemy import text
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars
from werkzeug.exceptions import HTTPException

from llm_alert_filter.alerts.service import AlertWorkflow
from llm_alert_filter.config import AppSettings, get_settings
from llm_alert_filter.db import get_session_factory, session_scope
from llm_alert_filter.errors import AuthError, DecodeError
from llm_alert_filter.interactions import dispatch_interaction, parse_interaction
from llm_alert_filter.logging_config import configure_logging
from llm_alert_filter.security import verify_slack_request

INTERACTIONS_ROUTE = "/slack/interactions"


def _register_request_context(flask_app: Flask) -> None:
    @flask_app.before_request
    def bind_trace_id():
        g.trace_id = str(uuid4())
        bind_contextvars(trace_id=g.trace_id)

    @flask_app.teardown_request
    def unbind_trace_id(_exc):
        unbind_contextvars("trace_id")


def _register_error_handlers(flask_app: Flask) -> None:
    """Map workflow errors onto bare status codes."""

    @flask_app.errorhandler(AuthError)
    def handle_auth_error(error: AuthError):
        structlog.get_logger().warning("request_rejected", reason=str(error), path=request.path)
        return "", 401

    @flask_app.errorhandler(DecodeError)
    def handle_decode_error(error: DecodeError):
        structlog.get_logger().warning("bad_request", error=str(error), cause=repr(error.__cause__))
        return "", 400

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        if isinstance(error, HTTPException):
            return error
        structlog.get_logger().error(
            "request_failed",
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
        )
        return "", 500


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app(settings: AppSettings | None = None, workflow: AlertWorkflow | None = None) -> Flask:
    """Create and configure the Flask application."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    workflow = workflow or AlertWorkflow.from_settings(settings)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    _register_request_context(flask_app)
    _register_error_handlers(flask_app)

    @flask_app.route(INTERACTIONS_ROUTE, methods=["POST"])
    def slack_interactions():
        raw_body = request.get_data(cache=True)
        verify_slack_request(
            signing_secret=settings.signing_secret,
            headers=request.headers,
            body=raw_body,
        )

        event = parse_interaction(request.form)
        dispatch_interaction(event, workflow)
        return "", 200

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        # Settings were validated when the app was built.
        health["config"] = "valid"

        try:
            with session_scope(get_session_factory(settings.database_url)) as session:
                session.execute(text("SELECT 1"))
            health["db"] = "up"
        except Exception as exc:
            health["db"] = "down"
            health["db_error"] = str(exc)
            health["ok"] = False

        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=3000, debug=True)
