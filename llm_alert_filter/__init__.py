"""LLM alert filter package initialisation."""

from .config import AppSettings, get_settings  # noqa: F401
from .db import Base, create_schema, get_engine, get_session_factory, session_scope  # noqa: F401
from .logging_config import configure_logging  # noqa: F401
from .models import Feedback, FeedbackRecord  # noqa: F401

__all__ = [
    "AppSettings",
    "get_settings",
    "Base",
    "create_schema",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "Feedback",
    "FeedbackRecord",
    "configure_logging",
]
