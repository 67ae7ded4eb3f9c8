"""Engine, session and schema helpers for the feedback store."""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from llm_alert_filter.config import get_settings

Base = declarative_base()


def engine_options(database_url: str) -> Dict[str, Any]:
    """Return ``create_engine`` keyword arguments suited to *database_url*."""

    options: Dict[str, Any] = {"future": True, "echo": False}
    if make_url(database_url).get_backend_name() == "sqlite":
        # The webhook may serve requests from several threads.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
    return options


@lru_cache()
def get_engine(database_url: str | None = None) -> Engine:
    """Create or return the cached engine for *database_url*.

    Without an explicit URL the one from :func:`get_settings` is used, which
    is what the maintenance script relies on.
    """

    database_url = database_url or get_settings().database_url
    return create_engine(database_url, **engine_options(database_url))


@lru_cache()
def get_session_factory(database_url: str | None = None) -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(database_url), autoflush=False, autocommit=False, future=True)


@contextmanager
def session_scope(session_factory: sessionmaker[Session] | None = None) -> Generator[Session, None, None]:
    """Provide a transactional scope; commit on success, roll back on error."""

    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema(engine: Engine | None = None) -> Engine:
    """Create the feedback table (and its log group index) if missing."""

    from llm_alert_filter import models  # noqa: F401  registers the ORM tables

    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    return engine


def drop_schema(engine: Engine | None = None) -> None:
    from llm_alert_filter import models  # noqa: F401

    Base.metadata.drop_all(engine or get_engine())
