# offloading/core/db.py
from __future__ import annotations
from typing import Generator
from sqlmodel import SQLModel, Session, create_engine
from loguru import logger
from offloading.core.settings import settings

# Import every table model so it is registered on the metadata
from offloading.models.experiment import Experiment  # noqa: F401
from offloading.models.participant import Participant  # noqa: F401
from offloading.models.event import Event  # noqa: F401
from offloading.models.task_result import TaskResult  # noqa: F401
from offloading.models.recall_session import RecallSession  # noqa: F401

# Shared engine for the whole app (singleton)
_engine = None


def get_engine():
    global _engine
    if _engine is None:
        db_url = getattr(settings, "DATABASE_URL", "sqlite:///./offloading.db")

        connect_args = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        _engine = create_engine(
            db_url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    return _engine


def set_engine(engine) -> None:
    """Swap the shared engine (scripts pointing at another database, tests)."""
    global _engine
    _engine = engine


def init_db() -> None:
    """
    Create all tables that do not exist yet. Runs at startup.
    """
    engine = get_engine()
    SQLModel.metadata.create_all(engine)
    logger.info("database ready at {}", engine.url.render_as_string(hide_password=True))


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency, injected with Depends(get_session)
    """
    with Session(get_engine()) as session:
        yield session
