"""Engine construction, schema bootstrap and the request-scoped session dependency."""
import logging
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from activitycore.config import get_settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def _connect_args(database_url: str) -> dict:
    # SQLite connections are shared across FastAPI's worker threads
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def init_db(engine: Engine) -> None:
    """Create missing tables, then bring older SQLite files up to date."""
    # Register every table on SQLModel.metadata before create_all
    from activitycore.models.activity import Activity, GpsPoint  # noqa
    from activitycore.models.athlete import AthleteProfile  # noqa
    from activitycore.db.migrations import run_migrations

    SQLModel.metadata.create_all(engine)
    run_migrations(engine)


def get_engine() -> Engine:
    """Engine for settings.database_url, built and initialised once per process."""
    global _engine
    if _engine is None:
        url = get_settings().database_url
        _engine = create_engine(url, connect_args=_connect_args(url))
        init_db(_engine)
        logger.info("Database ready at %s", _engine.url)
    return _engine


def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session
