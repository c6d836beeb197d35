"""Engine and session handling for the participant roster.

The roster is the only shared mutable state in the service. It lives in one
table reached through :mod:`secret_santa.store`; this module only knows how
to open connections to it.

On SQLite every connection gets:
    - ``journal_mode=WAL`` so the admin roster view can be read while a
      registration or a draw is being written.
    - ``foreign_keys=ON`` so ``assigned_to_id`` can never name a deleted
      participant. SQLite leaves this off unless asked, per connection.
"""
import logging

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from secret_santa.core.config import settings

logger = logging.getLogger(__name__)


def _sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine for ``database_url``.

    SQLite URLs are opened with ``check_same_thread=False`` (request
    handlers run in a threadpool) and with the pragmas above. Other
    backends get ``kwargs`` untouched.
    """
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {}).setdefault("check_same_thread", False)

    engine = create_engine(database_url, **kwargs)
    if is_sqlite:
        sa_event.listen(engine, "connect", _sqlite_pragmas)
    return engine


engine = make_engine(settings.database_url, echo=settings.debug)


def create_db_and_tables():
    """Create the participant table if it does not exist yet."""
    logger.info(f"Creating tables on {engine.url.render_as_string(hide_password=True)}")
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency yielding one session per request."""
    with Session(engine) as session:
        yield session
