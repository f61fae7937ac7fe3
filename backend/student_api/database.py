"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine and provides small
helpers used by the application and tests. The URL comes from
`DATABASE_URL`, then from the `DB_SERVER`/`DB_PASSWORD` family of
variables (SQL Server), and finally falls back to a local SQLite file
`app.db` next to the package.
"""

import logging
import time
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from .config import settings
from .seed import seed_initial_data

BASE = Path(__file__).resolve().parent.parent
logger = logging.getLogger("student_api.db")


def build_database_url(cfg=settings):
    """Return the database URL for `cfg`."""
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    if cfg.DB_SERVER and cfg.DB_PASSWORD:
        return URL.create(
            "mssql+pyodbc",
            username=cfg.DB_USER or None,
            password=cfg.DB_PASSWORD,
            host=cfg.DB_SERVER,
            database=cfg.DB_NAME or None,
            query={"driver": "ODBC Driver 18 for SQL Server", "TrustServerCertificate": "yes"},
        )
    return f"sqlite:///{BASE / 'app.db'}"


def make_engine(url):
    """Create an engine; SQLite connections get foreign keys switched on."""
    is_sqlite = str(url).startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    eng = create_engine(url, echo=False, connect_args=connect_args)
    if is_sqlite:
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


DB_URL = build_database_url()
engine = make_engine(DB_URL)


def _init_schema(eng):
    SQLModel.metadata.create_all(eng)
    if settings.SEED_DATA:
        with Session(eng) as session:
            seed_initial_data(session)


def create_db_and_tables(eng=None, retry_delay=None):
    """Create database tables using SQLModel metadata and seed demo data.

    A database that is still starting up (e.g. a SQL Server container)
    gets one retry after `retry_delay` seconds. If the retry fails too
    the error is logged and the application keeps running; the
    diagnostics endpoint will then report the database as unavailable.
    Returns True when the schema is ready.
    """
    eng = eng if eng is not None else engine
    delay = settings.DB_INIT_RETRY_SECONDS if retry_delay is None else retry_delay
    try:
        _init_schema(eng)
        return True
    except SQLAlchemyError:
        logger.exception("database initialisation failed, retrying in %.0fs", delay)
    time.sleep(delay)
    try:
        _init_schema(eng)
        logger.info("database initialisation succeeded on retry")
        return True
    except SQLAlchemyError:
        logger.exception("database initialisation failed on retry; continuing without a ready database")
        return False


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
