import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from gym_office.core.config import get_database_url

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None

# Seconds a SQLite writer waits for the database lock before failing
SQLITE_LOCK_TIMEOUT_SECONDS = 15


def _use_immediate_transactions(engine) -> None:
    """Make every SQLite transaction take the database write lock up front.

    pysqlite only emits BEGIN before the first INSERT/UPDATE, so the locked
    reads of an approval (client row, approved count) would otherwise run
    outside any transaction. With BEGIN IMMEDIATE a second writer waits until
    the first commits, which gives SQLite the serialization ``FOR UPDATE``
    gives PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str):
    """Create an engine tuned for the backend behind ``database_url``."""
    url = make_url(database_url)

    if url.drivername.startswith("postgres"):
        return create_engine(
            database_url,
            pool_size=20,
            max_overflow=40,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args={
                "application_name": "gym_office",
                "connect_timeout": 10,
            },
            echo=False,
        )

    if url.drivername.startswith("sqlite") and url.database in (None, "", ":memory:"):
        # One shared in-memory connection; concurrent writers are not supported
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if url.drivername.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={
                "check_same_thread": False,
                "timeout": SQLITE_LOCK_TIMEOUT_SECONDS,
            },
        )
        _use_immediate_transactions(engine)
        return engine

    return create_engine(database_url, echo=False)


def get_engine():
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine, _SessionLocal, _database_url

    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = build_engine(database_url)
        _SessionLocal = None
        _database_url = database_url
        logger.info(
            "SQLAlchemy engine created",
            extra={"context": {"dialect": _engine.dialect.name}},
        )
    return _engine


def get_sessionmaker():
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _SessionLocal


def SessionLocal():
    """Return a new Session bound to the configured engine."""
    return get_sessionmaker()()


def create_tables(engine=None):
    """Create all tables in database using the lazy engine."""
    # Ensure models are registered on Base.metadata
    from gym_office.db import base  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
