import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from petstore.core.config import get_database_url
from petstore.core.db import register_query_timing

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None

# Seconds a SQLite writer waits for the database lock before giving up
SQLITE_BUSY_TIMEOUT = 30


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless each connection opts in."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> Engine:
    """Engine with per-dialect pool and lock-wait settings."""
    url = make_url(database_url)

    if url.drivername.startswith("postgres"):
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Detects and refreshes stale connections
            pool_recycle=3600,
            pool_timeout=10,
            connect_args={
                "application_name": "petstore",  # Visible in pg_stat_activity
                "connect_timeout": 10,
            },
            echo=False,
        )

    if url.drivername.startswith("sqlite"):
        if url.database in (None, "", ":memory:"):
            # One shared in-memory database across the process so DDL
            # persists across connections.
            engine = create_engine(
                database_url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                database_url,
                echo=False,
                connect_args={
                    "check_same_thread": False,
                    "timeout": SQLITE_BUSY_TIMEOUT,
                },
            )
        _enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(database_url, echo=False)


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine, _SessionLocal, _database_url

    database_url = get_database_url()
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = build_engine(database_url)
        register_query_timing(_engine)
        _database_url = database_url
        _SessionLocal = None
        logger.info(
            "SQLAlchemy engine created",
            extra={"context": {"dialect": _engine.dialect.name}},
        )
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )
    return _SessionLocal


def SessionLocal() -> Session:
    """Calling SessionLocal() returns a new Session bound to the current engine."""
    return get_sessionmaker()()


def get_db():
    """Yield a session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all tables in the database using the lazy engine."""
    # Models must be imported so Base.metadata is populated
    from petstore.db import base  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def dispose_engine() -> None:
    """Drop the cached engine (used by tests switching databases)."""
    global _engine, _SessionLocal, _database_url
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    _database_url = None
