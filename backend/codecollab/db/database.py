from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from codecollab.core.config import get_database_url, get_settings


def create_db_engine(url: str) -> Engine:
    """
    Build an engine, with the settings SQLite needs when shared across threads
    """
    echo = get_settings().database_echo
    if url.startswith("sqlite"):
        options = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 20
            },
            "echo": echo
        }
        if ":memory:" in url:
            # One shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
        engine = create_engine(url, **options)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = create_db_engine(get_database_url())

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """
    Create all tables
    """
    # Import models so they are registered on the metadata
    from codecollab import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine = None) -> None:
    """
    Drop all tables (useful for testing)
    """
    from codecollab import models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
