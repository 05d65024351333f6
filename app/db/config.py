"""Database configuration for the Gemini chat backend."""
from typing import Generator
from sqlmodel import create_engine, Session
import logging
import os
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

load_dotenv()

logger = logging.getLogger(__name__)

# Use the DATABASE_URL from environment variable, with fallback to SQLite for local dev
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./gemini_chat.db")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str = DATABASE_URL):
    """Create a SQLModel engine for the given URL."""
    if not _is_sqlite(url):
        logger.info("[DB CONFIG] Using server database")
        return create_engine(url, echo=False, pool_pre_ping=True)

    logger.info(f"[DB CONFIG] Using SQLite database: {url}")
    connect_args = {"check_same_thread": False}
    if _is_in_memory(url):
        # One shared connection, otherwise every session sees an empty database
        sqlite_engine = create_engine(
            url, echo=False, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        sqlite_engine = create_engine(url, echo=False, connect_args=connect_args)

    @event.listens_for(sqlite_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine()


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
