"""Initialize database tables."""
import logging

from sqlalchemy import text
from sqlmodel import SQLModel

from app.models.user import User  # noqa: F401
from app.models.conversation import Conversation  # noqa: F401
from app.db.config import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """
    Create all tables and check that the database answers.

    Raises whatever the driver raises when the database cannot be reached;
    the caller treats that as fatal.
    """
    bind = bind if bind is not None else engine
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(bind)
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
