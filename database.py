import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from config import DATABASE_URL

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# NullPool: serverless invocations and forked workers never share a pooled
# connection.
engine = create_engine(
    DATABASE_URL,
    poolclass=NullPool,
    pool_pre_ping=True,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def connect_db() -> bool:
    """Create missing tables and check the database answers.

    Returns False (after logging) when the database is unreachable so that
    the app can still serve health checks.
    """
    import models  # noqa: F401  registers every table on Base.metadata

    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("Database connection failed: %s", exc)
        return False
    logger.info("Database connected: %s", engine.url.render_as_string(hide_password=True))
    return True
