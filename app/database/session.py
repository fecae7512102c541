"""Database session management"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from app.config import settings
import logging

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite gets thread-sharing and FK enforcement"""
    if database_url.startswith("sqlite"):
        db_engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 15},
            echo=echo
        )

        @event.listens_for(db_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return db_engine

    # Create engine with connection pooling
    return create_engine(
        database_url,
        pool_size=30,
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=echo
    )


def create_session_factory(db_engine: Engine) -> sessionmaker:
    """Session factory; objects stay readable after commit"""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=db_engine
    )


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create session factory
SessionLocal = create_session_factory(engine)


def get_db() -> Session:
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Handle new database connections"""
    logger.debug("New database connection established")
