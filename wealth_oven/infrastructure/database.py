"""
Database Connection
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wealth_oven.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(database_url: str):
    """Create engine; SQLite (tests, local dev) gets a single shared connection"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DB_ECHO,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        echo=settings.DB_ECHO,
    )


engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Initialize database tables"""
    from wealth_oven.models import Base
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def drop_db():
    """Drop all tables (tests only)"""
    from wealth_oven.models import Base
    Base.metadata.drop_all(bind=engine)


def get_db():
    """Get database session (dependency)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
