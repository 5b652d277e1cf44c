"""Database session management with connection pooling"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ecollect_gateway.config import settings

# Small pool: the gateway only reads two tables and appends notes
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=5,
    max_overflow=5,
    pool_recycle=1800,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session_factory() -> sessionmaker:
    """
    Dependency injection for the session factory.

    Record stores open one session per query in a worker thread, so they
    take the factory rather than a request-scoped session.
    """
    return SessionLocal
