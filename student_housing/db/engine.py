"""
SQLAlchemy engine singleton with production-ready connection pooling.

This module creates a single engine instance with connection pooling configured
for concurrent API requests. Route handlers receive it through
``student_housing.dependencies.get_db_engine`` so tests can substitute their own.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from student_housing.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_size=10,  # Number of connections to maintain in the pool
    max_overflow=20,  # Additional connections when pool is exhausted
    pool_pre_ping=True,  # Verify connections before using (detect stale connections)
    pool_recycle=3600,  # Recycle connections after 1 hour
    echo=False,
)


def check_engine_health(db_engine: Engine | None = None) -> bool:
    """
    Check if the database is reachable.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Args:
        db_engine: Engine to probe (defaults to the module singleton)

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with (db_engine or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
