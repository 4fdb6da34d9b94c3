"""
FastAPI dependency injection providers.

Routes receive the database engine and the calling identity through these
providers, so tests can override either with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Generator, Optional

from fastapi import Header
from sqlalchemy.engine import Engine

from student_housing.db.engine import engine
from student_housing.domain.actors import Actor


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> from sqlalchemy import create_engine
        >>> test_engine = create_engine("sqlite://")
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_actor(
    x_actor_id: Optional[int] = Header(None, description="Verified user id from the auth gateway"),
    x_actor_role: str = Header("user", description="Role from the auth gateway: user, admin or system"),
) -> Actor:
    """
    Build the calling identity from gateway headers.

    Authentication happens upstream; a missing ``X-Actor-Id`` yields an
    anonymous actor that every owner/renter check will refuse.
    """
    return Actor(user_id=x_actor_id, role=x_actor_role.strip().lower())
