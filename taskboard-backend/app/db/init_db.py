"""
Database initialization helpers.

We only wire up the metadata here. Models are imported so their tables get
registered on Base.metadata.
"""

from sqlalchemy.engine import Engine

from app.db.session import engine as default_engine
from app.models.base import Base

from app.models import revoked_token, task, team, user  # noqa: F401


def init_db(bind: Engine | None = None) -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=bind or default_engine)
