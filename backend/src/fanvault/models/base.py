"""Base SQLAlchemy declarative base for all models"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable across SQLite and PostgreSQL columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


Base = declarative_base()
