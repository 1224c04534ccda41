"""
Declarative mixins shared by all ledger and snapshot tables.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_mixin


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the timezone-less DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@declarative_mixin
class TimestampMixin:
    # Snapshot rows are never updated, so their updated_at stays NULL
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow)


@declarative_mixin
class IdMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"
