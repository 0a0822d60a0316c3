"""SQLAlchemy ORM models — the logo timeline.

Learn: One row per confirmed logo change. The insertion timestamp is the
primary key: the database assigns it, it orders the history, and it is the
only lookup key the history API exposes.

clock_timestamp() rather than now(): now() is frozen for a whole
transaction, so two inserts in one transaction would collide on the key.
"""

from datetime import datetime

from sqlalchemy import DateTime, LargeBinary, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class TimelineEntry(Base):
    __tablename__ = "timeline"

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), primary_key=True, server_default=func.clock_timestamp()
    )
    image_png: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
