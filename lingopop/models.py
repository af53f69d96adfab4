"""SQLAlchemy ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from lingopop.database import Base


def _utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(timezone.utc)


class StoredValue(Base):
    """A single key in the durable local key-value store."""

    __tablename__ = "local_storage"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(default=_utc_now, onupdate=_utc_now)
