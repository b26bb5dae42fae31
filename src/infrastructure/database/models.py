"""SQLAlchemy ORM models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """Published profile model.

    ``links`` holds the serialized JSON list as text, exactly as it was
    staged on the pending row.
    """

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    catchphrase: Mapped[str] = mapped_column(Text, nullable=False)
    links: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class PendingProfileModel(Base):
    """Signup staged under a payment intent id until payment succeeds."""

    __tablename__ = "pending_profiles"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    clean_username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    catchphrase: Mapped[str] = mapped_column(Text, nullable=False)
    links: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
