from sqlalchemy import (
    String, DateTime, Text, UUID, ForeignKey, BigInteger, Float, Boolean, Index
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional, List
import uuid as uuid_pkg

from .database import Base

class User(Base):
    """Represents a DevTimer account. Plugins authenticate with its api_key."""
    __tablename__ = "users"

    id: Mapped[uuid_pkg.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid_pkg.uuid4)
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    api_key: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    activities: Mapped[List["Activity"]] = relationship(
        "Activity", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

class Activity(Base):
    """A single coding-activity event reported by an editor plugin."""
    __tablename__ = "activities"

    id: Mapped[uuid_pkg.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid_pkg.uuid4)
    user_id: Mapped[uuid_pkg.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    project: Mapped[str] = mapped_column(Text, nullable=False)
    file: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    # Epoch milliseconds, as sent by the plugins
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # Seconds
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    branch: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    debug: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    machine: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="activities")

    __table_args__ = (
        Index("activities_user_id_index", "user_id"),
        Index("activities_project_index", "project"),
        Index("activities_language_index", "language"),
        Index("activities_start_time_index", "start_time"),
        Index("activities_end_time_index", "end_time"),
        Index("activities_branch_index", "branch"),
        Index("activities_debug_index", "debug"),
        Index("activities_platform_index", "platform"),
    )
