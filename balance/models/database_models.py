"""SQLAlchemy ORM models for analysis history and the local user."""
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from balance.database import Base


class FocusAnalysisRecord(Base):
    """One persisted focus analysis.

    ``seq`` is the insertion order used for eviction; ``timestamp`` is stored
    as epoch seconds. Payload columns are nullable so that rows written by
    older schema versions can still be loaded (and skipped if unreadable).
    """

    __tablename__ = "focus_analyses"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    focus_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    recommendations: Mapped[list | None] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)


class UserRecord(Base):
    """The installation's user; at most one row is current."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_test_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
