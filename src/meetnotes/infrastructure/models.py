"""SQLAlchemy ORM models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from meetnotes.domain.summary import SummaryStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
RecipientList = JSON().with_variant(JSONB(), "postgresql")


class SummaryModel(Base):
    """SQLAlchemy model for summaries table.

    Status:
        - 'pending': Row created, model call in flight
        - 'completed': ai_summary and token counts are set
        - 'failed': Model call failed, ai_summary stays empty
    """

    __tablename__ = "summaries"
    __table_args__ = (
        Index("ix_summaries_created_at", "created_at"),
        Index("ix_summaries_user_id", "user_id"),
        Index("ix_summaries_status", "status"),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')", name="ck_summaries_status"
        ),
        CheckConstraint(
            "(tokens_in IS NULL OR tokens_in >= 0) AND (tokens_out IS NULL OR tokens_out >= 0)",
            name="ck_summaries_tokens_non_negative",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    ai_summary: Mapped[str] = mapped_column(Text, default="", nullable=False)
    edited_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    tokens_in: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tokens_out: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=SummaryStatus.PENDING.value, nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )

    shares: Mapped[list["ShareModel"]] = relationship(
        "ShareModel",
        back_populates="summary",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ShareModel.created_at.desc()",
    )


class ShareModel(Base):
    """SQLAlchemy model for shares table.

    One row per email distribution. Rows are written once and never updated.
    """

    __tablename__ = "shares"
    __table_args__ = (Index("ix_shares_summary_id", "summary_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    summary_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("summaries.id", ondelete="CASCADE"), nullable=False
    )
    recipients: Mapped[list[str]] = mapped_column(RecipientList, nullable=False)
    subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    body_html: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    summary: Mapped["SummaryModel"] = relationship("SummaryModel", back_populates="shares")
