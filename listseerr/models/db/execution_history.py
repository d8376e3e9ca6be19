"""Execution History Database Model."""

from datetime import UTC, datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import ForeignKey, Index
from sqlalchemy.sql.sqltypes import DateTime, Enum, Integer, String

from listseerr.models.db.base import Base
from listseerr.models.execution import ExecutionStatus
from listseerr.models.media import TriggerType

__all__ = ["ExecutionHistory"]


class ExecutionHistory(Base):
    """Model for the per-list processing audit trail."""

    __tablename__ = "execution_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("media_list.id", onupdate="CASCADE"), index=True
    )
    batch_id: Mapped[str] = mapped_column(String, index=True)
    status: Mapped[ExecutionStatus] = mapped_column(Enum(ExecutionStatus), index=True)
    trigger_type: Mapped[TriggerType] = mapped_column(Enum(TriggerType))
    started_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), index=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    items_found: Mapped[int] = mapped_column(Integer, default=0)
    items_requested: Mapped[int] = mapped_column(Integer, default=0)
    items_failed: Mapped[int] = mapped_column(Integer, default=0)
    items_skipped_available: Mapped[int] = mapped_column(Integer, default=0)
    items_skipped_previously_requested: Mapped[int] = mapped_column(
        Integer, default=0
    )

    error_message: Mapped[str | None] = mapped_column(
        String, default=None, nullable=True
    )

    __table_args__ = (
        Index("ix_execution_history_list_started", "list_id", "started_at"),
    )
