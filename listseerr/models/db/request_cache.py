"""Request Cache Database Model."""

from datetime import UTC, datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import ForeignKey
from sqlalchemy.sql.sqltypes import DateTime, Enum, Integer, String

from listseerr.models.db.base import Base
from listseerr.models.media import MediaType

__all__ = ["RequestCache"]


class RequestCache(Base):
    """Model for items that have already been requested from Jellyseerr.

    Entries are written once; the list that first requested an item keeps the
    credit even when other lists contain it later.
    """

    __tablename__ = "request_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    external_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    first_list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("media_list.id", onupdate="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    media_type: Mapped[MediaType] = mapped_column(Enum(MediaType))
    cached_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
