"""Media List Database Model."""

from datetime import UTC, datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint
from sqlalchemy.sql.sqltypes import Boolean, DateTime, Enum, Integer, String

from listseerr.models.db.base import Base
from listseerr.models.media import Provider

__all__ = ["MediaList"]


class MediaList(Base):
    """Model for the lists declared in each profile's configuration.

    Rows are mirrored from the configuration file. A list that disappears from
    the configuration is archived instead of deleted so its execution history
    is kept.
    """

    __tablename__ = "media_list"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String)
    url: Mapped[str] = mapped_column(String)
    provider: Mapped[Provider] = mapped_column(Enum(Provider), index=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    max_items: Mapped[int] = mapped_column(Integer, default=50)
    schedule: Mapped[str | None] = mapped_column(String, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_media_list_name"),)
