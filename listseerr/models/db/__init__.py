"""Models for ListSeerr database tables."""

from listseerr.models.db.base import Base
from listseerr.models.db.execution_history import ExecutionHistory
from listseerr.models.db.media_list import MediaList
from listseerr.models.db.request_cache import RequestCache

__all__ = ["Base", "ExecutionHistory", "MediaList", "RequestCache"]
