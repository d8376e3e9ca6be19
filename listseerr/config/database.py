"""Database Configuration for ListSeerr."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import TracebackType

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from listseerr.config.settings import get_config
from listseerr.exceptions import DataPathError

__all__ = ["ListSeerrDB", "db"]

ALEMBIC_DIR = Path(__file__).resolve().parent.parent.parent / "alembic"


class ListSeerrDB:
    """Database manager for the ListSeerr application.

    Creates the SQLite database inside the data directory and runs pending Alembic
    migrations on initialization. Used as a context manager, it opens a session
    on enter and closes it on exit.
    """

    def __init__(self, data_path: Path) -> None:
        """Initializes the database manager.

        Args:
            data_path (Path): Directory where the database should be stored

        Raises:
            DataPathError: If data_path exists but is a file instead of a directory
        """
        self.data_path = data_path
        self.db_path = data_path / "listseerr.db"

        self.engine = self._setup_db()
        self._SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )
        self._session: Session | None = None
        self._do_migrations()

    def _setup_db(self) -> Engine:
        """Creates the data directory and the SQLAlchemy engine.

        Returns:
            Engine: Configured SQLAlchemy engine instance
        """
        import listseerr.models  # noqa: F401

        if self.data_path.is_file():
            raise DataPathError(
                f"The path '{self.data_path}' is a file, please delete it first or "
                "choose a different data folder path"
            )
        self.data_path.mkdir(parents=True, exist_ok=True)

        engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
            future=True,
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cur = dbapi_connection.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
                cur.execute("PRAGMA foreign_keys=ON;")
            finally:
                cur.close()

        return engine

    def _do_migrations(self) -> None:
        """Upgrade the database schema to the latest Alembic revision."""
        from alembic import command
        from alembic.config import Config

        cfg = Config()
        cfg.set_main_option("script_location", str(ALEMBIC_DIR))
        cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")

        command.upgrade(cfg, "head")

    def __enter__(self) -> ListSeerrDB:
        """Enters the context manager, returning the database instance."""
        self._session = self._SessionLocal()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the session opened for this context, if any."""
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def session(self) -> Session:
        """Return the current SQLAlchemy session, creating it if needed."""
        if self._session is None:
            self._session = self._SessionLocal()
        return self._session


@lru_cache(maxsize=1)
def db() -> ListSeerrDB:
    """Get the application database, creating and migrating it on first use."""
    return ListSeerrDB(get_config().data_path)
