"""Process-wide database wiring and the SQLAlchemy catalog unit of work.

``startup()`` binds one engine per process, maps the domain classes and migrates the schema
to head. Every ``SqlAlchemyCatalogUnitOfWork`` opened afterwards draws a fresh session from
that engine, so units of work may be created freely from worker threads.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from meeplesync.adapters.sqlalchemy.mappings import start_mappers
from meeplesync.adapters.sqlalchemy.migrations import upgrade_head
from meeplesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogEntryRepository,
    SqlAlchemyImportQueueRepository,
    SqlAlchemyRelationRepository,
    SqlAlchemySyncCursorRepository,
)
from meeplesync.config.storage import get_database_config
from meeplesync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """The database layer is used before ``startup()`` or configured twice."""


class _Database:
    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def release(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def open_session(self) -> Session:
        if self.sessions is None:
            raise StartupError(
                "Database not started; call meeplesync.adapters.sqlalchemy.unit_of_work."
                "startup() first"
            )
        return self.sessions()


_database = _Database()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the process to a database and bring its schema up to date.

    A second call raises ``StartupError`` unless ``force`` is set, in which case the
    previous engine is disposed first.
    """

    if _database.engine is not None:
        if not force:
            raise StartupError("Database already started; pass force=True to rebind")
        _database.release()

    bound = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=bound)
    _database.bind(bound)
    log.debug("Catalog database ready at %s", bound.url.render_as_string(hide_password=True))


def shutdown() -> None:
    _database.release()


def is_started() -> bool:
    return _database.engine is not None


def configured_engine() -> Engine | None:
    return _database.engine


class SqlAlchemyCatalogUnitOfWork:
    """One session and one transaction per ``with`` block."""

    def __init__(self) -> None:
        if not is_started():
            raise StartupError("Database not started; cannot create a unit of work")
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = _database.open_session()
        self._session = session
        self._repositories = CatalogRepositories(
            entries=SqlAlchemyCatalogEntryRepository(session),
            relations=SqlAlchemyRelationRepository(session),
            import_queue=SqlAlchemyImportQueueRepository(session),
            sync_cursors=SqlAlchemySyncCursorRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from meeplesync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
