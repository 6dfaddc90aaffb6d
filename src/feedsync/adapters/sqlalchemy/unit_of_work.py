"""Engine lifecycle and the session-per-transition unit of work for the record store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from feedsync.adapters.sqlalchemy.mappings import start_mappers
from feedsync.adapters.sqlalchemy.migrations import upgrade_head
from feedsync.adapters.sqlalchemy.repositories import SqlAlchemyCatalogRecordRepository
from feedsync.config import get_database_config
from feedsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the store is used before ``startup()`` or reconfigured without ``force``."""


class _StoreRuntime:
    """Process-wide engine plus the session factory bound to it."""

    __slots__ = ("engine", "sessions")

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )

    def require_sessions(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "Record store not started; call "
                "feedsync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self.sessions


_RUNTIME = _StoreRuntime()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create (or adopt) the engine, migrate it to head and bind the session factory."""

    if _RUNTIME.engine is not None and not force:
        raise StartupError("Record store already started. Pass force=True to reconfigure.")
    if engine is None:
        engine = create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    _RUNTIME.bind(engine)
    log.debug("Record store started on %s", engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _RUNTIME.engine


def is_started() -> bool:
    return _RUNTIME.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it, so ``startup()`` may run again."""

    if _RUNTIME.engine is not None:
        _RUNTIME.engine.dispose()
    _RUNTIME.bind(None)


class SqlAlchemyUnitOfWork:
    """One session, one transaction: commit explicitly, roll back on error or exit."""

    def __init__(self) -> None:
        self._sessions = _RUNTIME.require_sessions()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = CatalogRepositories(
            records=SqlAlchemyCatalogRecordRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._open_session()
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self._open_session().commit()

    def rollback(self) -> None:
        self._open_session().rollback()

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def _open_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session


if TYPE_CHECKING:
    from feedsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyUnitOfWork()
