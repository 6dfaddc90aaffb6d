"""Transaction boundary ports: one unit of work per record transition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from feedsync.domain.ports.persistence import CatalogRecordRepository


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker for the repositories a unit of work hands out."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Context manager that commits explicitly and rolls back on error."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class CatalogRepositories(RepositoryCollection):
    """Repositories required by sync and reconciliation runs."""

    records: CatalogRecordRepository


type CatalogUnitOfWork = UnitOfWork[CatalogRepositories]
type UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]
