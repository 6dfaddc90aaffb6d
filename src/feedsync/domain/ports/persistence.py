"""Ports for persisting catalog records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from feedsync.domain.model import CatalogRecord


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def save(self, entity: TEntity) -> TEntity: ...


@runtime_checkable
class CatalogRecordRepository(Repository[CatalogRecord], Protocol):
    """Keyed persistence for catalog records."""

    def find_all(self) -> list[CatalogRecord]: ...

    def find_by_key(self, key: str) -> CatalogRecord | None: ...

    def delete(self, key: str) -> bool: ...

    def delete_all(self) -> int: ...
