"""Injectable caches with explicit invalidation."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedsync.domain.model import CatalogRecord
    from feedsync.domain.ports import FeedSource, RemoteCatalog

log = getLogger(__name__)


@dataclass(slots=True)
class SnapshotCache:
    """Hold one feed snapshot until cleared, so sync and audit see the same data."""

    source: FeedSource
    _snapshot: list[CatalogRecord] | None = field(default=None, init=False, repr=False)

    def load_snapshot(self) -> list[CatalogRecord]:
        if self._snapshot is None:
            return self.refresh()
        return list(self._snapshot)

    def refresh(self) -> list[CatalogRecord]:
        self._snapshot = list(self.source.load_snapshot())
        log.info("Loaded feed snapshot with %s records", len(self._snapshot))
        return list(self._snapshot)

    def clear(self) -> None:
        self._snapshot = None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None


@dataclass(slots=True)
class CollectionDirectory:
    """Map managed collection titles to remote ids, creating missing collections once."""

    catalog: RemoteCatalog
    titles: tuple[str, ...]
    _ids_by_title: dict[str, str] | None = field(default=None, init=False, repr=False)

    def resolve(self, titles: Iterable[str]) -> frozenset[str]:
        ids_by_title = self._load()
        resolved: set[str] = set()
        for title in titles:
            if title not in ids_by_title:
                log.info("Creating missing collection %r", title)
                ids_by_title[title] = self.catalog.create_collection(title)
            resolved.add(ids_by_title[title])
        return frozenset(resolved)

    def managed_ids(self) -> frozenset[str]:
        ids_by_title = self._load()
        return frozenset(ids_by_title[title] for title in self.titles if title in ids_by_title)

    def refresh(self) -> None:
        self._ids_by_title = None
        self._load()

    def clear(self) -> None:
        self._ids_by_title = None

    def _load(self) -> dict[str, str]:
        if self._ids_by_title is None:
            remote = self.catalog.list_collections()
            self._ids_by_title = {
                title: collection_id
                for title, collection_id in remote.items()
                if title in self.titles
            }
        return self._ids_by_title
