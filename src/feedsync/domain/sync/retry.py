"""Bounded retry around every remote catalog call."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import WARNING, getLogger
from typing import TYPE_CHECKING

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from feedsync.domain.errors import TransientCatalogError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from feedsync.domain.model import EntryDraft, EntryPatch, OptionAxis, RemoteCatalogEntry
    from feedsync.domain.ports import RemoteCatalog

log = getLogger(__name__)


def _default_wait() -> wait_base:
    return wait_exponential(multiplier=1, min=1, max=10)


@dataclass(slots=True)
class RetryingCatalog:
    """Remote catalog decorator retrying ``TransientCatalogError`` a bounded number of times.

    The last error is re-raised once attempts are exhausted so the caller can
    report it against the record being processed.
    """

    inner: RemoteCatalog
    attempts: int = 3
    wait: wait_base = field(default_factory=_default_wait)

    def _call[T](self, func: Callable[[], T]) -> T:
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=self.wait,
            retry=retry_if_exception_type(TransientCatalogError),
            before_sleep=before_sleep_log(log, WARNING),
            reraise=True,
        )
        return retrying(func)

    def create_entry(self, draft: EntryDraft) -> RemoteCatalogEntry:
        return self._call(lambda: self.inner.create_entry(draft))

    def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        self._call(lambda: self.inner.update_entry(entry_id, patch))

    def delete_entry(self, entry_id: str) -> None:
        self._call(lambda: self.inner.delete_entry(entry_id))

    def get_entry(self, entry_id: str) -> RemoteCatalogEntry | None:
        return self._call(lambda: self.inner.get_entry(entry_id))

    def find_by_sku(self, sku: str) -> RemoteCatalogEntry | None:
        return self._call(lambda: self.inner.find_by_sku(sku))

    def list_all(self) -> list[RemoteCatalogEntry]:
        return self._call(self.inner.list_all)

    def create_options(self, entry_id: str, axes: Sequence[OptionAxis]) -> None:
        self._call(lambda: self.inner.create_options(entry_id, axes))

    def remove_options(self, entry_id: str) -> None:
        self._call(lambda: self.inner.remove_options(entry_id))

    def update_variant_options(
        self, entry_id: str, variant_id: str, values: Sequence[str]
    ) -> None:
        self._call(lambda: self.inner.update_variant_options(entry_id, variant_id, values))

    def set_inventory_level(self, variant_id: str, location_id: str, level: int) -> None:
        self._call(lambda: self.inner.set_inventory_level(variant_id, location_id, level))

    def list_locations(self) -> list[str]:
        return self._call(self.inner.list_locations)

    def add_collection_membership(self, entry_id: str, collection_id: str) -> None:
        self._call(lambda: self.inner.add_collection_membership(entry_id, collection_id))

    def remove_collection_membership(self, entry_id: str, collection_id: str) -> None:
        self._call(lambda: self.inner.remove_collection_membership(entry_id, collection_id))

    def list_collection_memberships(self, entry_id: str) -> frozenset[str]:
        return self._call(lambda: self.inner.list_collection_memberships(entry_id))

    def list_collections(self) -> dict[str, str]:
        return self._call(self.inner.list_collections)

    def create_collection(self, title: str) -> str:
        return self._call(lambda: self.inner.create_collection(title))


if TYPE_CHECKING:
    from feedsync.domain.ports import RemoteCatalog as _RemoteCatalog

    def _catalog_check(inner: _RemoteCatalog) -> _RemoteCatalog:
        return RetryingCatalog(inner)
