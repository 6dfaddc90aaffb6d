"""Port for inventory feed sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from feedsync.domain.model import CatalogRecord


@runtime_checkable
class FeedSource(Protocol):
    """A full-replace snapshot of the inventory feed."""

    def load_snapshot(self) -> list[CatalogRecord]: ...
