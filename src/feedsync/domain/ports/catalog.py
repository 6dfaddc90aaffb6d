"""Port for the remote e-commerce catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from feedsync.domain.model import EntryDraft, EntryPatch, OptionAxis, RemoteCatalogEntry


@runtime_checkable
class RemoteCatalog(Protocol):
    """Operation contract of a remote catalog.

    Every method is a remote-call boundary. Implementations raise
    ``TransientCatalogError`` for failures worth retrying, ``CatalogUserError`` for
    rejected requests and ``EntryNotFoundError`` for unknown entry ids.
    """

    def create_entry(self, draft: EntryDraft) -> RemoteCatalogEntry: ...

    def update_entry(self, entry_id: str, patch: EntryPatch) -> None: ...

    def delete_entry(self, entry_id: str) -> None: ...

    def get_entry(self, entry_id: str) -> RemoteCatalogEntry | None: ...

    def find_by_sku(self, sku: str) -> RemoteCatalogEntry | None: ...

    def list_all(self) -> list[RemoteCatalogEntry]: ...

    def create_options(self, entry_id: str, axes: Sequence[OptionAxis]) -> None: ...

    def remove_options(self, entry_id: str) -> None: ...

    def update_variant_options(
        self, entry_id: str, variant_id: str, values: Sequence[str]
    ) -> None: ...

    def set_inventory_level(self, variant_id: str, location_id: str, level: int) -> None: ...

    def list_locations(self) -> list[str]: ...

    def add_collection_membership(self, entry_id: str, collection_id: str) -> None: ...

    def remove_collection_membership(self, entry_id: str, collection_id: str) -> None: ...

    def list_collection_memberships(self, entry_id: str) -> frozenset[str]: ...

    def list_collections(self) -> dict[str, str]:
        """Return collection ids keyed by title."""
        ...

    def create_collection(self, title: str) -> str: ...
