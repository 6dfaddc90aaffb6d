"""Single-unit inventory policy.

Every record is one physical item, so a remote entry holds either 0 or 1 unit.
Levels are always written as absolute values; a signed adjustment replayed on an
already sold item is how stock creeps from 0 to 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import InventoryInvariantError, RemoteCatalogError
from feedsync.domain.model import RecordStatus

if TYPE_CHECKING:
    from feedsync.domain.model import RemoteCatalogEntry, RemoteVariant
    from feedsync.domain.ports import RemoteCatalog

log = getLogger(__name__)

ALLOWED_LEVELS: Final[frozenset[int]] = frozenset({0, 1})


@dataclass(slots=True)
class InventoryPolicy:
    location_id: str | None = None

    @staticmethod
    def target_level(status: str | None) -> int:
        if status is None:
            log.warning("Record has no status; treating it as available")
            return 1
        return 0 if status.strip().upper() == RecordStatus.SOLD else 1

    def apply_absolute(
        self,
        catalog: RemoteCatalog,
        entry: RemoteCatalogEntry,
        target_level: int,
    ) -> RemoteCatalogEntry:
        """Set the entry's stock to ``target_level`` at the primary location, 0 elsewhere."""

        if target_level not in ALLOWED_LEVELS:
            raise InventoryInvariantError(f"Target level {target_level} outside {{0, 1}}")

        variant = entry.variant
        primary = self._primary_location(catalog, variant)
        for location in sorted(set(variant.inventory_levels) | {primary}):
            wanted = target_level if location == primary else 0
            current = variant.inventory_levels.get(location)
            if location != primary and current == wanted:
                continue
            catalog.set_inventory_level(variant.id, location, wanted)

        refreshed = catalog.get_entry(entry.id)
        if refreshed is None:
            raise RemoteCatalogError(f"Entry {entry.id} vanished while setting inventory")
        self.verify(refreshed, target_level)
        return refreshed

    @staticmethod
    def verify(entry: RemoteCatalogEntry, target_level: int) -> None:
        variant = entry.variant
        levels = variant.inventory_levels
        total = variant.total_inventory
        if any(level < 0 for level in levels.values()) or total not in ALLOWED_LEVELS:
            log.error(
                "Inventory invariant violated for entry %s (sku=%s): levels=%s",
                entry.id,
                variant.sku,
                levels,
            )
            raise InventoryInvariantError(
                f"Entry {entry.id} holds {total} units across {len(levels)} locations"
            )
        if total != target_level:
            log.error(
                "Entry %s (sku=%s) holds %s units, expected %s",
                entry.id,
                variant.sku,
                total,
                target_level,
            )
            raise InventoryInvariantError(
                f"Entry {entry.id} holds {total} units, expected {target_level}"
            )

    def _primary_location(self, catalog: RemoteCatalog, variant: RemoteVariant) -> str:
        if self.location_id is not None:
            return self.location_id
        if variant.inventory_levels:
            return min(variant.inventory_levels)
        locations = catalog.list_locations()
        if not locations:
            raise RemoteCatalogError("Remote catalog has no stock location")
        return locations[0]
