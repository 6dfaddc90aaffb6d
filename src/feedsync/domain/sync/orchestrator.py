"""Per-record sync state machine.

Classification drives one transition per record:

* new, or changed without a remote id -> publish
* changed with a remote id -> update
* unchanged -> skip (no remote call, no store write)
* deleted -> retire

Remote steps run first; the store row is written in its own unit of work only
after every remote step succeeded, so a failed record keeps its previous row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from feedsync.domain.changes import ChangeRecord
from feedsync.domain.errors import (
    EntryNotFoundError,
    FeedSyncError,
    RecordValidationError,
    RemoteIdentityError,
)
from feedsync.domain.listing import build_draft, build_patch
from feedsync.domain.model import SyncOperation

from .result import SyncRunResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from feedsync.domain.caches import CollectionDirectory
    from feedsync.domain.changes import ChangeDetector
    from feedsync.domain.inventory import InventoryPolicy
    from feedsync.domain.memberships import CollectionAssigner
    from feedsync.domain.model import CatalogRecord, RemoteCatalogEntry
    from feedsync.domain.options import VariantOptionPlanner
    from feedsync.domain.ports import RemoteCatalog, UnitOfWorkFactory

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class SyncOrchestrator:
    catalog: RemoteCatalog
    unit_of_work_factory: UnitOfWorkFactory
    detector: ChangeDetector
    inventory: InventoryPolicy
    planner: VariantOptionPlanner
    assigner: CollectionAssigner
    directory: CollectionDirectory
    max_deletions: int | None = None
    clock: Callable[[], datetime] = _utcnow

    def sync(self, records: Sequence[CatalogRecord]) -> SyncRunResult:
        """Bring the remote catalog and the store in line with a full feed snapshot."""

        result = SyncRunResult()
        if not records:
            result.abort("Feed snapshot is empty; treating the feed as temporarily offline")
            log.warning(result.abort_reason)
            return result

        with self.unit_of_work_factory() as uow:
            stored = uow.repositories.records.find_all()
        change_set = self.detector.classify(records, stored)

        for rejection in change_set.rejected:
            result.processed += 1
            result.record_failure(rejection.key, SyncOperation.VALIDATE, rejection)

        if self.max_deletions is not None and len(change_set.deleted) > self.max_deletions:
            result.abort(
                f"{len(change_set.deleted)} records would be retired, "
                f"more than the limit of {self.max_deletions}; skipping the run"
            )
            log.error(result.abort_reason)
            return result

        for record in change_set.new:
            if self._attempt(result, record.key, SyncOperation.PUBLISH, self.publish, record):
                result.published += 1
        for change in change_set.changed:
            if change.stored.remote_id is None:
                if self._attempt(
                    result, change.key, SyncOperation.PUBLISH, self.publish, change.incoming
                ):
                    result.published += 1
            elif self._attempt(result, change.key, SyncOperation.UPDATE, self.update, change):
                result.updated += 1
        result.skipped += len(change_set.unchanged)
        result.processed += len(change_set.unchanged)
        for record in change_set.deleted:
            if self._attempt(result, record.key, SyncOperation.RETIRE, self.retire, record):
                result.retired += 1

        log.info(
            "Finished sync: processed=%s, published=%s, updated=%s, retired=%s, "
            "skipped=%s, errors=%s",
            result.processed,
            result.published,
            result.updated,
            result.retired,
            result.skipped,
            result.failed,
        )
        return result

    def publish(self, record: CatalogRecord) -> RemoteCatalogEntry:
        record.validate()
        entry = self.catalog.find_by_sku(record.key)
        if entry is None:
            entry = self.catalog.create_entry(build_draft(record))
            log.info("Created remote entry %s for %s", entry.id, record.key)
            entry = self._shape(entry, record, current_memberships=frozenset())
        else:
            log.warning("Adopting existing remote entry %s for %s", entry.id, record.key)
            self.catalog.update_entry(entry.id, build_patch(record))
            entry = self._shape(entry, record)

        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.records
            row = repository.find_by_key(record.key)
            if row is None:
                row = record.detached_copy()
            else:
                row.copy_feed_fields_from(record)
            row.mark_published(entry.id, at=self.clock())
            repository.save(row)
            uow.commit()
        return entry

    def update(self, change: ChangeRecord) -> RemoteCatalogEntry:
        incoming = change.incoming
        remote_id = change.stored.remote_id
        incoming.validate()
        if remote_id is None:
            raise RecordValidationError(f"Record {change.key} has no remote id", key=change.key)

        entry = self.catalog.get_entry(remote_id)
        if entry is None:
            raise EntryNotFoundError(remote_id)
        if entry.sku != change.key:
            raise RemoteIdentityError(
                f"Remote entry {remote_id} carries sku {entry.sku!r}, expected {change.key}"
            )

        self.catalog.update_entry(entry.id, build_patch(incoming))
        entry = self._shape(entry, incoming)

        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.records
            row = repository.find_by_key(change.key)
            if row is None:
                raise RecordValidationError(
                    f"Record {change.key} disappeared from the store during update",
                    key=change.key,
                )
            row.copy_feed_fields_from(incoming)
            row.mark_updated(at=self.clock())
            repository.save(row)
            uow.commit()
        log.info("Updated remote entry %s for %s (%s)", entry.id, change.key, change.changed_fields)
        return entry

    def retire(self, record: CatalogRecord) -> None:
        remote_id = record.remote_id
        if remote_id is None:
            orphan = self.catalog.find_by_sku(record.key)
            remote_id = orphan.id if orphan is not None else None
        if remote_id is not None:
            try:
                self.catalog.delete_entry(remote_id)
            except EntryNotFoundError:
                log.warning("Remote entry %s for %s was already gone", remote_id, record.key)

        with self.unit_of_work_factory() as uow:
            uow.repositories.records.delete(record.key)
            uow.commit()
        log.info("Retired %s (remote entry %s)", record.key, remote_id)

    def resync(self, key: str) -> RemoteCatalogEntry:
        """Push the stored version of ``key`` to its remote entry again."""

        with self.unit_of_work_factory() as uow:
            row = uow.repositories.records.find_by_key(key)
            if row is None:
                raise RecordValidationError(f"Record {key} is not stored", key=key)
            stored = row.detached_copy()
        change = ChangeRecord(
            stored=stored,
            incoming=stored.detached_copy(),
            changed=True,
            changed_fields=("<resync>",),
        )
        return self.update(change)

    def _shape(
        self,
        entry: RemoteCatalogEntry,
        record: CatalogRecord,
        *,
        current_memberships: frozenset[str] | None = None,
    ) -> RemoteCatalogEntry:
        plan = self.planner.plan(entry, self.planner.desired_axes(record))
        entry = self.planner.execute(self.catalog, entry, plan)
        entry = self.inventory.apply_absolute(
            self.catalog, entry, self.inventory.target_level(record.status)
        )
        self.assigner.apply(
            self.catalog,
            entry.id,
            record,
            self.directory,
            current=current_memberships,
        )
        return entry

    @staticmethod
    def _attempt[**P](
        result: SyncRunResult,
        key: str,
        operation: SyncOperation,
        func: Callable[P, object],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> bool:
        result.processed += 1
        try:
            func(*args, **kwargs)
        except FeedSyncError as exc:
            log.error("Failed to %s %s: %s", operation, key, exc)
            result.record_failure(key, operation, exc)
            return False
        except Exception as exc:
            log.exception("Unexpected error during %s of %s", operation, key)
            result.record_failure(key, operation, exc)
            return False
        return True
