"""Three-way audit of feed, store and remote catalog, with a bounded repair."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from feedsync.domain.errors import EntryNotFoundError, FeedSyncError
from feedsync.domain.inventory import ALLOWED_LEVELS, InventoryPolicy
from feedsync.domain.model import SyncOperation, normalize_text
from feedsync.domain.sync.result import SyncFailure

from .report import Discrepancy, DiscrepancyKind, DiscrepancyReport, ReconciliationResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from feedsync.domain.model import CatalogRecord, RemoteCatalogEntry
    from feedsync.domain.ports import FeedSource, RemoteCatalog, UnitOfWorkFactory
    from feedsync.domain.sync import SyncOrchestrator

log = getLogger(__name__)


def _group_by_sku(
    entries: list[RemoteCatalogEntry],
    stored_by_key: dict[str, CatalogRecord],
    report: DiscrepancyReport,
) -> dict[str, RemoteCatalogEntry]:
    grouped: dict[str, list[RemoteCatalogEntry]] = {}
    for entry in entries:
        sku = normalize_text(entry.sku)
        if sku is None:
            report.unkeyed_in_remote.append(
                Discrepancy(
                    DiscrepancyKind.UNKEYED_IN_REMOTE,
                    key=None,
                    remote_id=entry.id,
                    stored_remote_id=None,
                    description="Remote entry has no variant sku",
                    details=entry.title,
                )
            )
            continue
        grouped.setdefault(sku, []).append(entry)

    keepers: dict[str, RemoteCatalogEntry] = {}
    for sku, candidates in grouped.items():
        stored = stored_by_key.get(sku)
        keeper = next(
            (entry for entry in candidates if stored is not None and entry.id == stored.remote_id),
            candidates[0],
        )
        keepers[sku] = keeper
        for entry in candidates:
            if entry is keeper:
                continue
            report.duplicates_in_remote.append(
                Discrepancy(
                    DiscrepancyKind.DUPLICATE_IN_REMOTE,
                    key=sku,
                    remote_id=entry.id,
                    stored_remote_id=stored.remote_id if stored else None,
                    description=f"Duplicate of remote entry {keeper.id}",
                )
            )
    return keepers


@dataclass(slots=True)
class ReconciliationAuditor:
    catalog: RemoteCatalog
    unit_of_work_factory: UnitOfWorkFactory
    feed: FeedSource
    orchestrator: SyncOrchestrator
    max_deletion_fraction: float = 0.1

    def analyze(self) -> DiscrepancyReport:
        """Compare fresh snapshots of all three sources. Read-only."""

        remote_entries = self.catalog.list_all()
        with self.unit_of_work_factory() as uow:
            stored_records = uow.repositories.records.find_all()
        feed_keys = {
            key
            for key in (normalize_text(record.tag_number) for record in self.feed.load_snapshot())
            if key is not None
        }

        report = DiscrepancyReport(
            remote_total=len(remote_entries),
            store_total=len(stored_records),
            feed_total=len(feed_keys),
            max_deletion_fraction=self.max_deletion_fraction,
        )
        stored_by_key = {record.key: record for record in stored_records}
        remote_by_sku = _group_by_sku(remote_entries, stored_by_key, report)

        for sku, entry in remote_by_sku.items():
            if sku in stored_by_key:
                continue
            report.extra_in_remote.append(
                Discrepancy(
                    DiscrepancyKind.EXTRA_IN_REMOTE,
                    key=sku,
                    remote_id=entry.id,
                    stored_remote_id=None,
                    description="Remote entry has no store row",
                    details=entry.title,
                )
            )

        for key, record in stored_by_key.items():
            entry = remote_by_sku.get(key)
            if entry is None:
                report.extra_in_store.append(
                    Discrepancy(
                        DiscrepancyKind.EXTRA_IN_STORE,
                        key=key,
                        remote_id=None,
                        stored_remote_id=record.remote_id,
                        description="Store row has no remote entry",
                    )
                )
                continue
            self._compare(record, entry, report)

        report.feed_only = sorted(
            key for key in feed_keys if key not in stored_by_key and key not in remote_by_sku
        )
        report.log_summary()
        return report

    def repair(self, *, force: bool = False) -> ReconciliationResult:
        """Re-analyze, then repair the drift unless the safety threshold forbids it."""

        report = self.analyze()
        result = ReconciliationResult(report=report)
        if not report.has_discrepancies:
            result.success = True
            result.message = "No discrepancies found"
            return result

        if report.exceeds_safety_threshold and not force:
            result.message = (
                f"Refusing to repair: {report.deletion_count} proposed deletions exceed "
                f"{report.max_deletion_fraction:.0%} of {report.catalog_size} catalog entries"
            )
            log.error(result.message)
            return result
        if report.exceeds_safety_threshold:
            log.warning("Safety threshold exceeded; repairing anyway because force is set")

        for item in report.remote_deletions:
            if self._attempt(result, item, self._delete_remote, item):
                result.remote_deleted += 1
        for item in (*report.extra_in_store, *report.variant_violations):
            if item.key is not None and self._attempt(result, item, self._delete_row, item.key):
                result.store_deleted += 1
        for item in report.id_mismatches:
            if self._attempt(result, item, self._correct_id, item):
                result.ids_corrected += 1
        resync_items = {
            item.key: item
            for item in (*report.image_count_mismatches, *report.inventory_violations)
            if item.key is not None
        }
        for key, item in resync_items.items():
            if self._attempt(result, item, self.orchestrator.resync, key):
                result.resynced += 1

        result.success = not result.errors
        result.message = (
            f"Repaired: remote_deleted={result.remote_deleted}, "
            f"store_deleted={result.store_deleted}, ids_corrected={result.ids_corrected}, "
            f"resynced={result.resynced}, errors={len(result.errors)}"
        )
        log.info(result.message)
        return result

    def _compare(
        self,
        record: CatalogRecord,
        entry: RemoteCatalogEntry,
        report: DiscrepancyReport,
    ) -> None:
        if record.remote_id != entry.id:
            report.id_mismatches.append(
                Discrepancy(
                    DiscrepancyKind.ID_MISMATCH,
                    key=record.key,
                    remote_id=entry.id,
                    stored_remote_id=record.remote_id,
                    description="Stored remote id differs from remote lookup by sku",
                )
            )
        if len(entry.variants) != 1:
            report.variant_violations.append(
                Discrepancy(
                    DiscrepancyKind.VARIANT_VIOLATION,
                    key=record.key,
                    remote_id=entry.id,
                    stored_remote_id=record.remote_id,
                    description=f"Remote entry has {len(entry.variants)} variants",
                )
            )
            return
        if record.image_count != entry.image_count:
            report.image_count_mismatches.append(
                Discrepancy(
                    DiscrepancyKind.IMAGE_COUNT_MISMATCH,
                    key=record.key,
                    remote_id=entry.id,
                    stored_remote_id=record.remote_id,
                    description="Image count differs",
                    details=f"store={record.image_count}, remote={entry.image_count}",
                )
            )
        total = entry.variant.total_inventory
        expected = InventoryPolicy.target_level(record.status)
        if total not in ALLOWED_LEVELS or total != expected:
            report.inventory_violations.append(
                Discrepancy(
                    DiscrepancyKind.INVENTORY_VIOLATION,
                    key=record.key,
                    remote_id=entry.id,
                    stored_remote_id=record.remote_id,
                    description="Inventory differs from status",
                    details=f"remote={total}, expected={expected}",
                )
            )

    def _delete_remote(self, item: Discrepancy) -> None:
        if item.remote_id is None:
            return
        try:
            self.catalog.delete_entry(item.remote_id)
        except EntryNotFoundError:
            log.warning("Remote entry %s was already gone", item.remote_id)
            return
        log.info("Deleted remote entry %s (%s, %s)", item.remote_id, item.key, item.kind)

    def _delete_row(self, key: str) -> None:
        with self.unit_of_work_factory() as uow:
            uow.repositories.records.delete(key)
            uow.commit()
        log.info("Deleted store row %s", key)

    def _correct_id(self, item: Discrepancy) -> None:
        if item.key is None or item.remote_id is None:
            return
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.records
            row = repository.find_by_key(item.key)
            if row is None:
                return
            previous = row.correct_remote_id(item.remote_id)
            repository.save(row)
            uow.commit()
        log.warning("Corrected remote id of %s: %s -> %s", item.key, previous, item.remote_id)

    @staticmethod
    def _attempt[**P](
        result: ReconciliationResult,
        item: Discrepancy,
        func: Callable[P, object],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> bool:
        target = item.key or item.remote_id
        try:
            func(*args, **kwargs)
        except FeedSyncError as exc:
            log.error("Failed to repair %s %s: %s", item.kind, target, exc)
            failure = exc
        except Exception as exc:
            log.exception("Unexpected error repairing %s %s", item.kind, target)
            failure = exc
        else:
            return True
        result.errors.append(
            SyncFailure(key=item.key, operation=SyncOperation.RECONCILE, message=str(failure))
        )
        return False
