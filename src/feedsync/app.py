"""Application orchestration entry points.

This module is the composition root: it wires the change detector, inventory
policy, option planner, collection assigner, sync orchestrator and
reconciliation auditor onto concrete adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from feedsync.adapters.feed import JsonFeedSource
from feedsync.adapters.shopify import ShopifyCatalog
from feedsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from feedsync.config import get_feed_config, get_shopify_config, get_sync_config
from feedsync.domain.caches import CollectionDirectory, SnapshotCache
from feedsync.domain.changes import ChangeDetector
from feedsync.domain.inventory import InventoryPolicy
from feedsync.domain.memberships import CollectionAssigner
from feedsync.domain.options import VariantOptionPlanner
from feedsync.domain.reconciliation import ReconciliationAuditor
from feedsync.domain.sync import RetryingCatalog, SyncOrchestrator

if TYPE_CHECKING:
    from pathlib import Path

    from feedsync.config import SyncConfig
    from feedsync.domain.model import CatalogRecord
    from feedsync.domain.ports import FeedSource, RemoteCatalog, UnitOfWorkFactory
    from feedsync.domain.reconciliation import DiscrepancyReport, ReconciliationResult
    from feedsync.domain.sync import SyncRunResult

log = getLogger(__name__)


@dataclass(slots=True)
class Services:
    feed: SnapshotCache
    directory: CollectionDirectory
    orchestrator: SyncOrchestrator
    auditor: ReconciliationAuditor


def build_services(
    *,
    catalog: RemoteCatalog,
    unit_of_work_factory: UnitOfWorkFactory,
    feed: FeedSource,
    config: SyncConfig,
) -> Services:
    """Wire the sync engine onto the given adapters."""

    snapshot = feed if isinstance(feed, SnapshotCache) else SnapshotCache(feed)
    assigner = CollectionAssigner()
    directory = CollectionDirectory(catalog, assigner.titles)
    orchestrator = SyncOrchestrator(
        catalog=catalog,
        unit_of_work_factory=unit_of_work_factory,
        detector=ChangeDetector(force_update=config.force_update),
        inventory=InventoryPolicy(location_id=config.location_id),
        planner=VariantOptionPlanner(),
        assigner=assigner,
        directory=directory,
        max_deletions=config.max_deletions_per_sync,
    )
    auditor = ReconciliationAuditor(
        catalog=catalog,
        unit_of_work_factory=unit_of_work_factory,
        feed=snapshot,
        orchestrator=orchestrator,
        max_deletion_fraction=config.max_deletion_fraction,
    )
    return Services(
        feed=snapshot,
        directory=directory,
        orchestrator=orchestrator,
        auditor=auditor,
    )


def _default_services(
    *,
    catalog: RemoteCatalog | None,
    feed: FeedSource | None,
    unit_of_work_factory: UnitOfWorkFactory | None,
    config: SyncConfig | None,
    feed_path: str | Path | None = None,
) -> Services:
    effective_config = config or get_sync_config()
    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyUnitOfWork
    if catalog is None:
        catalog = RetryingCatalog(
            ShopifyCatalog(config=get_shopify_config()),
            attempts=effective_config.retry_attempts,
        )
    if feed is None:
        feed = JsonFeedSource(get_feed_config(path=feed_path).path)
    return build_services(
        catalog=catalog,
        unit_of_work_factory=unit_of_work_factory,
        feed=feed,
        config=effective_config,
    )


def sync_feed(
    *,
    catalog: RemoteCatalog | None = None,
    feed: FeedSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    feed_path: str | Path | None = None,
) -> SyncRunResult:
    """Load a fresh feed snapshot and synchronise it into the store and remote catalog."""

    services = _default_services(
        catalog=catalog,
        feed=feed,
        unit_of_work_factory=unit_of_work_factory,
        config=config,
        feed_path=feed_path,
    )
    records = services.feed.refresh()
    log.info("Starting sync of %s feed records", len(records))
    return services.orchestrator.sync(records)


def sync_records(
    records: list[CatalogRecord],
    *,
    catalog: RemoteCatalog | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
) -> SyncRunResult:
    """Synchronise an already loaded snapshot."""

    services = _default_services(
        catalog=catalog,
        feed=_StaticFeed(records),
        unit_of_work_factory=unit_of_work_factory,
        config=config,
    )
    return services.orchestrator.sync(records)


def analyze_discrepancies(
    *,
    catalog: RemoteCatalog | None = None,
    feed: FeedSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    feed_path: str | Path | None = None,
) -> DiscrepancyReport:
    """Build and log a discrepancy report without changing anything."""

    services = _default_services(
        catalog=catalog,
        feed=feed,
        unit_of_work_factory=unit_of_work_factory,
        config=config,
        feed_path=feed_path,
    )
    return services.auditor.analyze()


def perform_reconciliation(
    *,
    force: bool = False,
    catalog: RemoteCatalog | None = None,
    feed: FeedSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    feed_path: str | Path | None = None,
) -> ReconciliationResult:
    """Detect drift and repair it, refusing mass deletions unless ``force`` is set."""

    services = _default_services(
        catalog=catalog,
        feed=feed,
        unit_of_work_factory=unit_of_work_factory,
        config=config,
        feed_path=feed_path,
    )
    result = services.auditor.repair(force=force)
    log.info(
        "Finished reconciliation: success=%s, remote_deleted=%s, store_deleted=%s, "
        "ids_corrected=%s, resynced=%s, errors=%s",
        result.success,
        result.remote_deleted,
        result.store_deleted,
        result.ids_corrected,
        result.resynced,
        len(result.errors),
    )
    return result


@dataclass(slots=True)
class _StaticFeed:
    records: list[CatalogRecord]

    def load_snapshot(self) -> list[CatalogRecord]:
        return list(self.records)
