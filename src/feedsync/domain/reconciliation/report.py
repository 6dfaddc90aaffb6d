from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from logging import Logger

    from feedsync.domain.sync.result import SyncFailure

log = getLogger(__name__)

REPORT_SAMPLE_SIZE: Final[int] = 10


class DiscrepancyKind(StrEnum):
    EXTRA_IN_REMOTE = "extra_in_remote"
    DUPLICATE_IN_REMOTE = "duplicate_in_remote"
    UNKEYED_IN_REMOTE = "unkeyed_in_remote"
    EXTRA_IN_STORE = "extra_in_store"
    ID_MISMATCH = "id_mismatch"
    IMAGE_COUNT_MISMATCH = "image_count_mismatch"
    INVENTORY_VIOLATION = "inventory_violation"
    VARIANT_VIOLATION = "variant_violation"


@dataclass(slots=True, frozen=True)
class Discrepancy:
    kind: DiscrepancyKind
    key: str | None
    remote_id: str | None
    stored_remote_id: str | None
    description: str
    details: str = ""


@dataclass(slots=True)
class DiscrepancyReport:
    remote_total: int = 0
    store_total: int = 0
    feed_total: int = 0
    max_deletion_fraction: float = 0.1
    extra_in_remote: list[Discrepancy] = field(default_factory=list)
    duplicates_in_remote: list[Discrepancy] = field(default_factory=list)
    unkeyed_in_remote: list[Discrepancy] = field(default_factory=list)
    extra_in_store: list[Discrepancy] = field(default_factory=list)
    id_mismatches: list[Discrepancy] = field(default_factory=list)
    image_count_mismatches: list[Discrepancy] = field(default_factory=list)
    inventory_violations: list[Discrepancy] = field(default_factory=list)
    variant_violations: list[Discrepancy] = field(default_factory=list)
    feed_only: list[str] = field(default_factory=list)

    @property
    def remote_deletions(self) -> list[Discrepancy]:
        return [
            *self.extra_in_remote,
            *self.duplicates_in_remote,
            *self.unkeyed_in_remote,
            *self.variant_violations,
        ]

    @property
    def deletion_count(self) -> int:
        return len(self.remote_deletions) + len(self.extra_in_store)

    @property
    def catalog_size(self) -> int:
        return max(self.remote_total, self.store_total)

    @property
    def exceeds_safety_threshold(self) -> bool:
        if self.deletion_count == 0:
            return False
        return self.deletion_count > self.max_deletion_fraction * self.catalog_size

    @property
    def has_discrepancies(self) -> bool:
        return any(self.by_kind().values())

    def by_kind(self) -> dict[DiscrepancyKind, list[Discrepancy]]:
        return {
            DiscrepancyKind.EXTRA_IN_REMOTE: self.extra_in_remote,
            DiscrepancyKind.DUPLICATE_IN_REMOTE: self.duplicates_in_remote,
            DiscrepancyKind.UNKEYED_IN_REMOTE: self.unkeyed_in_remote,
            DiscrepancyKind.EXTRA_IN_STORE: self.extra_in_store,
            DiscrepancyKind.ID_MISMATCH: self.id_mismatches,
            DiscrepancyKind.IMAGE_COUNT_MISMATCH: self.image_count_mismatches,
            DiscrepancyKind.INVENTORY_VIOLATION: self.inventory_violations,
            DiscrepancyKind.VARIANT_VIOLATION: self.variant_violations,
        }

    def counts(self) -> dict[str, int]:
        return {kind.value: len(items) for kind, items in self.by_kind().items()}

    def log_summary(self, logger: Logger = log) -> None:
        logger.info(
            "Reconciliation analysis: remote=%s, store=%s, feed=%s, deletions=%s, "
            "exceeds_threshold=%s",
            self.remote_total,
            self.store_total,
            self.feed_total,
            self.deletion_count,
            self.exceeds_safety_threshold,
        )
        for kind, items in self.by_kind().items():
            if not items:
                continue
            logger.info("%s: %s", kind, len(items))
            for item in items[:REPORT_SAMPLE_SIZE]:
                logger.info(
                    "  %s remote=%s stored=%s %s",
                    item.key,
                    item.remote_id,
                    item.stored_remote_id,
                    item.description,
                )
            if len(items) > REPORT_SAMPLE_SIZE:
                logger.info("  ... and %s more", len(items) - REPORT_SAMPLE_SIZE)
        if self.feed_only:
            logger.info("Pending publish (feed only): %s", len(self.feed_only))


@dataclass(slots=True)
class ReconciliationResult:
    report: DiscrepancyReport
    success: bool = False
    message: str = ""
    remote_deleted: int = 0
    store_deleted: int = 0
    ids_corrected: int = 0
    resynced: int = 0
    errors: list[SyncFailure] = field(default_factory=list)
