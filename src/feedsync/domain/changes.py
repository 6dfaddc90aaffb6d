"""Classify a feed snapshot against the stored records.

Only the fields listed in ``COMPARISON_FIELDS`` decide whether a record changed.
Secondary prices (retail, sale, keystone, chronos, wholesale, invoiced cost) and
the auction flag are carried by the feed but never trigger a remote mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import RecordValidationError
from feedsync.domain.model import (
    CatalogRecord,
    ChangeKind,
    normalize_image_paths,
    normalize_text,
    parse_price,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

log = getLogger(__name__)

FORCED_CHANGE: Final[str] = "<forced>"


@dataclass(slots=True, frozen=True)
class ComparisonField:
    name: str
    extract: Callable[[CatalogRecord], object]


def _text_field(attribute: str) -> ComparisonField:
    def extract(record: CatalogRecord) -> object:
        return normalize_text(getattr(record, attribute))

    return ComparisonField(attribute, extract)


def _price(record: CatalogRecord) -> object:
    parsed = parse_price(record.price)
    return parsed if parsed is not None else normalize_text(record.price)


def _images(record: CatalogRecord) -> object:
    return normalize_image_paths(record.image_paths)


COMPARISON_FIELDS: Final[tuple[ComparisonField, ...]] = (
    *(
        _text_field(name)
        for name in (
            "description",
            "designer",
            "model",
            "year",
            "category",
            "style",
            "metal_type",
            "reference_number",
            "movement",
            "watch_case",
            "dial",
            "strap",
            "condition",
            "diameter",
            "box_papers",
            "serial_number",
            "dial_markers",
            "band_material",
            "bezel_type",
            "case_crown",
            "band_type",
            "general_dial",
            "notes",
            "status",
        )
    ),
    ComparisonField("image_paths", _images),
    ComparisonField("price", _price),
)


@dataclass(slots=True, frozen=True)
class ChangeRecord:
    stored: CatalogRecord
    incoming: CatalogRecord
    changed: bool
    changed_fields: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.stored.key


@dataclass(slots=True)
class ChangeSet:
    new: list[CatalogRecord] = field(default_factory=list)
    changed: list[ChangeRecord] = field(default_factory=list)
    unchanged: list[ChangeRecord] = field(default_factory=list)
    deleted: list[CatalogRecord] = field(default_factory=list)
    rejected: list[RecordValidationError] = field(default_factory=list)

    def keys(self, kind: ChangeKind) -> frozenset[str]:
        match kind:
            case ChangeKind.NEW:
                return frozenset(record.key for record in self.new)
            case ChangeKind.CHANGED:
                return frozenset(change.key for change in self.changed)
            case ChangeKind.UNCHANGED:
                return frozenset(change.key for change in self.unchanged)
            case ChangeKind.DELETED:
                return frozenset(record.key for record in self.deleted)

    def kind_of(self, key: str) -> ChangeKind | None:
        for kind in ChangeKind:
            if key in self.keys(kind):
                return kind
        return None

    @property
    def is_empty(self) -> bool:
        return not (self.new or self.changed or self.unchanged or self.deleted)

    def summary(self) -> str:
        return (
            f"new={len(self.new)}, changed={len(self.changed)}, "
            f"unchanged={len(self.unchanged)}, deleted={len(self.deleted)}, "
            f"rejected={len(self.rejected)}"
        )


@dataclass(slots=True)
class ChangeDetector:
    comparison_fields: tuple[ComparisonField, ...] = COMPARISON_FIELDS
    force_update: bool = False

    def differences(self, stored: CatalogRecord, incoming: CatalogRecord) -> tuple[str, ...]:
        """Names of comparison fields whose normalized values differ."""

        return tuple(
            comparison.name
            for comparison in self.comparison_fields
            if comparison.extract(stored) != comparison.extract(incoming)
        )

    def equal_for_catalog(self, stored: CatalogRecord, incoming: CatalogRecord) -> bool:
        return not self.differences(stored, incoming)

    def compare(self, stored: CatalogRecord, incoming: CatalogRecord) -> ChangeRecord:
        changed_fields = self.differences(stored, incoming)
        if self.force_update and not changed_fields:
            changed_fields = (FORCED_CHANGE,)
        return ChangeRecord(
            stored=stored,
            incoming=incoming,
            changed=bool(changed_fields),
            changed_fields=changed_fields,
        )

    def classify(
        self,
        feed_records: Iterable[CatalogRecord],
        stored_records: Iterable[CatalogRecord],
    ) -> ChangeSet:
        """Partition the union of feed and store keys into new/changed/unchanged/deleted.

        Feed records with a blank key are rejected and take no part in the partition.
        When a key repeats inside the snapshot the first occurrence wins and the
        others are rejected.
        """

        change_set = ChangeSet()
        incoming_by_key: dict[str, CatalogRecord] = {}
        for record in feed_records:
            key = normalize_text(record.tag_number)
            if key is None:
                change_set.rejected.append(
                    RecordValidationError("Feed record has a blank tag number", key=None)
                )
                continue
            if key in incoming_by_key:
                log.error("Duplicate tag number %s in feed snapshot; keeping first occurrence", key)
                change_set.rejected.append(
                    RecordValidationError(f"Duplicate tag number {key} in feed", key=key)
                )
                continue
            if record.tag_number != key:
                record = replace(record, tag_number=key)
            incoming_by_key[key] = record

        stored_by_key = {record.key: record for record in stored_records}

        for key, incoming in incoming_by_key.items():
            stored = stored_by_key.get(key)
            if stored is None:
                change_set.new.append(incoming)
                continue
            change = self.compare(stored, incoming)
            if change.changed:
                log.debug("Record %s changed fields: %s", key, ", ".join(change.changed_fields))
                change_set.changed.append(change)
            else:
                change_set.unchanged.append(change)

        change_set.deleted.extend(
            stored for key, stored in stored_by_key.items() if key not in incoming_by_key
        )

        log.info("Classified feed snapshot: %s", change_set.summary())
        return change_set
