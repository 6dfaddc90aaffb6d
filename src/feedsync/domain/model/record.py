"""The catalog record: one inventory unit as carried by the feed and the local store."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import RecordValidationError, RemoteIdentityError

from .enums import RecordStatus, SyncStatus

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

WATCH_CATEGORY_MARKER: Final[str] = "watches"

# Attributes sourced from the feed. Everything else on the record is sync bookkeeping.
FEED_FIELDS: Final[tuple[str, ...]] = (
    "status",
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
    "price",
    "price_retail",
    "price_sale",
    "price_keystone",
    "price_chronos",
    "price_wholesale",
    "cost_invoiced",
    "flag_ebay_auction",
    "image_paths",
)


def normalize_text(value: object) -> str | None:
    """Trim strings and fold blank values to ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_image_paths(paths: Iterable[object] | str | None) -> tuple[str, ...]:
    if not paths:
        return ()
    if isinstance(paths, str):
        paths = (paths,)
    normalized: list[str] = []
    for path in paths:
        text = normalize_text(path)
        if text is not None:
            normalized.append(text)
    return tuple(normalized)


def parse_price(value: str | None) -> Decimal | None:
    text = normalize_text(value)
    if text is None:
        return None
    try:
        return Decimal(text.replace(",", "").removeprefix("$"))
    except InvalidOperation:
        return None


@dataclass(eq=False, kw_only=True)
class CatalogRecord:
    """A feed record keyed by its tag number.

    ``price`` is the single canonical price used for listing and change detection;
    the other ``price_*`` columns are carried for reference only. ``remote_id`` is
    assigned once, on first successful publish.
    """

    tag_number: str
    status: str | None = None
    description: str | None = None
    designer: str | None = None
    model: str | None = None
    year: str | None = None
    category: str | None = None
    style: str | None = None
    metal_type: str | None = None
    reference_number: str | None = None
    movement: str | None = None
    watch_case: str | None = None
    dial: str | None = None
    strap: str | None = None
    condition: str | None = None
    diameter: str | None = None
    box_papers: str | None = None
    serial_number: str | None = None
    dial_markers: str | None = None
    band_material: str | None = None
    bezel_type: str | None = None
    case_crown: str | None = None
    band_type: str | None = None
    general_dial: str | None = None
    notes: str | None = None
    price: str | None = None
    price_retail: str | None = None
    price_sale: str | None = None
    price_keystone: str | None = None
    price_chronos: str | None = None
    price_wholesale: str | None = None
    cost_invoiced: str | None = None
    flag_ebay_auction: str | None = None
    image_paths: tuple[str, ...] = ()

    remote_id: str | None = None
    sync_status: SyncStatus | None = None
    published_at: datetime | None = None
    last_synced_at: datetime | None = None

    @property
    def key(self) -> str:
        return self.tag_number

    @property
    def image_count(self) -> int:
        return len(self.image_paths)

    @property
    def is_sold(self) -> bool:
        return (self.status or "").strip().upper() == RecordStatus.SOLD

    @property
    def is_watch(self) -> bool:
        return WATCH_CATEGORY_MARKER in (self.category or "").lower()

    @property
    def canonical_price(self) -> Decimal | None:
        return parse_price(self.price)

    def validate(self) -> None:
        if normalize_text(self.tag_number) is None:
            raise RecordValidationError("Record has a blank tag number", key=self.tag_number)
        if normalize_text(self.price) is not None and self.canonical_price is None:
            raise RecordValidationError(
                f"Record {self.tag_number} has an unparseable price {self.price!r}",
                key=self.tag_number,
            )

    def copy_feed_fields_from(self, other: CatalogRecord) -> None:
        if other.tag_number != self.tag_number:
            raise RecordValidationError(
                f"Cannot copy record {other.tag_number} onto {self.tag_number}",
                key=self.tag_number,
            )
        for name in FEED_FIELDS:
            setattr(self, name, getattr(other, name))

    def detached_copy(self) -> CatalogRecord:
        """Return a transient copy carrying the feed fields and sync bookkeeping."""

        copy = CatalogRecord(tag_number=self.tag_number)
        copy.copy_feed_fields_from(self)
        copy.remote_id = self.remote_id
        copy.sync_status = self.sync_status
        copy.published_at = self.published_at
        copy.last_synced_at = self.last_synced_at
        return copy

    def assign_remote_id(self, remote_id: str) -> None:
        if self.remote_id is not None and self.remote_id != remote_id:
            raise RemoteIdentityError(
                f"Record {self.tag_number} already maps to {self.remote_id}; "
                f"refusing to reassign to {remote_id}"
            )
        self.remote_id = remote_id

    def correct_remote_id(self, remote_id: str | None) -> str | None:
        """Overwrite the remote identifier and return the previous one (repair only)."""

        previous = self.remote_id
        self.remote_id = remote_id
        return previous

    def mark_published(self, remote_id: str, *, at: datetime) -> None:
        self.assign_remote_id(remote_id)
        self.sync_status = SyncStatus.PUBLISHED
        self.published_at = at
        self.last_synced_at = at

    def mark_updated(self, *, at: datetime) -> None:
        self.sync_status = SyncStatus.UPDATED
        self.last_synced_at = at
