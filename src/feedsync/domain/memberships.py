"""Collection membership rules and the membership diff."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import PartialMembershipError, RemoteCatalogError

if TYPE_CHECKING:
    from collections.abc import Callable

    from feedsync.domain.caches import CollectionDirectory
    from feedsync.domain.model import CatalogRecord
    from feedsync.domain.ports import RemoteCatalog

log = getLogger(__name__)

PRICE_BAND_LIMIT: Final[Decimal] = Decimal(5000)


@dataclass(slots=True, frozen=True)
class CollectionRule:
    title: str
    accepts: Callable[[CatalogRecord], bool]
    is_brand: bool = False


def _styled(*styles: str) -> Callable[[CatalogRecord], bool]:
    wanted = frozenset(style.lower() for style in styles)

    def accepts(record: CatalogRecord) -> bool:
        return record.is_watch and (record.style or "").strip().lower() in wanted

    return accepts


def _designed_by(designer: str) -> Callable[[CatalogRecord], bool]:
    def accepts(record: CatalogRecord) -> bool:
        return record.is_watch and (record.designer or "").strip() == designer

    return accepts


def _described_as(word: str) -> Callable[[CatalogRecord], bool]:
    def accepts(record: CatalogRecord) -> bool:
        return record.is_watch and word in (record.description or "").lower()

    return accepts


def _under_price_band(record: CatalogRecord) -> bool:
    price = record.canonical_price
    return record.is_watch and price is not None and price < PRICE_BAND_LIMIT


def _jewelry(record: CatalogRecord) -> bool:
    return not record.is_watch


BRAND_RULES: Final[tuple[CollectionRule, ...]] = tuple(
    CollectionRule(title, _designed_by(designer), is_brand=True)
    for title, designer in (
        ("Patek Philippe", "Patek Philippe"),
        ("Rolex", "Rolex"),
        ("Audemars Piguet", "Audemars Piguet"),
        ("Piaget", "Piaget"),
        ("Cartier", "Cartier"),
        ("Hublot", "Hublot"),
        ("Panerai", "Panerai"),
        ("F.P. Journe", "FP Journe"),
    )
)


def _other_brand(record: CatalogRecord) -> bool:
    return record.is_watch and not any(rule.accepts(record) for rule in BRAND_RULES)


COLLECTION_RULES: Final[tuple[CollectionRule, ...]] = (
    CollectionRule("Mens Watches", _styled("Gents", "Unisex")),
    CollectionRule("Womens Watches", _styled("Ladies", "Unisex")),
    CollectionRule("Under $5,000", _under_price_band),
    *BRAND_RULES,
    CollectionRule("Other Brand", _other_brand),
    CollectionRule("Vintage Watches", _described_as("vintage")),
    CollectionRule("Diamond Watches", _described_as("diamond")),
    CollectionRule("Vintage Jewelry", _jewelry),
)


@dataclass(slots=True)
class CollectionAssigner:
    rules: tuple[CollectionRule, ...] = COLLECTION_RULES

    @property
    def titles(self) -> tuple[str, ...]:
        return tuple(rule.title for rule in self.rules)

    def desired_titles(self, record: CatalogRecord) -> frozenset[str]:
        return frozenset(rule.title for rule in self.rules if rule.accepts(record))

    @staticmethod
    def diff(
        current: frozenset[str],
        desired: frozenset[str],
    ) -> tuple[frozenset[str], frozenset[str]]:
        """Return ``(to_add, to_remove)`` keyed by collection id."""

        return desired - current, current - desired

    def apply(
        self,
        catalog: RemoteCatalog,
        entry_id: str,
        record: CatalogRecord,
        directory: CollectionDirectory,
        *,
        current: frozenset[str] | None = None,
    ) -> tuple[frozenset[str], frozenset[str]]:
        """Bring the entry's managed memberships in line with ``record``.

        Memberships in collections outside the rule table are left alone. Raises
        ``PartialMembershipError`` unless every addition and removal succeeded.
        """

        desired = directory.resolve(self.desired_titles(record))
        if current is None:
            current = catalog.list_collection_memberships(entry_id)
        managed_current = current & directory.managed_ids()
        to_add, to_remove = self.diff(managed_current, desired)

        failed: list[str] = []
        last_error: RemoteCatalogError | None = None
        for collection_id in sorted(to_remove):
            try:
                catalog.remove_collection_membership(entry_id, collection_id)
            except RemoteCatalogError as exc:
                log.error(
                    "Failed to remove %s from collection %s: %s", entry_id, collection_id, exc
                )
                failed.append(collection_id)
                last_error = exc
        for collection_id in sorted(to_add):
            try:
                catalog.add_collection_membership(entry_id, collection_id)
            except RemoteCatalogError as exc:
                log.error("Failed to add %s to collection %s: %s", entry_id, collection_id, exc)
                failed.append(collection_id)
                last_error = exc

        if failed:
            raise PartialMembershipError(
                f"Collection memberships of {entry_id} left partially applied",
                failed=tuple(failed),
            ) from last_error
        return to_add, to_remove
