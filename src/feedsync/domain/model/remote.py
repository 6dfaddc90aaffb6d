"""Projections of remote catalog state and the payloads used to mutate it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import VariantInvariantError

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal

PLACEHOLDER_OPTION_NAME: Final[str] = "Title"
PLACEHOLDER_OPTION_VALUE: Final[str] = "Default Title"


@dataclass(slots=True, frozen=True)
class OptionAxis:
    """A desired option axis with the single value the entry's variant carries."""

    name: str
    position: int
    value: str


@dataclass(slots=True, frozen=True)
class ProductOption:
    name: str
    position: int
    values: tuple[str, ...] = ()
    id: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.name == PLACEHOLDER_OPTION_NAME and self.values in (
            (),
            (PLACEHOLDER_OPTION_VALUE,),
        )


@dataclass(slots=True, frozen=True)
class Metafield:
    namespace: str
    key: str
    value: str
    type: str = "single_line_text_field"


@dataclass(slots=True, frozen=True)
class RemoteVariant:
    id: str
    sku: str | None
    price: Decimal | None = None
    option_values: tuple[str, ...] = ()
    inventory_item_id: str | None = None
    inventory_levels: dict[str, int] = field(default_factory=dict)

    @property
    def total_inventory(self) -> int:
        return sum(self.inventory_levels.values())


@dataclass(slots=True, frozen=True)
class RemoteCatalogEntry:
    id: str
    title: str
    description: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    variants: tuple[RemoteVariant, ...] = ()
    options: tuple[ProductOption, ...] = ()
    metafields: tuple[Metafield, ...] = ()
    image_urls: tuple[str, ...] = ()
    updated_at: datetime | None = None

    @property
    def sku(self) -> str | None:
        """Business key: the SKU of the first variant."""

        if not self.variants:
            return None
        return self.variants[0].sku

    @property
    def image_count(self) -> int:
        return len(self.image_urls)

    @property
    def variant(self) -> RemoteVariant:
        if len(self.variants) != 1:
            raise VariantInvariantError(
                f"Entry {self.id} has {len(self.variants)} variants, expected exactly 1"
            )
        return self.variants[0]

    @property
    def real_options(self) -> tuple[ProductOption, ...]:
        return tuple(option for option in self.options if not option.is_placeholder)

    @property
    def has_placeholder_option(self) -> bool:
        return any(option.is_placeholder for option in self.options)

    def metafield(self, namespace: str, key: str) -> str | None:
        for item in self.metafields:
            if item.namespace == namespace and item.key == key:
                return item.value
        return None


@dataclass(slots=True, frozen=True, kw_only=True)
class EntryPatch:
    """Scalar fields of an entry. Options, inventory and memberships are handled separately."""

    title: str
    description: str | None
    vendor: str | None
    product_type: str | None
    tags: tuple[str, ...] = ()
    price: Decimal | None = None
    metafields: tuple[Metafield, ...] = ()
    image_urls: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class EntryDraft(EntryPatch):
    """Everything needed to create an entry with its single base variant."""

    sku: str
