"""Pydantic models describing Shopify Admin GraphQL payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

THROTTLED = "THROTTLED"


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ShopifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class ErrorExtensions(ShopifyBaseModel):
    code: str | None = None


class GraphQLError(ShopifyBaseModel):
    message: str
    extensions: ErrorExtensions | None = None

    @property
    def is_throttled(self) -> bool:
        return self.extensions is not None and self.extensions.code == THROTTLED


class GraphQLResponse(ShopifyBaseModel):
    data: dict[str, Any] | None = None
    errors: list[GraphQLError] = Field(default_factory=list)


class UserError(ShopifyBaseModel):
    field: list[str] | None = None
    message: str
    code: str | None = None


class PageInfo(ShopifyBaseModel):
    has_next_page: bool = False
    end_cursor: str | None = None


class NodeRef(ShopifyBaseModel):
    id: str


class Quantity(ShopifyBaseModel):
    name: str
    quantity: int


class InventoryLevelNode(ShopifyBaseModel):
    location: NodeRef
    quantities: list[Quantity] = Field(default_factory=list)

    @property
    def available(self) -> int:
        for quantity in self.quantities:
            if quantity.name == "available":
                return quantity.quantity
        return 0


class InventoryLevelConnection(ShopifyBaseModel):
    nodes: list[InventoryLevelNode] = Field(default_factory=list)


class InventoryItemNode(ShopifyBaseModel):
    id: str
    inventory_levels: InventoryLevelConnection = Field(default_factory=InventoryLevelConnection)


class SelectedOption(ShopifyBaseModel):
    name: str
    value: str


class VariantNode(ShopifyBaseModel):
    id: str
    sku: str | None = None
    price: Decimal | None = None
    selected_options: list[SelectedOption] = Field(default_factory=list)
    inventory_item: InventoryItemNode | None = None

    _normalize_sku = field_validator("sku", mode="before")(_blank_to_none)


class VariantConnection(ShopifyBaseModel):
    nodes: list[VariantNode] = Field(default_factory=list)


class OptionNode(ShopifyBaseModel):
    id: str | None = None
    name: str
    position: int
    values: list[str] = Field(default_factory=list)


class MetafieldNode(ShopifyBaseModel):
    namespace: str
    key: str
    value: str
    type: str = "single_line_text_field"


class MetafieldConnection(ShopifyBaseModel):
    nodes: list[MetafieldNode] = Field(default_factory=list)


class ImageRef(ShopifyBaseModel):
    url: str


class MediaNode(ShopifyBaseModel):
    id: str
    alt: str | None = None
    image: ImageRef | None = None

    _normalize_alt = field_validator("alt", mode="before")(_blank_to_none)

    @property
    def source_url(self) -> str | None:
        """Feed image path the media was created from (kept in ``alt``)."""

        if self.alt:
            return self.alt
        return self.image.url if self.image else None


class MediaConnection(ShopifyBaseModel):
    nodes: list[MediaNode] = Field(default_factory=list)


class ProductNode(ShopifyBaseModel):
    id: str
    title: str
    description_html: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    updated_at: datetime | None = None
    options: list[OptionNode] = Field(default_factory=list)
    media: MediaConnection = Field(default_factory=MediaConnection)
    metafields: MetafieldConnection = Field(default_factory=MetafieldConnection)
    variants: VariantConnection = Field(default_factory=VariantConnection)

    _normalize_text = field_validator("vendor", "product_type", mode="before")(_blank_to_none)


class ProductConnection(ShopifyBaseModel):
    nodes: list[ProductNode] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)


class CollectionNode(ShopifyBaseModel):
    id: str
    title: str


class CollectionConnection(ShopifyBaseModel):
    nodes: list[CollectionNode] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)


class CollectionRefConnection(ShopifyBaseModel):
    nodes: list[NodeRef] = Field(default_factory=list)


class LocationNode(ShopifyBaseModel):
    id: str
    is_active: bool = True


class LocationConnection(ShopifyBaseModel):
    nodes: list[LocationNode] = Field(default_factory=list)
