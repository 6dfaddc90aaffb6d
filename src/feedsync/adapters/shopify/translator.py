"""Translate Shopify payloads into catalog projections and mutation inputs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from feedsync.domain.model import (
    Metafield,
    ProductOption,
    RemoteCatalogEntry,
    RemoteVariant,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal

    from feedsync.domain.model import EntryDraft, EntryPatch, OptionAxis

    from .schema import ProductNode, VariantNode

type GraphQLInput = dict[str, Any]


def translate_product(product: ProductNode) -> RemoteCatalogEntry:
    options = tuple(
        ProductOption(
            name=option.name,
            position=option.position,
            values=tuple(option.values),
            id=option.id,
        )
        for option in sorted(product.options, key=lambda option: option.position)
    )
    positions = {option.name: option.position for option in options}
    return RemoteCatalogEntry(
        id=product.id,
        title=product.title,
        description=product.description_html,
        vendor=product.vendor,
        product_type=product.product_type,
        variants=tuple(
            _translate_variant(variant, positions) for variant in product.variants.nodes
        ),
        options=options,
        metafields=tuple(
            Metafield(
                namespace=metafield.namespace,
                key=metafield.key,
                value=metafield.value,
                type=metafield.type,
            )
            for metafield in product.metafields.nodes
        ),
        image_urls=tuple(
            url for media in product.media.nodes if (url := media.source_url) is not None
        ),
        updated_at=product.updated_at,
    )


def _translate_variant(variant: VariantNode, positions: dict[str, int]) -> RemoteVariant:
    selected = sorted(
        variant.selected_options,
        key=lambda option: positions.get(option.name, len(positions) + 1),
    )
    levels: dict[str, int] = {}
    inventory_item_id: str | None = None
    if variant.inventory_item is not None:
        inventory_item_id = variant.inventory_item.id
        for level in variant.inventory_item.inventory_levels.nodes:
            levels[level.location.id] = level.available
    return RemoteVariant(
        id=variant.id,
        sku=variant.sku,
        price=variant.price,
        option_values=tuple(option.value for option in selected),
        inventory_item_id=inventory_item_id,
        inventory_levels=levels,
    )


def product_input(patch: EntryPatch, *, entry_id: str | None = None) -> GraphQLInput:
    payload: GraphQLInput = {
        "title": patch.title,
        "descriptionHtml": patch.description or "",
        "vendor": patch.vendor or "",
        "productType": patch.product_type or "",
        "tags": list(patch.tags),
        "metafields": [metafield_input(metafield) for metafield in patch.metafields],
    }
    if entry_id is not None:
        payload["id"] = entry_id
    else:
        payload["status"] = "ACTIVE"
    return payload


def metafield_input(metafield: Metafield) -> GraphQLInput:
    return {
        "namespace": metafield.namespace,
        "key": metafield.key,
        "value": metafield.value,
        "type": metafield.type,
    }


def media_inputs(image_urls: Sequence[str]) -> list[GraphQLInput]:
    # alt carries the feed path so the remote image list can be compared against the feed.
    return [
        {"originalSource": url, "alt": url, "mediaContentType": "IMAGE"} for url in image_urls
    ]


def base_variant_input(draft: EntryDraft, variant_id: str) -> GraphQLInput:
    payload: GraphQLInput = {
        "id": variant_id,
        "inventoryPolicy": "DENY",
        "inventoryItem": {"sku": draft.sku, "tracked": True},
    }
    if draft.price is not None:
        payload["price"] = format_price(draft.price)
    return payload


def option_inputs(axes: Sequence[OptionAxis]) -> list[GraphQLInput]:
    return [
        {"name": axis.name, "position": axis.position, "values": [{"name": axis.value}]}
        for axis in axes
    ]


def option_value_inputs(
    options: Sequence[ProductOption], values: Sequence[str]
) -> list[GraphQLInput]:
    return [
        {"optionName": option.name, "name": value}
        for option, value in zip(options, values, strict=True)
    ]


def format_price(price: Decimal) -> str:
    return f"{price:.2f}"
