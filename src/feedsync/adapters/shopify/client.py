"""Remote catalog adapter over the Shopify Admin GraphQL API."""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from feedsync.adapters.http_resilience import ResilientClient, RetryablePayloadError
from feedsync.domain.errors import (
    CatalogUserError,
    EntryNotFoundError,
    RemoteCatalogError,
    TransientCatalogError,
)

from . import queries
from .schema import (
    THROTTLED,
    CollectionConnection,
    CollectionRefConnection,
    GraphQLResponse,
    LocationConnection,
    ProductConnection,
    ProductNode,
    UserError,
    VariantNode,
)
from .translator import (
    base_variant_input,
    format_price,
    media_inputs,
    option_inputs,
    option_value_inputs,
    product_input,
    translate_product,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence

    from feedsync.config.http_resilience import ResilienceConfig
    from feedsync.config.shopify import ShopifyConfig
    from feedsync.domain.model import EntryDraft, EntryPatch, OptionAxis, RemoteCatalogEntry
    from feedsync.domain.ports.catalog import RemoteCatalog

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

type GraphQLData = dict[str, Any]


async def raise_on_throttle(response: httpx.Response) -> None:
    """Response hook turning a throttled GraphQL payload into a retryable HTTP error."""

    if response.status_code != httpx.codes.OK:
        return
    await response.aread()
    try:
        payload = response.json()
    except json.JSONDecodeError:
        return
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list):
        return
    for error in errors:
        extensions = error.get("extensions") if isinstance(error, dict) else None
        if isinstance(extensions, dict) and extensions.get("code") == THROTTLED:
            raise RetryablePayloadError("Shopify throttled the request", response=response)


def _check_user_errors(data: GraphQLData, mutation: str, *, key: str = "userErrors") -> None:
    result = data.get(mutation) or {}
    errors = [UserError.model_validate(item) for item in result.get(key) or []]
    if not errors:
        return
    message = "; ".join(error.message for error in errors)
    fields = tuple(".".join(error.field) for error in errors if error.field)
    log.error("Shopify rejected %s: %s", mutation, message)
    raise CatalogUserError(f"{mutation}: {message}", fields=fields)


class ShopifyCatalog:
    """``RemoteCatalog`` backed by the Shopify Admin GraphQL API.

    Every public method is synchronous and opens a short-lived resilient client.
    """

    def __init__(
        self,
        *,
        config: ShopifyConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._config = config
        self._resilience = replace(config.resilience(), response_hooks=(raise_on_throttle,))
        self._client_factory = client_factory or ResilientClient
        self._page_size = page_size
        # sku -> product created but not yet given its base variant; a retry resumes it
        self._unfinished_creates: dict[str, str] = {}

    # entries

    def create_entry(self, draft: EntryDraft) -> RemoteCatalogEntry:
        async def create(client: ResilientClient) -> RemoteCatalogEntry:
            unfinished = self._unfinished_creates.get(draft.sku)
            if unfinished is None:
                data = await self._execute(
                    client,
                    queries.CREATE_PRODUCT,
                    {
                        "product": product_input(draft),
                        "media": media_inputs(draft.image_urls) or None,
                    },
                )
                _check_user_errors(data, "productCreate")
                product = ProductNode.model_validate(data["productCreate"]["product"])
                self._unfinished_creates[draft.sku] = product.id
            else:
                log.warning("Resuming creation of product %s for sku %s", unfinished, draft.sku)
                try:
                    product = await self._require_product(client, unfinished)
                except EntryNotFoundError:
                    del self._unfinished_creates[draft.sku]
                    raise
            if not product.variants.nodes:
                raise RemoteCatalogError(f"Created product {product.id} has no base variant")
            data = await self._execute(
                client,
                queries.UPDATE_VARIANTS,
                {
                    "productId": product.id,
                    "variants": [base_variant_input(draft, product.variants.nodes[0].id)],
                },
            )
            _check_user_errors(data, "productVariantsBulkUpdate")
            entry = translate_product(await self._require_product(client, product.id))
            del self._unfinished_creates[draft.sku]
            log.debug("Created product %s for sku %s", product.id, draft.sku)
            return entry

        return self._call(create)

    def update_entry(self, entry_id: str, patch: EntryPatch) -> None:
        async def update(client: ResilientClient) -> None:
            product = await self._require_product(client, entry_id)
            data = await self._execute(
                client,
                queries.UPDATE_PRODUCT,
                {"product": product_input(patch, entry_id=entry_id)},
            )
            _check_user_errors(data, "productUpdate")

            variants = product.variants.nodes
            if patch.price is not None and variants and variants[0].price != patch.price:
                data = await self._execute(
                    client,
                    queries.UPDATE_VARIANTS,
                    {
                        "productId": entry_id,
                        "variants": [{"id": variants[0].id, "price": format_price(patch.price)}],
                    },
                )
                _check_user_errors(data, "productVariantsBulkUpdate")

            current = [media.source_url for media in product.media.nodes]
            if current != list(patch.image_urls):
                await self._replace_media(client, product, patch.image_urls)

        self._call(update)

    def delete_entry(self, entry_id: str) -> None:
        async def delete(client: ResilientClient) -> None:
            await self._require_product(client, entry_id)
            data = await self._execute(client, queries.DELETE_PRODUCT, {"input": {"id": entry_id}})
            _check_user_errors(data, "productDelete")
            log.debug("Deleted product %s", entry_id)

        self._call(delete)

    def get_entry(self, entry_id: str) -> RemoteCatalogEntry | None:
        async def get(client: ResilientClient) -> RemoteCatalogEntry | None:
            product = await self._fetch_product(client, entry_id)
            return translate_product(product) if product is not None else None

        return self._call(get)

    def find_by_sku(self, sku: str) -> RemoteCatalogEntry | None:
        escaped = sku.replace("\\", "\\\\").replace('"', '\\"')

        async def find(client: ResilientClient) -> RemoteCatalogEntry | None:
            data = await self._execute(
                client, queries.FIND_VARIANT_BY_SKU, {"query": f'sku:"{escaped}"'}
            )
            # search is fuzzy; only an exact sku match counts
            for node in (data.get("productVariants") or {}).get("nodes") or []:
                if node.get("sku") == sku and node.get("product"):
                    return translate_product(ProductNode.model_validate(node["product"]))
            return None

        return self._call(find)

    def list_all(self) -> list[RemoteCatalogEntry]:
        async def list_products(client: ResilientClient) -> list[RemoteCatalogEntry]:
            entries: list[RemoteCatalogEntry] = []
            after: str | None = None
            while True:
                data = await self._execute(
                    client, queries.LIST_PRODUCTS, {"first": self._page_size, "after": after}
                )
                page = ProductConnection.model_validate(data["products"])
                entries.extend(translate_product(product) for product in page.nodes)
                if not page.page_info.has_next_page or not page.page_info.end_cursor:
                    break
                after = page.page_info.end_cursor
            log.debug("Listed %s products", len(entries))
            return entries

        return self._call(list_products)

    # options

    def create_options(self, entry_id: str, axes: Sequence[OptionAxis]) -> None:
        if not axes:
            return

        async def create(client: ResilientClient) -> None:
            data = await self._execute(
                client,
                queries.CREATE_OPTIONS,
                {"productId": entry_id, "options": option_inputs(axes)},
            )
            _check_user_errors(data, "productOptionsCreate")

        self._call(create)

    def remove_options(self, entry_id: str) -> None:
        async def remove(client: ResilientClient) -> None:
            entry = translate_product(await self._require_product(client, entry_id))
            option_ids = [option.id for option in entry.real_options if option.id is not None]
            if not option_ids:
                return
            data = await self._execute(
                client,
                queries.DELETE_OPTIONS,
                {"productId": entry_id, "options": option_ids},
            )
            _check_user_errors(data, "productOptionsDelete")

        self._call(remove)

    def update_variant_options(self, entry_id: str, variant_id: str, values: Sequence[str]) -> None:
        async def update(client: ResilientClient) -> None:
            entry = translate_product(await self._require_product(client, entry_id))
            options = entry.real_options
            if len(options) != len(values):
                raise CatalogUserError(
                    f"Product {entry_id} has {len(options)} options, got {len(values)} values"
                )
            data = await self._execute(
                client,
                queries.UPDATE_VARIANTS,
                {
                    "productId": entry_id,
                    "variants": [
                        {"id": variant_id, "optionValues": option_value_inputs(options, values)}
                    ],
                },
            )
            _check_user_errors(data, "productVariantsBulkUpdate")

        self._call(update)

    # inventory

    def set_inventory_level(self, variant_id: str, location_id: str, level: int) -> None:
        async def set_level(client: ResilientClient) -> None:
            data = await self._execute(client, queries.VARIANT_INVENTORY, {"id": variant_id})
            if data.get("productVariant") is None:
                raise EntryNotFoundError(variant_id)
            variant = VariantNode.model_validate(data["productVariant"])
            item = variant.inventory_item
            if item is None:
                raise RemoteCatalogError(f"Variant {variant_id} has no inventory item")

            stocked = {node.location.id for node in item.inventory_levels.nodes}
            if location_id not in stocked:
                data = await self._execute(
                    client,
                    queries.ACTIVATE_INVENTORY,
                    {"inventoryItemId": item.id, "locationId": location_id},
                )
                _check_user_errors(data, "inventoryActivate")

            data = await self._execute(
                client,
                queries.SET_INVENTORY,
                {
                    "input": {
                        "name": "available",
                        "reason": "correction",
                        "ignoreCompareQuantity": True,
                        "quantities": [
                            {
                                "inventoryItemId": item.id,
                                "locationId": location_id,
                                "quantity": level,
                            }
                        ],
                    }
                },
            )
            _check_user_errors(data, "inventorySetQuantities")
            log.debug("Set inventory of %s at %s to %s", variant_id, location_id, level)

        self._call(set_level)

    def list_locations(self) -> list[str]:
        async def list_active(client: ResilientClient) -> list[str]:
            data = await self._execute(client, queries.LIST_LOCATIONS, {})
            locations = LocationConnection.model_validate(data["locations"])
            return [location.id for location in locations.nodes if location.is_active]

        return self._call(list_active)

    # collections

    def add_collection_membership(self, entry_id: str, collection_id: str) -> None:
        async def add(client: ResilientClient) -> None:
            data = await self._execute(
                client,
                queries.ADD_TO_COLLECTION,
                {"id": collection_id, "productIds": [entry_id]},
            )
            _check_user_errors(data, "collectionAddProducts")

        self._call(add)

    def remove_collection_membership(self, entry_id: str, collection_id: str) -> None:
        async def remove(client: ResilientClient) -> None:
            data = await self._execute(
                client,
                queries.REMOVE_FROM_COLLECTION,
                {"id": collection_id, "productIds": [entry_id]},
            )
            _check_user_errors(data, "collectionRemoveProducts")

        self._call(remove)

    def list_collection_memberships(self, entry_id: str) -> frozenset[str]:
        async def memberships(client: ResilientClient) -> frozenset[str]:
            data = await self._execute(client, queries.PRODUCT_COLLECTIONS, {"id": entry_id})
            product = data.get("product")
            if product is None:
                raise EntryNotFoundError(entry_id)
            collections = CollectionRefConnection.model_validate(product["collections"])
            return frozenset(node.id for node in collections.nodes)

        return self._call(memberships)

    def list_collections(self) -> dict[str, str]:
        async def list_all(client: ResilientClient) -> dict[str, str]:
            ids_by_title: dict[str, str] = {}
            after: str | None = None
            while True:
                data = await self._execute(
                    client, queries.LIST_COLLECTIONS, {"first": self._page_size, "after": after}
                )
                page = CollectionConnection.model_validate(data["collections"])
                for collection in page.nodes:
                    ids_by_title.setdefault(collection.title, collection.id)
                if not page.page_info.has_next_page or not page.page_info.end_cursor:
                    return ids_by_title
                after = page.page_info.end_cursor

        return self._call(list_all)

    def create_collection(self, title: str) -> str:
        async def create(client: ResilientClient) -> str:
            data = await self._execute(
                client, queries.CREATE_COLLECTION, {"input": {"title": title}}
            )
            _check_user_errors(data, "collectionCreate")
            collection_id = data["collectionCreate"]["collection"]["id"]
            log.info("Created collection %r (%s)", title, collection_id)
            return collection_id

        return self._call(create)

    # transport

    def _call[T](self, operation: Callable[[ResilientClient], Coroutine[Any, Any, T]]) -> T:
        async def run() -> T:
            async with self._client_factory(self._resilience) as client:
                return await operation(client)

        return asyncio.run(run())

    async def _execute(
        self,
        client: ResilientClient,
        query: str,
        variables: dict[str, Any],
    ) -> GraphQLData:
        try:
            response = await client.post_json({"query": query, "variables": variables})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == httpx.codes.TOO_MANY_REQUESTS or httpx.codes.is_server_error(status):
                raise TransientCatalogError(f"Shopify responded with {status}") from exc
            raise RemoteCatalogError(f"Shopify responded with {status}") from exc
        except RetryablePayloadError as exc:
            raise TransientCatalogError(str(exc)) from exc
        except httpx.TransportError as exc:
            raise TransientCatalogError(f"Shopify request failed: {exc}") from exc

        payload = GraphQLResponse.model_validate(response.json())
        if payload.errors:
            message = "; ".join(error.message for error in payload.errors)
            if any(error.is_throttled for error in payload.errors):
                raise TransientCatalogError(message)
            raise RemoteCatalogError(f"Shopify GraphQL error: {message}")
        if payload.data is None:
            raise RemoteCatalogError("Unexpected Shopify response payload")
        return payload.data

    async def _fetch_product(self, client: ResilientClient, entry_id: str) -> ProductNode | None:
        data = await self._execute(client, queries.GET_PRODUCT, {"id": entry_id})
        product = data.get("product")
        return ProductNode.model_validate(product) if product is not None else None

    async def _require_product(self, client: ResilientClient, entry_id: str) -> ProductNode:
        product = await self._fetch_product(client, entry_id)
        if product is None:
            raise EntryNotFoundError(entry_id)
        return product

    async def _replace_media(
        self,
        client: ResilientClient,
        product: ProductNode,
        image_urls: Sequence[str],
    ) -> None:
        media_ids = [media.id for media in product.media.nodes]
        if media_ids:
            data = await self._execute(
                client,
                queries.DELETE_MEDIA,
                {"productId": product.id, "mediaIds": media_ids},
            )
            _check_user_errors(data, "productDeleteMedia", key="mediaUserErrors")
        if image_urls:
            data = await self._execute(
                client,
                queries.CREATE_MEDIA,
                {"productId": product.id, "media": media_inputs(image_urls)},
            )
            _check_user_errors(data, "productCreateMedia", key="mediaUserErrors")
        log.debug("Replaced %s media with %s on %s", len(media_ids), len(image_urls), product.id)


if TYPE_CHECKING:
    _catalog_check: RemoteCatalog = ShopifyCatalog(config=ShopifyConfig("shop", "token"))
