from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest
from tenacity import wait_none

from feedsync.adapters.shopify import ShopifyCatalog, raise_on_throttle
from feedsync.config import RetryablePayloadError, ShopifyConfig
from feedsync.domain.errors import (
    CatalogUserError,
    EntryNotFoundError,
    RemoteCatalogError,
    TransientCatalogError,
)
from feedsync.domain.listing import build_draft, build_patch
from feedsync.domain.model import OptionAxis
from feedsync.domain.sync import RetryingCatalog
from tests.support.records import make_record
from tests.support.shopify_payloads import (
    ITEM_ID,
    LOCATION_ID,
    PRODUCT_ID,
    VARIANT_ID,
    GraphQLStub,
    data,
    make_client_factory,
    product_payload,
    throttled,
    user_errors,
)

CONFIG = ShopifyConfig("example.myshopify.com", "shpat_test")
OK = {"userErrors": []}


def _catalog(stub: GraphQLStub, *, page_size: int = 50) -> ShopifyCatalog:
    return ShopifyCatalog(
        config=CONFIG, client_factory=make_client_factory(stub), page_size=page_size
    )


def test_get_entry_translates_product() -> None:
    stub = GraphQLStub().on("GetProduct", data({"product": product_payload()}))

    entry = _catalog(stub).get_entry(PRODUCT_ID)

    assert entry is not None
    assert entry.sku == "GW-1"
    assert entry.variant.price == Decimal("8500.00")
    assert entry.variant.option_values == ("Black",)
    assert entry.variant.inventory_levels == {LOCATION_ID: 1}
    assert entry.image_urls == ("https://images.example.com/GW-1/1.jpg",)
    assert stub.variables("GetProduct") == [{"id": PRODUCT_ID}]


def test_get_entry_returns_none_for_unknown_id() -> None:
    stub = GraphQLStub().on("GetProduct", data({"product": None}))

    assert _catalog(stub).get_entry(PRODUCT_ID) is None


def test_find_by_sku_requires_exact_match() -> None:
    stub = GraphQLStub().on(
        "FindVariantBySku",
        data(
            {
                "productVariants": {
                    "nodes": [
                        {
                            "sku": "GW-10",
                            "product": product_payload(product_id="p10", sku="GW-10"),
                        },
                        {"sku": "GW-1", "product": product_payload()},
                    ]
                }
            }
        ),
        data({"productVariants": {"nodes": [{"sku": "GW-10", "product": product_payload()}]}}),
    )
    catalog = _catalog(stub)

    found = catalog.find_by_sku("GW-1")
    missing = catalog.find_by_sku("GW-1")

    assert found is not None
    assert found.id == PRODUCT_ID
    assert missing is None
    assert stub.variables("FindVariantBySku")[0] == {"query": 'sku:"GW-1"'}


def test_list_all_follows_pagination() -> None:
    stub = GraphQLStub().on(
        "ListProducts",
        data(
            {
                "products": {
                    "nodes": [product_payload(product_id="p1", sku="GW-1")],
                    "pageInfo": {"hasNextPage": True, "endCursor": "cursor-1"},
                }
            }
        ),
        data(
            {
                "products": {
                    "nodes": [product_payload(product_id="p2", sku="GW-2")],
                    "pageInfo": {"hasNextPage": False, "endCursor": None},
                }
            }
        ),
    )

    entries = _catalog(stub, page_size=1).list_all()

    assert [entry.sku for entry in entries] == ["GW-1", "GW-2"]
    assert [variables["after"] for variables in stub.variables("ListProducts")] == [
        None,
        "cursor-1",
    ]


def test_create_entry_sets_base_variant_then_refetches() -> None:
    placeholder = (("Title", "Default Title"),)
    created = product_payload(sku=None, options=placeholder)
    stub = (
        GraphQLStub()
        .on("CreateProduct", data({"productCreate": {"product": created, "userErrors": []}}))
        .on("UpdateVariants", data({"productVariantsBulkUpdate": OK}))
        .on("GetProduct", data({"product": product_payload(options=placeholder)}))
    )

    entry = _catalog(stub).create_entry(build_draft(make_record("GW-1")))

    assert stub.operations() == ["CreateProduct", "UpdateVariants", "GetProduct"]
    product = stub.variables("CreateProduct")[0]["product"]
    assert product["status"] == "ACTIVE"
    assert product["vendor"] == "Rolex"
    media = stub.variables("CreateProduct")[0]["media"]
    assert [item["alt"] for item in media] == [item["originalSource"] for item in media]
    variant = stub.variables("UpdateVariants")[0]["variants"][0]
    assert variant == {
        "id": VARIANT_ID,
        "inventoryPolicy": "DENY",
        "inventoryItem": {"sku": "GW-1", "tracked": True},
        "price": "8500.00",
    }
    assert entry.sku == "GW-1"
    assert entry.has_placeholder_option


def test_retried_create_resumes_instead_of_creating_twice() -> None:
    placeholder = (("Title", "Default Title"),)
    created = product_payload(sku=None, options=placeholder)
    stub = (
        GraphQLStub()
        .on("CreateProduct", data({"productCreate": {"product": created, "userErrors": []}}))
        .on("UpdateVariants", throttled(), data({"productVariantsBulkUpdate": OK}))
        .on(
            "GetProduct",
            data({"product": created}),
            data({"product": product_payload(options=placeholder)}),
        )
    )
    catalog = RetryingCatalog(_catalog(stub), attempts=3, wait=wait_none())

    entry = catalog.create_entry(build_draft(make_record("GW-1")))

    assert stub.operations() == [
        "CreateProduct",
        "UpdateVariants",
        "GetProduct",
        "UpdateVariants",
        "GetProduct",
    ]
    assert entry.id == PRODUCT_ID
    assert entry.sku == "GW-1"


def test_user_errors_become_catalog_user_error() -> None:
    stub = GraphQLStub().on("CreateProduct", user_errors("productCreate", "Title can't be blank"))

    with pytest.raises(CatalogUserError) as exc:
        _catalog(stub).create_entry(build_draft(make_record("GW-1")))

    assert "Title can't be blank" in str(exc.value)
    assert exc.value.fields == ("input.title",)


def test_update_entry_touches_price_and_media_only_when_different() -> None:
    stub = (
        GraphQLStub()
        .on("GetProduct", data({"product": product_payload()}))
        .on("UpdateProduct", data({"productUpdate": OK}))
        .on("UpdateVariants", data({"productVariantsBulkUpdate": OK}))
        .on("DeleteMedia", data({"productDeleteMedia": {"mediaUserErrors": []}}))
        .on("CreateMedia", data({"productCreateMedia": {"mediaUserErrors": []}}))
    )

    _catalog(stub).update_entry(PRODUCT_ID, build_patch(make_record("GW-1", price="9000")))

    assert stub.operations() == [
        "GetProduct",
        "UpdateProduct",
        "UpdateVariants",
        "DeleteMedia",
        "CreateMedia",
    ]
    assert stub.variables("UpdateProduct")[0]["product"]["id"] == PRODUCT_ID
    assert stub.variables("UpdateVariants")[0]["variants"] == [
        {"id": VARIANT_ID, "price": "9000.00"}
    ]
    assert len(stub.variables("CreateMedia")[0]["media"]) == 2


def test_update_entry_skips_matching_price_and_media() -> None:
    record = make_record("GW-1")
    stub = (
        GraphQLStub()
        .on("GetProduct", data({"product": product_payload(image_urls=record.image_paths)}))
        .on("UpdateProduct", data({"productUpdate": OK}))
    )

    _catalog(stub).update_entry(PRODUCT_ID, build_patch(record))

    assert stub.operations() == ["GetProduct", "UpdateProduct"]


def test_delete_entry_of_missing_product_raises_not_found() -> None:
    stub = GraphQLStub().on("GetProduct", data({"product": None}))

    with pytest.raises(EntryNotFoundError):
        _catalog(stub).delete_entry(PRODUCT_ID)

    assert "DeleteProduct" not in stub.operations()


def test_throttled_payload_is_transient() -> None:
    stub = GraphQLStub().on("GetProduct", throttled())

    with pytest.raises(TransientCatalogError):
        _catalog(stub).get_entry(PRODUCT_ID)


@pytest.mark.parametrize("status", [429, 502, 503])
def test_retryable_statuses_are_transient(status: int) -> None:
    stub = GraphQLStub().on("ListLocations", httpx.Response(status))

    with pytest.raises(TransientCatalogError):
        _catalog(stub).list_locations()


def test_client_errors_are_not_transient() -> None:
    stub = GraphQLStub().on("ListLocations", httpx.Response(401))

    with pytest.raises(RemoteCatalogError) as exc:
        _catalog(stub).list_locations()

    assert not isinstance(exc.value, TransientCatalogError)


def test_graphql_errors_are_remote_errors() -> None:
    stub = GraphQLStub().on(
        "ListLocations", httpx.Response(200, json={"errors": [{"message": "Field missing"}]})
    )

    with pytest.raises(RemoteCatalogError, match="Field missing"):
        _catalog(stub).list_locations()


def test_set_inventory_level_activates_unstocked_location() -> None:
    stub = (
        GraphQLStub()
        .on(
            "VariantInventory",
            data(
                {
                    "productVariant": {
                        "id": VARIANT_ID,
                        "inventoryItem": {"id": ITEM_ID, "inventoryLevels": {"nodes": []}},
                    }
                }
            ),
        )
        .on("ActivateInventory", data({"inventoryActivate": OK}))
        .on("SetInventory", data({"inventorySetQuantities": OK}))
    )

    _catalog(stub).set_inventory_level(VARIANT_ID, LOCATION_ID, 0)

    assert stub.operations() == ["VariantInventory", "ActivateInventory", "SetInventory"]
    request = stub.variables("SetInventory")[0]["input"]
    assert request["name"] == "available"
    assert request["quantities"] == [
        {"inventoryItemId": ITEM_ID, "locationId": LOCATION_ID, "quantity": 0}
    ]


def test_set_inventory_level_of_unknown_variant_raises_not_found() -> None:
    stub = GraphQLStub().on("VariantInventory", data({"productVariant": None}))

    with pytest.raises(EntryNotFoundError):
        _catalog(stub).set_inventory_level(VARIANT_ID, LOCATION_ID, 1)


def test_remove_options_deletes_real_options_only() -> None:
    stub = (
        GraphQLStub()
        .on(
            "GetProduct",
            data({"product": product_payload(options=(("Color", "Black"), ("Size", "40mm")))}),
            data({"product": product_payload(options=(("Title", "Default Title"),))}),
        )
        .on("DeleteOptions", data({"productOptionsDelete": OK}))
    )
    catalog = _catalog(stub)

    catalog.remove_options(PRODUCT_ID)
    catalog.remove_options(PRODUCT_ID)

    assert stub.operations() == ["GetProduct", "DeleteOptions", "GetProduct"]
    assert stub.variables("DeleteOptions")[0]["options"] == [
        "gid://shopify/ProductOption/1",
        "gid://shopify/ProductOption/2",
    ]


def test_create_options_sends_axes_in_position_order() -> None:
    stub = GraphQLStub().on("CreateOptions", data({"productOptionsCreate": OK}))
    catalog = _catalog(stub)

    catalog.create_options(
        PRODUCT_ID, [OptionAxis("Color", 1, "Black"), OptionAxis("Size", 2, "40mm")]
    )
    catalog.create_options(PRODUCT_ID, [])

    assert stub.variables("CreateOptions") == [
        {
            "productId": PRODUCT_ID,
            "options": [
                {"name": "Color", "position": 1, "values": [{"name": "Black"}]},
                {"name": "Size", "position": 2, "values": [{"name": "40mm"}]},
            ],
        }
    ]


def test_update_variant_options_checks_value_count() -> None:
    stub = GraphQLStub().on("GetProduct", data({"product": product_payload()}))

    with pytest.raises(CatalogUserError):
        _catalog(stub).update_variant_options(PRODUCT_ID, VARIANT_ID, ["Black", "40mm"])

    assert "UpdateVariants" not in stub.operations()


def test_list_locations_skips_inactive() -> None:
    stub = GraphQLStub().on(
        "ListLocations",
        data(
            {
                "locations": {
                    "nodes": [
                        {"id": LOCATION_ID, "isActive": True},
                        {"id": "gid://shopify/Location/2", "isActive": False},
                    ]
                }
            }
        ),
    )

    assert _catalog(stub).list_locations() == [LOCATION_ID]


def test_list_collections_keeps_first_id_per_title() -> None:
    stub = GraphQLStub().on(
        "ListCollections",
        data(
            {
                "collections": {
                    "nodes": [{"id": "c1", "title": "Rolex"}],
                    "pageInfo": {"hasNextPage": True, "endCursor": "next"},
                }
            }
        ),
        data(
            {
                "collections": {
                    "nodes": [{"id": "c2", "title": "Rolex"}, {"id": "c3", "title": "Cartier"}],
                    "pageInfo": {"hasNextPage": False},
                }
            }
        ),
    )

    assert _catalog(stub).list_collections() == {"Rolex": "c1", "Cartier": "c3"}


def test_collection_memberships_round_trip() -> None:
    stub = (
        GraphQLStub()
        .on(
            "ProductCollections",
            data({"product": {"collections": {"nodes": [{"id": "c1"}, {"id": "c2"}]}}}),
            data({"product": None}),
        )
        .on("AddToCollection", data({"collectionAddProducts": OK}))
        .on("RemoveFromCollection", data({"collectionRemoveProducts": OK}))
        .on(
            "CreateCollection",
            data({"collectionCreate": {"collection": {"id": "c9", "title": "Rolex"}, **OK}}),
        )
    )
    catalog = _catalog(stub)

    assert catalog.list_collection_memberships(PRODUCT_ID) == {"c1", "c2"}
    with pytest.raises(EntryNotFoundError):
        catalog.list_collection_memberships(PRODUCT_ID)
    catalog.add_collection_membership(PRODUCT_ID, "c3")
    catalog.remove_collection_membership(PRODUCT_ID, "c1")
    assert catalog.create_collection("Rolex") == "c9"

    assert stub.variables("AddToCollection") == [{"id": "c3", "productIds": [PRODUCT_ID]}]
    assert stub.variables("CreateCollection") == [{"input": {"title": "Rolex"}}]


def test_requests_target_the_admin_graphql_endpoint() -> None:
    urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json={"data": {"locations": {"nodes": []}}})

    catalog = ShopifyCatalog(config=CONFIG, client_factory=make_client_factory(handler))

    assert catalog.list_locations() == []
    assert urls == ["https://example.myshopify.com/admin/api/2025-01/graphql.json"]


def test_throttle_hook_raises_retryable_error() -> None:
    request = httpx.Request("POST", CONFIG.graphql_url)
    response = throttled()
    response.request = request

    with pytest.raises(RetryablePayloadError):
        asyncio.run(raise_on_throttle(response))


def test_throttle_hook_ignores_successful_payloads() -> None:
    response = data({"shop": {"name": "Example"}})
    response.request = httpx.Request("POST", CONFIG.graphql_url)

    asyncio.run(raise_on_throttle(response))
