from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from feedsync.domain.listing import (
    EBAY_NAMESPACE,
    GOOGLE_NAMESPACE,
    SEO_NAMESPACE,
    build_draft,
    build_patch,
    description_html,
)
from tests.support.records import make_jewelry, make_record

if TYPE_CHECKING:
    from feedsync.domain.model import Metafield


def _metafields(metafields: tuple[Metafield, ...]) -> dict[tuple[str, str], str]:
    return {(item.namespace, item.key): item.value for item in metafields}


def test_build_draft_carries_sku_price_and_images() -> None:
    record = make_record("GW-7")

    draft = build_draft(record)

    assert draft.sku == "GW-7"
    assert draft.title == "Rolex Submariner 16610 Black Dial"
    assert draft.price == Decimal(8500)
    assert draft.vendor == "Rolex"
    assert draft.product_type == "Watches"
    assert draft.image_urls == record.image_paths
    assert draft.tags == ("Rolex", "Watches", "Gents", "Stainless Steel")


def test_build_patch_falls_back_to_tag_number_title() -> None:
    patch = build_patch(make_record("GW-8", description=None))

    assert patch.title == "GW-8"


def test_secondary_prices_do_not_reach_the_listing() -> None:
    record = make_record(price_retail="9900", price_wholesale="4000")

    patch = build_patch(record)
    values = {item.value for item in patch.metafields}

    assert patch.price == Decimal(8500)
    assert "9900" not in values
    assert "4000" not in values


def test_metafields_cover_seo_google_and_ebay() -> None:
    fields = _metafields(build_patch(make_record()).metafields)

    assert fields[(SEO_NAMESPACE, "title_tag")] == "Rolex Submariner 16610 Stainless Steel"
    assert fields[(GOOGLE_NAMESPACE, "gender")] == "Male"
    assert fields[(GOOGLE_NAMESPACE, "condition")] == "Used"
    assert fields[(EBAY_NAMESPACE, "brand")] == "Rolex"
    assert (EBAY_NAMESPACE, "strap") not in fields


def test_jewelry_gender_defaults_to_female() -> None:
    fields = _metafields(build_patch(make_jewelry()).metafields)

    assert fields[(GOOGLE_NAMESPACE, "gender")] == "Female"


def test_description_html_escapes_values() -> None:
    html = description_html(make_record(description="Tom & Jerry <Special>", dial=None))

    assert "<p>Tom &amp; Jerry &lt;Special&gt;</p>" in html
    assert "<li><strong>Brand:</strong> Rolex</li>" in html
    assert "Dial:" not in html
