from __future__ import annotations

import pytest

from feedsync.domain.caches import CollectionDirectory
from feedsync.domain.errors import PartialMembershipError, TransientCatalogError
from feedsync.domain.memberships import CollectionAssigner
from tests.support.fake_catalog import InMemoryCatalog
from tests.support.records import make_jewelry, make_record


def _directory(catalog: InMemoryCatalog, assigner: CollectionAssigner) -> CollectionDirectory:
    return CollectionDirectory(catalog, assigner.titles)


def test_desired_titles_for_gents_rolex_over_band() -> None:
    titles = CollectionAssigner().desired_titles(make_record())

    assert titles == {"Mens Watches", "Rolex"}


def test_desired_titles_for_cheap_unisex_vintage_watch() -> None:
    record = make_record(
        designer="Omega",
        style="Unisex",
        price="3000",
        description="Vintage Omega Seamaster with diamond bezel",
    )

    titles = CollectionAssigner().desired_titles(record)

    assert titles == {
        "Mens Watches",
        "Womens Watches",
        "Under $5,000",
        "Other Brand",
        "Vintage Watches",
        "Diamond Watches",
    }


def test_desired_titles_for_jewelry() -> None:
    assert CollectionAssigner().desired_titles(make_jewelry()) == {"Vintage Jewelry"}


def test_fp_journe_maps_to_display_title() -> None:
    titles = CollectionAssigner().desired_titles(make_record(designer="FP Journe"))

    assert "F.P. Journe" in titles
    assert "Other Brand" not in titles


def test_diff_returns_additions_and_removals() -> None:
    to_add, to_remove = CollectionAssigner.diff(frozenset({"a", "b"}), frozenset({"b", "c"}))

    assert to_add == {"c"}
    assert to_remove == {"a"}


def test_apply_creates_missing_collections_and_adds_memberships() -> None:
    catalog = InMemoryCatalog()
    entry_id = catalog.seed_entry("GW-1")
    assigner = CollectionAssigner()

    to_add, to_remove = assigner.apply(
        catalog, entry_id, make_record("GW-1"), _directory(catalog, assigner)
    )

    assert catalog.collection_titles_of(entry_id) == {"Mens Watches", "Rolex"}
    assert len(to_add) == 2
    assert not to_remove
    assert catalog.mutations["create_collection"] == 2


def test_apply_moves_memberships_when_record_changes() -> None:
    catalog = InMemoryCatalog()
    entry_id = catalog.seed_entry("GW-1")
    assigner = CollectionAssigner()
    directory = _directory(catalog, assigner)
    assigner.apply(catalog, entry_id, make_record("GW-1"), directory)

    assigner.apply(
        catalog, entry_id, make_record("GW-1", designer="Cartier", style="Ladies"), directory
    )

    assert catalog.collection_titles_of(entry_id) == {"Womens Watches", "Cartier"}


def test_apply_leaves_unmanaged_collections_alone() -> None:
    catalog = InMemoryCatalog()
    entry_id = catalog.seed_entry("GW-1")
    catalog.collections["Staff Picks"] = "gid://shopify/Collection/900"
    catalog.memberships[entry_id].add("gid://shopify/Collection/900")
    assigner = CollectionAssigner()

    assigner.apply(catalog, entry_id, make_record("GW-1"), _directory(catalog, assigner))

    assert catalog.collection_titles_of(entry_id) == {"Staff Picks", "Mens Watches", "Rolex"}
    assert catalog.mutations["remove_collection_membership"] == 0


def test_apply_is_a_noop_when_memberships_match() -> None:
    catalog = InMemoryCatalog()
    entry_id = catalog.seed_entry("GW-1")
    assigner = CollectionAssigner()
    directory = _directory(catalog, assigner)
    assigner.apply(catalog, entry_id, make_record("GW-1"), directory)
    catalog.reset_counters()

    to_add, to_remove = assigner.apply(catalog, entry_id, make_record("GW-1"), directory)

    assert not to_add
    assert not to_remove
    assert catalog.mutation_count == 0


def test_apply_reports_partial_failure() -> None:
    catalog = InMemoryCatalog()
    entry_id = catalog.seed_entry("GW-1")
    assigner = CollectionAssigner()
    catalog.fail_next("add_collection_membership", TransientCatalogError("throttled"))

    with pytest.raises(PartialMembershipError) as exc:
        assigner.apply(catalog, entry_id, make_record("GW-1"), _directory(catalog, assigner))

    assert len(exc.value.failed) == 1
    assert len(catalog.memberships[entry_id]) == 1
