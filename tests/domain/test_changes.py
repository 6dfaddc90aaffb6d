from __future__ import annotations

from decimal import Decimal

from feedsync.domain.changes import FORCED_CHANGE, ChangeDetector
from feedsync.domain.model import ChangeKind, parse_price
from tests.support.records import make_record, variant_of


def test_secondary_price_change_is_unchanged() -> None:
    stored = make_record()
    incoming = variant_of(stored, price_retail="12000", price_wholesale="4000")

    change = ChangeDetector().compare(stored, incoming)

    assert not change.changed
    assert change.changed_fields == ()


def test_auction_flag_and_invoiced_cost_do_not_trigger_updates() -> None:
    stored = make_record(flag_ebay_auction="N", cost_invoiced="4100")
    incoming = variant_of(stored, flag_ebay_auction="Y", cost_invoiced="4200")

    assert ChangeDetector().equal_for_catalog(stored, incoming)


def test_allowlisted_field_change_is_reported() -> None:
    stored = make_record()
    incoming = variant_of(stored, dial="Blue", status="SOLD")

    change = ChangeDetector().compare(stored, incoming)

    assert change.changed
    assert set(change.changed_fields) == {"dial", "status"}


def test_price_is_compared_numerically() -> None:
    stored = make_record(price="8500")

    assert ChangeDetector().equal_for_catalog(stored, variant_of(stored, price="8,500.00"))
    assert not ChangeDetector().equal_for_catalog(stored, variant_of(stored, price="8499.99"))


def test_whitespace_and_blank_values_normalize_away() -> None:
    stored = make_record(notes=None, model="Submariner")
    incoming = variant_of(stored, notes="   ", model=" Submariner ")

    assert ChangeDetector().equal_for_catalog(stored, incoming)


def test_image_order_is_significant() -> None:
    stored = make_record()
    incoming = variant_of(stored, image_paths=tuple(reversed(stored.image_paths)))

    assert ChangeDetector().differences(stored, incoming) == ("image_paths",)


def test_force_update_marks_identical_records_changed() -> None:
    stored = make_record()

    change = ChangeDetector(force_update=True).compare(stored, variant_of(stored))

    assert change.changed
    assert change.changed_fields == (FORCED_CHANGE,)


def test_classify_partitions_the_union_of_keys() -> None:
    kept = make_record("GW-1")
    edited = make_record("GW-2")
    gone = make_record("GW-3")
    feed = [
        variant_of(kept),
        variant_of(edited, description="Rolex Submariner Blue Dial"),
        make_record("GW-4"),
    ]

    change_set = ChangeDetector().classify(feed, [kept, edited, gone])

    assert change_set.keys(ChangeKind.NEW) == {"GW-4"}
    assert change_set.keys(ChangeKind.CHANGED) == {"GW-2"}
    assert change_set.keys(ChangeKind.UNCHANGED) == {"GW-1"}
    assert change_set.keys(ChangeKind.DELETED) == {"GW-3"}
    all_keys = [key for kind in ChangeKind for key in change_set.keys(kind)]
    assert sorted(all_keys) == ["GW-1", "GW-2", "GW-3", "GW-4"]
    assert change_set.kind_of("GW-3") is ChangeKind.DELETED
    assert change_set.kind_of("GW-9") is None


def test_classify_empty_inputs() -> None:
    change_set = ChangeDetector().classify([], [])

    assert change_set.is_empty
    assert change_set.summary() == "new=0, changed=0, unchanged=0, deleted=0, rejected=0"


def test_classify_rejects_blank_keys() -> None:
    change_set = ChangeDetector().classify([make_record("   "), make_record("GW-1")], [])

    assert change_set.keys(ChangeKind.NEW) == {"GW-1"}
    assert len(change_set.rejected) == 1
    assert change_set.rejected[0].key is None


def test_classify_keeps_first_duplicate() -> None:
    first = make_record("GW-1", price="100")
    second = make_record("GW-1", price="200")

    change_set = ChangeDetector().classify([first, second], [])

    assert [record.price for record in change_set.new] == ["100"]
    assert [error.key for error in change_set.rejected] == ["GW-1"]


def test_classify_trims_keys_before_matching() -> None:
    stored = make_record("GW-1")
    incoming = variant_of(stored)
    incoming.tag_number = " GW-1 "

    change_set = ChangeDetector().classify([incoming], [stored])

    assert change_set.keys(ChangeKind.UNCHANGED) == {"GW-1"}
    assert not change_set.deleted


def test_classify_leaves_the_callers_records_untouched() -> None:
    incoming = make_record(" GW-1 ", price="100")

    change_set = ChangeDetector().classify([incoming], [])

    assert incoming.tag_number == " GW-1 "
    assert [record.key for record in change_set.new] == ["GW-1"]
    assert change_set.new[0] is not incoming
    assert change_set.new[0].price == "100"


def test_parse_price_handles_currency_formatting() -> None:
    assert parse_price("$1,250.50") == Decimal("1250.50")
    assert parse_price("  ") is None
    assert parse_price("call us") is None
