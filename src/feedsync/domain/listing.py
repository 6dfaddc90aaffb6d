"""Render a catalog record into remote listing content."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING, Final

from feedsync.domain.model import EntryDraft, EntryPatch, Metafield, normalize_text

if TYPE_CHECKING:
    from feedsync.domain.model import CatalogRecord

GOOGLE_NAMESPACE: Final[str] = "google"
EBAY_NAMESPACE: Final[str] = "ebay"
SEO_NAMESPACE: Final[str] = "global"
GOOGLE_PRODUCT_TYPE: Final[str] = "apparel & accessories > jewelry > watches"

# (label, record attribute) rows of the description's detail list.
DETAIL_ROWS: Final[tuple[tuple[str, str], ...]] = (
    ("Brand", "designer"),
    ("Model", "model"),
    ("Reference", "reference_number"),
    ("Year", "year"),
    ("Case", "watch_case"),
    ("Material", "metal_type"),
    ("Diameter", "diameter"),
    ("Movement", "movement"),
    ("Dial", "dial"),
    ("Dial markers", "dial_markers"),
    ("Bezel", "bezel_type"),
    ("Crown", "case_crown"),
    ("Strap", "strap"),
    ("Band", "band_material"),
    ("Condition", "condition"),
    ("Box & papers", "box_papers"),
)

# eBay metafield key -> record attribute.
EBAY_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("brand", "designer"),
    ("model", "model"),
    ("reference_number", "reference_number"),
    ("year", "year"),
    ("case_material", "metal_type"),
    ("movement", "movement"),
    ("dial", "dial"),
    ("strap", "strap"),
    ("condition", "condition"),
    ("diameter", "diameter"),
    ("box_papers", "box_papers"),
    ("category", "category"),
    ("style", "style"),
)


def title_for(record: CatalogRecord) -> str:
    return normalize_text(record.description) or record.tag_number


def meta_title(record: CatalogRecord) -> str:
    parts = (record.designer, record.model, record.reference_number, record.metal_type)
    return " ".join(text for text in map(normalize_text, parts) if text)


def description_html(record: CatalogRecord) -> str:
    lines: list[str] = []
    summary = normalize_text(record.description)
    if summary:
        lines.append(f"<p>{escape(summary)}</p>")
    rows = [
        (label, value)
        for label, attribute in DETAIL_ROWS
        if (value := normalize_text(getattr(record, attribute)))
    ]
    if rows:
        lines.append("<ul>")
        lines.extend(
            f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in rows
        )
        lines.append("</ul>")
    return "\n".join(lines)


def _gender(style: str | None) -> str:
    normalized = (normalize_text(style) or "").lower()
    if normalized == "unisex":
        return "Unisex"
    if normalized == "gents":
        return "Male"
    return "Female"


def _condition(condition: str | None) -> str:
    return "New" if (normalize_text(condition) or "").lower().startswith("new") else "Used"


def build_metafields(record: CatalogRecord) -> tuple[Metafield, ...]:
    fields: list[Metafield] = []
    title = meta_title(record)
    if title:
        fields.append(Metafield(SEO_NAMESPACE, "title_tag", title))
    summary = normalize_text(record.description)
    if summary:
        fields.append(Metafield(SEO_NAMESPACE, "description_tag", summary))

    google = {
        "custom_product": "true",
        "age_group": "Adult",
        "google_product_type": GOOGLE_PRODUCT_TYPE,
        "gender": _gender(record.style),
        "condition": _condition(record.condition),
        "adwords_grouping": normalize_text(record.designer),
        "adwords_labels": normalize_text(record.model),
    }
    fields.extend(
        Metafield(GOOGLE_NAMESPACE, key, value) for key, value in google.items() if value
    )
    for key, attribute in EBAY_FIELDS:
        value = normalize_text(getattr(record, attribute))
        if value:
            fields.append(Metafield(EBAY_NAMESPACE, key, value))
    return tuple(fields)


def build_tags(record: CatalogRecord) -> tuple[str, ...]:
    candidates = (record.designer, record.category, record.style, record.metal_type)
    tags: list[str] = []
    for candidate in map(normalize_text, candidates):
        if candidate and candidate not in tags:
            tags.append(candidate)
    return tuple(tags)


def build_patch(record: CatalogRecord) -> EntryPatch:
    return EntryPatch(
        title=title_for(record),
        description=description_html(record),
        vendor=normalize_text(record.designer),
        product_type=normalize_text(record.category),
        tags=build_tags(record),
        price=record.canonical_price,
        metafields=build_metafields(record),
        image_urls=tuple(record.image_paths),
    )


def build_draft(record: CatalogRecord) -> EntryDraft:
    patch = build_patch(record)
    return EntryDraft(
        sku=record.tag_number,
        title=patch.title,
        description=patch.description,
        vendor=patch.vendor,
        product_type=patch.product_type,
        tags=patch.tags,
        price=patch.price,
        metafields=patch.metafields,
        image_urls=patch.image_urls,
    )
