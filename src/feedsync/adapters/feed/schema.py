"""Pydantic model of one row of the inventory feed file."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

IMAGE_SLOTS = 9


def _to_text(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, bool):
        return "Y" if value else "N"
    if isinstance(value, int | float | str):
        stripped = str(value).strip()
        return stripped or None
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FeedRecordPayload(FeedBaseModel):
    tag_number: str = Field(default="", alias="web_tag_number")
    status: str | None = Field(default=None, alias="web_status")
    description: str | None = Field(default=None, alias="web_description_short")
    designer: str | None = Field(default=None, alias="web_designer")
    model: str | None = Field(default=None, alias="web_watch_model")
    year: str | None = Field(default=None, alias="web_watch_year")
    category: str | None = Field(default=None, alias="web_category")
    style: str | None = Field(default=None, alias="web_style")
    metal_type: str | None = Field(default=None, alias="web_metal_type")
    reference_number: str | None = Field(
        default=None, alias="web_watch_manufacturer_reference_number"
    )
    movement: str | None = Field(default=None, alias="web_watch_movement")
    watch_case: str | None = Field(default=None, alias="web_watch_case")
    dial: str | None = Field(default=None, alias="web_watch_dial")
    strap: str | None = Field(default=None, alias="web_watch_strap")
    condition: str | None = Field(default=None, alias="web_watch_condition")
    diameter: str | None = Field(default=None, alias="web_watch_diameter")
    box_papers: str | None = Field(default=None, alias="web_watch_box_papers")
    serial_number: str | None = Field(default=None, alias="web_serial_number")
    dial_markers: str | None = Field(default=None, alias="web_watch_dial_markers")
    band_material: str | None = Field(default=None, alias="web_watch_band_material")
    bezel_type: str | None = Field(default=None, alias="web_watch_bezel_type")
    case_crown: str | None = Field(default=None, alias="web_watch_case_crown")
    band_type: str | None = Field(default=None, alias="web_watch_band_type")
    general_dial: str | None = Field(default=None, alias="web_watch_general_dial")
    notes: str | None = Field(default=None, alias="web_notes")
    price: str | None = Field(default=None, alias="web_price_ebay")
    price_retail: str | None = Field(default=None, alias="web_price_retail")
    price_sale: str | None = Field(default=None, alias="web_price_sale")
    price_keystone: str | None = Field(default=None, alias="web_price_keystone")
    price_chronos: str | None = Field(default=None, alias="web_price_chronos")
    price_wholesale: str | None = Field(default=None, alias="web_price_wholesale")
    cost_invoiced: str | None = Field(default=None, alias="cost_invoiced")
    flag_ebay_auction: str | None = Field(default=None, alias="web_flag_ebayauction")
    image_paths: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _collect_image_slots(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        mapping_value = cast(Mapping[str, object], value)
        if "image_paths" in mapping_value:
            return mapping_value
        data: dict[str, object] = dict(mapping_value)
        paths: list[object] = []
        for slot in range(1, IMAGE_SLOTS + 1):
            path = _to_text(data.pop(f"web_image_path_{slot}", None))
            if path is not None:
                paths.append(path)
        data["image_paths"] = paths
        return data

    @field_validator("tag_number", mode="before")
    @classmethod
    def _normalize_key(cls, value: object) -> object:
        return _to_text(value) or ""

    _normalize_text = field_validator(
        "status",
        "description",
        "designer",
        "model",
        "year",
        "category",
        "style",
        "metal_type",
        "reference_number",
        "movement",
        "watch_case",
        "dial",
        "strap",
        "condition",
        "diameter",
        "box_papers",
        "serial_number",
        "dial_markers",
        "band_material",
        "bezel_type",
        "case_crown",
        "band_type",
        "general_dial",
        "notes",
        "price",
        "price_retail",
        "price_sale",
        "price_keystone",
        "price_chronos",
        "price_wholesale",
        "cost_invoiced",
        "flag_ebay_auction",
        mode="before",
    )(_to_text)
