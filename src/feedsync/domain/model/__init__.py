"""Domain model for feed records and their remote catalog projections."""

from __future__ import annotations

from .enums import ChangeKind, RecordStatus, SyncOperation, SyncStatus
from .record import (
    FEED_FIELDS,
    CatalogRecord,
    normalize_image_paths,
    normalize_text,
    parse_price,
)
from .remote import (
    PLACEHOLDER_OPTION_NAME,
    PLACEHOLDER_OPTION_VALUE,
    EntryDraft,
    EntryPatch,
    Metafield,
    OptionAxis,
    ProductOption,
    RemoteCatalogEntry,
    RemoteVariant,
)

__all__ = [
    "FEED_FIELDS",
    "PLACEHOLDER_OPTION_NAME",
    "PLACEHOLDER_OPTION_VALUE",
    "CatalogRecord",
    "ChangeKind",
    "EntryDraft",
    "EntryPatch",
    "Metafield",
    "OptionAxis",
    "ProductOption",
    "RecordStatus",
    "RemoteCatalogEntry",
    "RemoteVariant",
    "SyncOperation",
    "SyncStatus",
    "normalize_image_paths",
    "normalize_text",
    "parse_price",
]
