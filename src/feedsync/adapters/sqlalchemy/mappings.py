"""SQLAlchemy mapping metadata for catalog records."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)

from feedsync.domain.model import CatalogRecord, SyncStatus

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ImagePathsType(TypeDecorator[tuple[str, ...]]):
    """Ordered image paths stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(list(value or ()))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        return tuple(item for item in items if isinstance(item, str))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

TEXT_COLUMNS = (
    "status",
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
    "price",
    "price_retail",
    "price_sale",
    "price_keystone",
    "price_chronos",
    "price_wholesale",
    "cost_invoiced",
    "flag_ebay_auction",
)

catalog_record_table = Table(
    "catalog_record",
    mapper_registry.metadata,
    Column("tag_number", String(64), primary_key=True),
    Column("description", Text, nullable=True),
    Column("notes", Text, nullable=True),
    *(Column(name, String(255), nullable=True) for name in TEXT_COLUMNS),
    Column("image_paths", ImagePathsType(), nullable=False, default=()),
    Column("remote_id", String(255), nullable=True, unique=True),
    Column(
        "sync_status",
        Enum(SyncStatus, name="sync_status", native_enum=False, validate_strings=True),
        nullable=True,
    ),
    Column("published_at", UTCDateTime(), nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(CatalogRecord, catalog_record_table)
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    start_mappers()
    mapper_registry.metadata.create_all(engine)
