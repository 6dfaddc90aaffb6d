"""SQLAlchemy adapter package for feedsync."""

from __future__ import annotations

from .mappings import catalog_record_table, create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyCatalogRecordRepository

__all__ = [
    "SqlAlchemyCatalogRecordRepository",
    "catalog_record_table",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
]
