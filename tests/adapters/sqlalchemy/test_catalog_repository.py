from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from feedsync.adapters.sqlalchemy import (
    SqlAlchemyCatalogRecordRepository,
    catalog_record_table,
    create_all_tables,
    start_mappers,
)
from feedsync.domain.model import SyncStatus
from tests.support.records import make_record

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_start_mappers_is_idempotent() -> None:
    start_mappers()
    start_mappers()


def test_migration_and_metadata_agree_on_columns(sqlite_engine: Engine) -> None:
    migrated = {column["name"] for column in inspect(sqlite_engine).get_columns("catalog_record")}

    create_all_tables(sqlite_engine)

    assert migrated == {column.name for column in catalog_record_table.columns}


def test_save_and_find_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRecordRepository(sqlite_session)
    published = datetime(2024, 5, 1, 12, tzinfo=timezone(timedelta(hours=2)))
    record = make_record("GW-1", remote_id="gid://shopify/Product/1")
    record.sync_status = SyncStatus.PUBLISHED
    record.published_at = published

    repository.save(record)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.find_by_key("GW-1")
    assert loaded is not None
    assert loaded.image_paths == record.image_paths
    assert loaded.sync_status is SyncStatus.PUBLISHED
    assert loaded.published_at == published.astimezone(UTC)
    assert loaded.published_at.tzinfo is not None
    assert loaded.price == "8500"


def test_find_all_orders_by_key(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRecordRepository(sqlite_session)
    for key in ("GW-3", "GW-1", "GW-2"):
        repository.save(make_record(key))

    assert [record.key for record in repository.find_all()] == ["GW-1", "GW-2", "GW-3"]


def test_save_overwrites_existing_row(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRecordRepository(sqlite_session)
    repository.save(make_record("GW-1"))
    sqlite_session.commit()

    repository.save(make_record("GW-1", dial="Blue"))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.find_by_key("GW-1")
    assert loaded is not None
    assert loaded.dial == "Blue"
    assert len(repository.find_all()) == 1


def test_delete_reports_whether_a_row_existed(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRecordRepository(sqlite_session)
    repository.save(make_record("GW-1"))
    repository.save(make_record("GW-2"))

    assert repository.delete("GW-1")
    assert not repository.delete("GW-1")
    assert repository.find_by_key("GW-1") is None
    assert repository.delete_all() == 1
    assert repository.find_all() == []


def test_remote_id_is_unique(sqlite_session: Session) -> None:
    repository = SqlAlchemyCatalogRecordRepository(sqlite_session)
    repository.save(make_record("GW-1", remote_id="gid://shopify/Product/1"))

    with pytest.raises(IntegrityError):
        repository.save(make_record("GW-2", remote_id="gid://shopify/Product/1"))
