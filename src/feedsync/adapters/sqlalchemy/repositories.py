"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from feedsync.adapters.sqlalchemy.mappings import catalog_record_table
from feedsync.domain.model import CatalogRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyCatalogRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_all(self) -> list[CatalogRecord]:
        stmt = select(CatalogRecord).order_by(catalog_record_table.c.tag_number)
        return list(self.session.execute(stmt).scalars())

    def find_by_key(self, key: str) -> CatalogRecord | None:
        return self.session.get(CatalogRecord, key)

    def save(self, entity: CatalogRecord) -> CatalogRecord:
        merged = self.session.merge(entity)
        self.session.flush()
        return merged

    def delete(self, key: str) -> bool:
        stmt = delete(catalog_record_table).where(catalog_record_table.c.tag_number == key)
        result = self.session.execute(stmt)
        self.session.expire_all()
        return bool(result.rowcount)

    def delete_all(self) -> int:
        result = self.session.execute(delete(catalog_record_table))
        self.session.expire_all()
        return int(result.rowcount or 0)


if TYPE_CHECKING:
    from sqlalchemy.orm import Session as _Session

    from feedsync.domain.ports import CatalogRecordRepository

    def _repository_check(session: _Session) -> CatalogRecordRepository:
        return SqlAlchemyCatalogRecordRepository(session)
