"""Feed source reading a JSON snapshot file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from feedsync.domain.errors import FeedSourceError
from feedsync.domain.model import CatalogRecord, normalize_image_paths

from .schema import FeedRecordPayload

if TYPE_CHECKING:
    from pathlib import Path

    from feedsync.domain.ports.feed import FeedSource

log = getLogger(__name__)


def translate_payload(payload: FeedRecordPayload) -> CatalogRecord:
    data = payload.model_dump(exclude={"image_paths"})
    return CatalogRecord(**data, image_paths=normalize_image_paths(payload.image_paths))


@dataclass(slots=True)
class JsonFeedSource:
    """A JSON array of feed rows keyed by the feed's column names."""

    path: Path

    def load_snapshot(self) -> list[CatalogRecord]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise FeedSourceError(f"Cannot read feed file {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise FeedSourceError(f"Feed file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise FeedSourceError(f"Feed file {self.path} must contain a JSON array")

        records: list[CatalogRecord] = []
        for index, item in enumerate(raw):
            try:
                payload = FeedRecordPayload.model_validate(item)
            except ValidationError as exc:
                raise FeedSourceError(f"Feed row {index} in {self.path} is malformed") from exc
            records.append(translate_payload(payload))
        log.info("Loaded %s feed records from %s", len(records), self.path)
        return records


if TYPE_CHECKING:
    _feed_check: FeedSource = JsonFeedSource(Path("feed.json"))
