"""Inventory feed adapters."""

from __future__ import annotations

from .jsonfile import JsonFeedSource, translate_payload
from .schema import FeedRecordPayload

__all__ = ["FeedRecordPayload", "JsonFeedSource", "translate_payload"]
