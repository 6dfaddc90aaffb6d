from __future__ import annotations

from enum import StrEnum


class RecordStatus(StrEnum):
    """Feed status values with business meaning. The feed may carry others."""

    AVAILABLE = "Available"
    ON_HOLD = "On Hold"
    SOLD = "SOLD"


class SyncStatus(StrEnum):
    PUBLISHED = "PUBLISHED"
    UPDATED = "UPDATED"


class ChangeKind(StrEnum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    DELETED = "deleted"


class SyncOperation(StrEnum):
    PUBLISH = "publish"
    UPDATE = "update"
    SKIP = "skip"
    RETIRE = "retire"
    VALIDATE = "validate"
    RECONCILE = "reconcile"
