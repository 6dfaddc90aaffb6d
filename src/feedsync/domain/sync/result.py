from __future__ import annotations

from dataclasses import dataclass, field

from feedsync.domain.model import SyncOperation


@dataclass(slots=True, frozen=True)
class SyncFailure:
    key: str | None
    operation: SyncOperation
    message: str


@dataclass(slots=True)
class SyncRunResult:
    processed: int = 0
    published: int = 0
    updated: int = 0
    retired: int = 0
    skipped: int = 0
    errors: list[SyncFailure] = field(default_factory=list)
    aborted: bool = False
    abort_reason: str | None = None

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def succeeded(self) -> bool:
        return not self.aborted and not self.errors

    def record_failure(self, key: str | None, operation: SyncOperation, error: Exception) -> None:
        self.errors.append(SyncFailure(key=key, operation=operation, message=str(error)))

    def abort(self, reason: str) -> None:
        self.aborted = True
        self.abort_reason = reason
