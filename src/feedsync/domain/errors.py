"""Error taxonomy shared by the sync engine and its adapters."""

from __future__ import annotations


class FeedSyncError(RuntimeError):
    """Base class for every error raised by the sync engine."""


class RecordValidationError(FeedSyncError):
    """A feed record is malformed and must be skipped without being written anywhere."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class RemoteCatalogError(FeedSyncError):
    """A remote catalog call failed."""


class TransientCatalogError(RemoteCatalogError):
    """Network, throttling or server-side failure that may succeed when retried."""


class CatalogUserError(RemoteCatalogError):
    """The remote catalog rejected the request as invalid."""

    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class EntryNotFoundError(RemoteCatalogError):
    """The referenced remote entry does not exist."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Remote entry {entry_id} not found")
        self.entry_id = entry_id


class InvariantViolation(FeedSyncError):
    """Post-condition of a remote mutation does not hold; the next reconciliation repairs it."""


class InventoryInvariantError(InvariantViolation):
    pass


class VariantInvariantError(InvariantViolation):
    pass


class PartialMembershipError(InvariantViolation):
    """Some collection membership changes were applied and some were not."""

    def __init__(self, message: str, *, failed: tuple[str, ...]) -> None:
        super().__init__(message)
        self.failed = failed


class RemoteIdentityError(InvariantViolation):
    """Attempt to replace the remote identifier already assigned to a record."""


class FeedSourceError(FeedSyncError):
    """The feed snapshot could not be read or is structurally malformed."""
