from __future__ import annotations

import pytest

from feedsync.config import SyncConfig
from feedsync.domain.reconciliation import DiscrepancyReport, ReconciliationResult
from feedsync.domain.sync import SyncRunResult
from feedsync.ui import cli as cli_module


@pytest.fixture(autouse=True)
def clear_sync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FEEDSYNC_MAX_DELETION_FRACTION",
        "FEEDSYNC_MAX_DELETIONS_PER_SYNC",
        "FEEDSYNC_FORCE_UPDATE",
        "FEEDSYNC_RETRY_ATTEMPTS",
        "FEEDSYNC_LOCATION_ID",
    ):
        monkeypatch.delenv(name, raising=False)


def test_sync_command_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> SyncRunResult:
        captured.update(kwargs)
        return SyncRunResult(processed=1, published=1)

    monkeypatch.setattr(cli_module, "sync_feed", fake_sync)

    cli_module.main(["sync"])

    assert captured["config"] == SyncConfig()
    assert captured["feed_path"] is None


def test_sync_command_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> SyncRunResult:
        captured.update(kwargs)
        return SyncRunResult()

    monkeypatch.setattr(cli_module, "sync_feed", fake_sync)

    cli_module.main(["--verbose", "sync", "--feed", "/tmp/feed.json", "--force-update"])

    config = captured["config"]
    assert isinstance(config, SyncConfig)
    assert config.force_update
    assert captured["feed_path"] == "/tmp/feed.json"


def test_aborted_sync_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> SyncRunResult:
        result = SyncRunResult()
        result.abort("feed snapshot is empty")
        return result

    monkeypatch.setattr(cli_module, "sync_feed", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 1


def test_invalid_environment_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    called = False

    def fake_sync(**_: object) -> SyncRunResult:
        nonlocal called
        called = True
        return SyncRunResult()

    monkeypatch.setattr(cli_module, "sync_feed", fake_sync)
    monkeypatch.setenv("FEEDSYNC_RETRY_ATTEMPTS", "0")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 2
    assert not called


def test_missing_command_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_analyze_command(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_analyze(**kwargs: object) -> DiscrepancyReport:
        captured.update(kwargs)
        return DiscrepancyReport()

    monkeypatch.setattr(cli_module, "analyze_discrepancies", fake_analyze)

    cli_module.main(["analyze", "--feed", "feed.json"])

    assert captured["feed_path"] == "feed.json"


def test_reconcile_command_passes_force(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconcile(**kwargs: object) -> ReconciliationResult:
        captured.update(kwargs)
        return ReconciliationResult(report=DiscrepancyReport(), success=True, message="done")

    monkeypatch.setattr(cli_module, "perform_reconciliation", fake_reconcile)

    cli_module.main(["reconcile", "--force"])

    assert captured["force"] is True


def test_unsuccessful_reconcile_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_reconcile(**_: object) -> ReconciliationResult:
        return ReconciliationResult(report=DiscrepancyReport(), message="refused")

    monkeypatch.setattr(cli_module, "perform_reconciliation", fake_reconcile)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconcile"])

    assert excinfo.value.code == 1


def test_unexpected_error_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> SyncRunResult:
        raise RuntimeError("catalog unreachable")

    monkeypatch.setattr(cli_module, "sync_feed", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 1
