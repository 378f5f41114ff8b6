import json
import logging

import pytest
from rich.logging import RichHandler

from trackwise_crypto.config.settings import Settings
from trackwise_crypto.exceptions import ConfigurationError
from trackwise_crypto.main import TrackerApp, main
from trackwise_crypto.models.wallet import TrackedWallet
from trackwise_crypto.services.hyperliquid_api import HyperliquidAPIService

from conftest import EVM_WALLET, SOLANA_WALLET


@pytest.fixture
def snapshot_file(tmp_path, drift_state):
    path = tmp_path / "drift.json"
    path.write_text(json.dumps(drift_state))
    return str(path)


async def test_run_once_with_drift_snapshot(snapshot_file):
    settings = Settings(
        wallets=[TrackedWallet.parse(f"{SOLANA_WALLET}:main")],
        drift_snapshot_path=snapshot_file
    )
    app = TrackerApp(settings)

    assert await app.run_once() == 0
    assert app.monitor.last_summary.total_balance_usd == pytest.approx(1345.0)
    assert app.hyperliquid_service is None
    assert not app.drift_source.ready


async def test_drift_wallet_requires_snapshot():
    app = TrackerApp(Settings(wallets=[TrackedWallet.parse(SOLANA_WALLET)]))
    with pytest.raises(ConfigurationError):
        await app.initialize()


async def test_main_once(monkeypatch, tmp_path, snapshot_file):
    monkeypatch.setattr("trackwise_crypto.config.settings.load_dotenv", lambda: None)
    monkeypatch.setenv("LOG_DIRECTORY", str(tmp_path / "logs"))
    monkeypatch.delenv("TRACKED_WALLETS", raising=False)

    code = await main(["--once", "--wallet", SOLANA_WALLET, "--drift-snapshot", snapshot_file])

    assert code == 0
    assert (tmp_path / "logs" / "trackwise_crypto.log").exists()


async def test_main_configuration_error(monkeypatch):
    monkeypatch.setattr("trackwise_crypto.config.settings.load_dotenv", lambda: None)
    monkeypatch.delenv("TRACKED_WALLETS", raising=False)
    assert await main(["--once"]) == 2


async def test_run_once_lists_orders_and_subaccounts(snapshot_file):
    settings = Settings(wallets=[TrackedWallet.parse(SOLANA_WALLET)], drift_snapshot_path=snapshot_file)
    app = TrackerApp(settings, show_orders=True, show_subaccounts=True)
    app.console_formatter.console.record = True

    assert await app.run_once() == 0

    output = app.console_formatter.console.export_text()
    assert "Orders (2)" in output
    assert "sub-accounts" in output


async def test_unreachable_hyperliquid_gives_partial_summary(monkeypatch, snapshot_file):
    monkeypatch.setattr(HyperliquidAPIService, "test_connectivity", lambda self: False)
    settings = Settings(
        wallets=[TrackedWallet.parse(SOLANA_WALLET), TrackedWallet.parse(EVM_WALLET)],
        drift_snapshot_path=snapshot_file
    )
    app = TrackerApp(settings)

    assert await app.run_once() == 1
    summary = app.monitor.last_summary
    assert summary.total_balance_usd == pytest.approx(1345.0)
    assert summary.failed_wallets == [EVM_WALLET]
    assert app.hyperliquid_service is None


async def test_missing_drift_snapshot_gives_partial_summary(tmp_path):
    settings = Settings(
        wallets=[TrackedWallet.parse(SOLANA_WALLET)],
        drift_snapshot_path=str(tmp_path / "missing.json")
    )
    app = TrackerApp(settings)

    assert await app.run_once() == 1
    assert app.monitor.last_summary.failed_wallets == [SOLANA_WALLET]
    assert app.drift_source is None


async def test_logs_share_the_table_console(monkeypatch, tmp_path, snapshot_file):
    monkeypatch.setattr("trackwise_crypto.config.settings.load_dotenv", lambda: None)
    monkeypatch.setenv("LOG_DIRECTORY", str(tmp_path / "logs"))
    monkeypatch.delenv("TRACKED_WALLETS", raising=False)
    apps = []

    class RecordingApp(TrackerApp):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            apps.append(self)

    monkeypatch.setattr("trackwise_crypto.main.TrackerApp", RecordingApp)

    assert await main(["--once", "--wallet", SOLANA_WALLET, "--drift-snapshot", snapshot_file]) == 0

    handler = next(h for h in logging.getLogger().handlers if isinstance(h, RichHandler))
    assert handler.console is apps[0].console_formatter.console
