"""
Main application entry point for crypto position tracking.
"""

import argparse
import asyncio
import logging
import signal
import sys
import time
from typing import List, Optional, Tuple

from .config.settings import Settings
from .config.logging_config import setup_logging
from .exceptions import ConfigurationError, FetchError, InvalidAddressError, TrackerError
from .formatters.console_formatter import ConsoleFormatter
from .models.wallet import Platform, TrackedWallet
from .monitor.portfolio_monitor import PortfolioMonitor
from .services.cache_service import PortfolioCacheService
from .services.data_source import SnapshotDriftSource
from .services.drift_service import DriftAccountService
from .services.hyperliquid_api import HyperliquidAPIService
from .services.portfolio_service import PortfolioService


class TrackerApp:
    """Main application class wiring data sources, services and the monitor."""

    def __init__(self, settings: Settings, show_orders: bool = False, show_subaccounts: bool = False):
        self.settings = settings
        self.show_orders = show_orders
        self.show_subaccounts = show_subaccounts
        self.cache_service = PortfolioCacheService(settings.cache_duration)
        self.console_formatter = ConsoleFormatter()
        self.drift_source: Optional[SnapshotDriftSource] = None
        self.hyperliquid_service: Optional[HyperliquidAPIService] = None
        self.portfolio_service: Optional[PortfolioService] = None
        self.monitor: Optional[PortfolioMonitor] = None
        self.logger = logging.getLogger(__name__)
        self.start_time = time.time()
        self.shutdown_event = asyncio.Event()

    async def initialize(self) -> None:
        """Construct and connect the data sources the tracked wallets need."""
        self.logger.info("🚀 Starting TrackWise crypto tracker")

        drift_service = None
        if self.settings.has_drift_wallets:
            if not self.settings.drift_snapshot_path:
                raise ConfigurationError("DRIFT_SNAPSHOT_PATH is required to track Drift wallets")
            self.drift_source = SnapshotDriftSource(self.settings.drift_snapshot_path)
            try:
                await self.drift_source.connect()
                drift_service = DriftAccountService(self.drift_source)
            except FetchError as e:
                self.logger.warning(f"⚠️ Drift data source unavailable, Drift wallets will be reported as failed: {e}")
                self.drift_source.close()
                self.drift_source = None

        if any(w.platform is Platform.HYPERLIQUID for w in self.settings.wallets):
            self.hyperliquid_service = HyperliquidAPIService(self.settings, self.cache_service)
            try:
                await self.hyperliquid_service.connect()
            except FetchError as e:
                self.logger.warning(f"⚠️ Hyperliquid API unavailable, Hyperliquid wallets will be reported as failed: {e}")
                self.hyperliquid_service.close()
                self.hyperliquid_service = None

        self.portfolio_service = PortfolioService(
            cache_service=self.cache_service,
            drift_service=drift_service,
            hyperliquid_service=self.hyperliquid_service
        )

        self.monitor = PortfolioMonitor(
            portfolio_service=self.portfolio_service,
            console_formatter=self.console_formatter,
            wallets=self.settings.wallets,
            refresh_interval=self.settings.refresh_interval,
            wallet_timeout=self.settings.wallet_fetch_timeout
        )

        self.logger.info("✅ Application initialized successfully")

    async def run_once(self) -> int:
        """Fetch, summarize and print once. Returns a process exit code."""
        try:
            await self.initialize()
            summary = await self.monitor.poll_once()
            await self._show_wallet_details()
        finally:
            self.close()
        return 1 if summary.is_partial else 0

    async def _show_wallet_details(self) -> None:
        """Print orders and sub-accounts of each wallet when requested."""
        for wallet in self.settings.wallets:
            try:
                if self.show_orders:
                    orders = await asyncio.to_thread(self.portfolio_service.fetch_orders, wallet)
                    self.console_formatter.print_info(f"{wallet.display_name} orders")
                    self.console_formatter.format_orders_table(orders)
                if self.show_subaccounts:
                    subaccounts = await asyncio.to_thread(self.portfolio_service.fetch_subaccounts, wallet)
                    self.console_formatter.format_subaccounts(wallet.display_name, subaccounts)
            except TrackerError as e:
                self.console_formatter.print_error(f"{wallet.display_name}: {e}")

    async def run(self) -> None:
        """Run the monitor until a shutdown signal arrives."""
        try:
            await self.initialize()
            self._setup_signal_handlers()
            self.console_formatter.format_startup_message(
                len(self.settings.wallets),
                self.settings.refresh_interval
            )

            self.monitor.start()
            await self.shutdown_event.wait()
        finally:
            await self._shutdown()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._trigger_shutdown, sig)
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                signal.signal(sig, lambda signum, frame: self._trigger_shutdown(signum))

    def _trigger_shutdown(self, signum) -> None:
        self.logger.info(f"🛑 Received signal {signum}, initiating shutdown...")
        self.shutdown_event.set()

    async def _shutdown(self) -> None:
        """Gracefully shutdown the application."""
        self.logger.info("🛑 Shutting down application...")
        if self.monitor:
            await self.monitor.stop()
        self.close()

        uptime = time.time() - self.start_time
        self.logger.info(f"✅ Application shutdown complete (uptime: {uptime:.1f}s)")

    def close(self) -> None:
        """Close data sources and clear the cache."""
        if self.hyperliquid_service:
            self.hyperliquid_service.close()
        if self.drift_source:
            self.drift_source.close()
        cleared_count = self.cache_service.clear()
        self.logger.debug(f"🧹 Cleared {cleared_count} cache entries")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="TrackWise crypto position tracker")
    parser.add_argument('--once', action='store_true', help='Run once and exit')
    parser.add_argument(
        '--wallet',
        action='append',
        default=[],
        metavar='ADDRESS[:LABEL[:SUBACCOUNT]]',
        help='Wallet to track (repeatable); overrides TRACKED_WALLETS'
    )
    parser.add_argument('--orders', action='store_true', help='With --once, also list orders per wallet')
    parser.add_argument('--subaccounts', action='store_true', help='With --once, also list sub-accounts per wallet')
    parser.add_argument('--drift-snapshot', help='JSON dump of Drift account state')
    parser.add_argument('--log-level', help='Logging level (DEBUG, INFO, WARNING, ERROR)')
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Tuple[Settings, argparse.Namespace]:
    """Load settings from the environment and apply command line overrides."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    if args.wallet:
        try:
            settings.wallets = [TrackedWallet.parse(w) for w in args.wallet]
        except (InvalidAddressError, ValueError) as e:
            raise ConfigurationError(str(e)) from e
    if args.drift_snapshot:
        settings.drift_snapshot_path = args.drift_snapshot
    if args.log_level:
        settings.log_level = args.log_level

    settings.validate()
    if not settings.wallets:
        raise ConfigurationError("No wallets configured; set TRACKED_WALLETS or pass --wallet")

    return settings, args


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        settings, args = load_settings(argv)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 2

    app = TrackerApp(settings, show_orders=args.orders, show_subaccounts=args.subaccounts)
    setup_logging(settings.log_level, settings.log_directory, console=app.console_formatter.console)

    try:
        if args.once:
            return await app.run_once()
        await app.run()
        return 0
    except TrackerError as e:
        logging.getLogger(__name__).error(f"❌ Failed to run tracker: {e}")
        return 1


def cli() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n🛑 Application interrupted by user")


if __name__ == "__main__":
    cli()
