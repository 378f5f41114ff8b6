"""
Portfolio monitor: a cancellable periodic poll of all tracked wallets.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Set, Tuple

from ..formatters.console_formatter import ConsoleFormatter
from ..models.summary import PortfolioSummary, WalletSnapshot
from ..models.wallet import TrackedWallet
from ..services.portfolio_service import PortfolioService

# (address, sub-account id, market, direction)
PositionKey = Tuple[str, int, str, str]


class PortfolioMonitor:
    """Polls tracked wallets and reports summaries and position changes."""

    def __init__(
        self,
        portfolio_service: PortfolioService,
        console_formatter: ConsoleFormatter,
        wallets: List[TrackedWallet],
        refresh_interval: float = 300,
        wallet_timeout: Optional[float] = None
    ):
        self.portfolio_service = portfolio_service
        self.console_formatter = console_formatter
        self.wallets = wallets
        self.refresh_interval = refresh_interval
        self.wallet_timeout = wallet_timeout
        self.logger = logging.getLogger(__name__)
        self.update_count = 0
        self.last_summary: Optional[PortfolioSummary] = None
        self._last_positions: Optional[Set[PositionKey]] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """Check if the poll task is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the poll task on the running loop."""
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the poll task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("🛑 Portfolio monitor stopped")

    async def run(self) -> None:
        """Poll until cancelled."""
        self.logger.info("📊 Portfolio monitor started")
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                self.logger.exception(f"❌ Error in monitor cycle #{self.update_count}")
            await asyncio.sleep(self.refresh_interval)

    async def poll_once(self) -> PortfolioSummary:
        """Execute one fetch-then-summarize cycle and display it."""
        self.update_count += 1
        self.logger.info(f"🔄 Starting monitor cycle #{self.update_count}")

        summary, snapshots = await self.portfolio_service.build_summary(
            self.wallets,
            use_cache=False,
            timeout=self.wallet_timeout
        )

        self._display(summary, snapshots)
        self._report_position_changes(snapshots)
        self.last_summary = summary

        # Cleanup cache periodically
        if self.update_count % 10 == 0:
            self.portfolio_service.cache_service.cleanup_expired()

        return summary

    def _display(self, summary: PortfolioSummary, snapshots: List[WalletSnapshot]) -> None:
        self.console_formatter.print_separator()
        self.console_formatter.print_info(f"Monitor Update #{self.update_count}")
        for snapshot in snapshots:
            self.console_formatter.format_wallet_details(snapshot)
        self.console_formatter.format_portfolio_summary(summary)
        self.console_formatter.print_timestamp()

    @staticmethod
    def _position_keys(snapshots: List[WalletSnapshot]) -> Dict[PositionKey, WalletSnapshot]:
        return {
            (s.wallet.address, s.wallet.sub_account_id, p.market, p.direction.value): s
            for s in snapshots if s.ok
            for p in s.positions
        }

    def _report_position_changes(self, snapshots: List[WalletSnapshot]) -> Tuple[List[PositionKey], List[PositionKey]]:
        """Log positions opened or closed since the previous cycle.

        Wallets that failed this cycle are not reported as closed.
        """
        current = self._position_keys(snapshots)
        failed = {(s.wallet.address, s.wallet.sub_account_id) for s in snapshots if not s.ok}

        if self._last_positions is None:
            self._last_positions = set(current)
            return [], []

        opened = sorted(k for k in current if k not in self._last_positions)
        closed = sorted(
            k for k in self._last_positions
            if k not in current and k[:2] not in failed
        )

        for address, sub_account_id, market, direction in opened:
            self.logger.info(f"🆕 New position: {market} {direction} on {address} (sub-account {sub_account_id})")
        for address, sub_account_id, market, direction in closed:
            self.logger.info(f"🔒 Position closed: {market} {direction} on {address} (sub-account {sub_account_id})")

        # Keep last known positions of failed wallets until they report again
        self._last_positions = set(current) | {k for k in self._last_positions if k[:2] in failed}
        return opened, closed
