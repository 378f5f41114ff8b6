"""
Portfolio service: fetch every tracked wallet concurrently, then summarize.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple, Union

from ..exceptions import FetchError, TrackerError
from ..models.account import HyperliquidSubAccount
from ..models.order import Order
from ..models.raw import SubAccount
from ..models.summary import PortfolioSummary, WalletSnapshot
from ..models.wallet import Platform, TrackedWallet
from .cache_service import PortfolioCacheService
from .drift_service import DriftAccountService
from .hyperliquid_api import HyperliquidAPIService
from .summary_service import compute_summary


class PortfolioService:
    """Service orchestrating per-wallet fetches and the cross-wallet summary."""

    def __init__(
        self,
        cache_service: PortfolioCacheService,
        drift_service: Optional[DriftAccountService] = None,
        hyperliquid_service: Optional[HyperliquidAPIService] = None
    ):
        self.cache_service = cache_service
        self.drift_service = drift_service
        self.hyperliquid_service = hyperliquid_service
        self.logger = logging.getLogger(__name__)

    def _service_for(self, wallet: TrackedWallet) -> Union[DriftAccountService, HyperliquidAPIService]:
        if wallet.platform is Platform.DRIFT:
            if self.drift_service is None:
                raise FetchError("No Drift data source configured")
            return self.drift_service
        if wallet.platform is Platform.HYPERLIQUID:
            if self.hyperliquid_service is None:
                raise FetchError("No Hyperliquid client configured")
            return self.hyperliquid_service
        raise FetchError(f"Unsupported platform: {wallet.platform}")

    def fetch_snapshot(
        self,
        wallet: TrackedWallet,
        use_cache: bool = True,
        force_refresh: bool = False
    ) -> WalletSnapshot:
        """Fetch one wallet's account state with caching support.

        Raises:
            FetchError: if no data source serves the wallet's platform or the fetch fails
        """
        if use_cache and not force_refresh:
            cached = self.cache_service.get_snapshot(wallet.address, wallet.sub_account_id)
            if cached is not None:
                self.logger.debug(f"Using cached snapshot for {wallet.short_address}")
                return cached

        self.logger.info(f"Fetching fresh {wallet.platform.value} data for {wallet.short_address}")

        snapshot = self._service_for(wallet).get_snapshot(wallet)

        if use_cache:
            self.cache_service.cache_snapshot(snapshot)

        return snapshot

    async def _fetch_isolated(
        self,
        wallet: TrackedWallet,
        use_cache: bool,
        force_refresh: bool,
        timeout: Optional[float]
    ) -> WalletSnapshot:
        """Fetch one wallet, turning its failure into a failed snapshot."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.fetch_snapshot, wallet, use_cache, force_refresh),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            self.logger.warning(f"Timed out fetching {wallet.short_address} after {timeout}s")
            return WalletSnapshot.failed(wallet, f"Timed out after {timeout}s")
        except TrackerError as e:
            self.logger.warning(f"Failed to fetch {wallet.short_address}: {e}")
            return WalletSnapshot.failed(wallet, str(e))
        except Exception as e:
            self.logger.exception(f"❌ Unexpected error fetching {wallet.short_address}")
            return WalletSnapshot.failed(wallet, f"Unexpected error: {e}")

    async def fetch_snapshots(
        self,
        wallets: Iterable[TrackedWallet],
        use_cache: bool = True,
        force_refresh: bool = False,
        timeout: Optional[float] = None
    ) -> List[WalletSnapshot]:
        """Fetch all wallets concurrently; one wallet's failure never aborts the rest.

        Snapshots are returned in wallet order. Cancelling the caller cancels
        the pending fetches; no partial state needs cleanup.
        """
        wallets = list(wallets)
        if not wallets:
            return []

        return list(await asyncio.gather(*[
            self._fetch_isolated(wallet, use_cache, force_refresh, timeout)
            for wallet in wallets
        ]))

    async def build_summary(
        self,
        wallets: Iterable[TrackedWallet],
        use_cache: bool = True,
        force_refresh: bool = False,
        timeout: Optional[float] = None
    ) -> Tuple[PortfolioSummary, List[WalletSnapshot]]:
        """Fetch every wallet and aggregate the portfolio summary."""
        snapshots = await self.fetch_snapshots(wallets, use_cache, force_refresh, timeout)
        summary = compute_summary(snapshots)

        if summary.is_partial:
            self.logger.warning(
                f"Summary is partial: {len(summary.failed_wallets)} of {len(snapshots)} wallets failed"
            )
        else:
            self.logger.info(f"Summarized {len(snapshots)} wallets")

        return summary, snapshots

    def fetch_orders(self, wallet: TrackedWallet) -> List[Order]:
        """Fetch the orders of one wallet, newest first on Drift."""
        service = self._service_for(wallet)
        if wallet.platform is Platform.DRIFT:
            return service.get_orders(wallet.address, wallet.sub_account_id)
        return service.get_open_orders(wallet.address)

    def fetch_subaccounts(self, wallet: TrackedWallet) -> List[Union[SubAccount, HyperliquidSubAccount]]:
        """List the sub-accounts of one wallet."""
        return self._service_for(wallet).get_subaccounts(wallet.address)

    def invalidate_cache(self) -> None:
        """Invalidate all cached wallet snapshots."""
        self.cache_service.invalidate_snapshots()

    def get_cache_stats(self) -> dict:
        """Get cache statistics."""
        return self.cache_service.get_stats()
