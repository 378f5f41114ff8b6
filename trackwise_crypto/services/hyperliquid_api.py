"""
Hyperliquid API service for data retrieval.

Hyperliquid reports positions with entry price, value, PnL and margin already
computed, so this service normalizes its payloads into the same derived models
the Drift calculators produce.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config.settings import Settings
from ..exceptions import FetchError
from ..models.account import AccountEquity, HyperliquidSubAccount
from ..models.balance import DerivedBalance
from ..models.markets import QUOTE_SPOT_MARKET_INDEX, QUOTE_SYMBOL
from ..models.order import Order
from ..models.position import DerivedPosition, PositionDirection
from ..models.summary import WalletSnapshot
from ..models.wallet import Platform, TrackedWallet, validate_address
from .balance_metrics import DUST_THRESHOLD
from .cache_service import PortfolioCacheService
from .equity_service import clamp_health


def _float(value: Any, default: float = 0.0) -> float:
    """Parse a Hyperliquid decimal string; missing values give the default."""
    if value is None or value == '':
        return default
    return float(value)


class HyperliquidAPIService:
    """Service for interacting with the Hyperliquid info API."""

    def __init__(self, settings: Settings, cache_service: Optional[PortfolioCacheService] = None):
        self.settings = settings
        self.cache_service = cache_service or PortfolioCacheService(settings.cache_duration)
        self.logger = logging.getLogger(__name__)
        self.session = requests.Session()
        self._ready = False

    @property
    def ready(self) -> bool:
        """Check if connectivity has been verified."""
        return self._ready

    async def connect(self) -> None:
        """Verify connectivity and warm the market context cache."""
        await asyncio.to_thread(self._warm_up)
        self._ready = True
        self.logger.info("Hyperliquid API service ready")

    def _warm_up(self) -> None:
        if not self.test_connectivity():
            raise FetchError("Hyperliquid API is unreachable")
        self.get_meta_and_asset_ctxs()

    def _make_request(self, payload: dict) -> Any:
        """Make a request to the Hyperliquid API.

        Raises:
            FetchError: on network, HTTP status or JSON decoding errors
        """
        try:
            self.logger.debug(f"Making API request: {payload}")
            response = self.session.post(
                self.settings.hyperliquid_api_url,
                json=payload,
                timeout=self.settings.api_timeout
            )
            response.raise_for_status()

            data = response.json()
            self.logger.debug(f"API response received: {len(str(data))} characters")
            return data

        except requests.exceptions.RequestException as e:
            self.logger.error(f"API request failed: {e}")
            raise FetchError(f"Hyperliquid request {payload.get('type')} failed: {e}") from e
        except ValueError as e:
            self.logger.error(f"Invalid JSON in API response: {e}")
            raise FetchError(f"Hyperliquid request {payload.get('type')} returned invalid JSON") from e

    def get_meta_and_asset_ctxs(self) -> Tuple[dict, List[dict]]:
        """Fetch market universe and per-asset contexts, cached for 10 seconds."""
        def load() -> Tuple[dict, List[dict]]:
            self.logger.info("Fetching market contexts from Hyperliquid API...")
            data = self._make_request({"type": "metaAndAssetCtxs"})
            if not isinstance(data, list) or len(data) < 2:
                raise FetchError("Unexpected metaAndAssetCtxs response")
            return data[0], data[1]

        return self.cache_service.get_market_context(load)

    def get_clearinghouse_state(self, wallet_address: str) -> dict:
        """Fetch the raw clearinghouse state of a wallet."""
        validate_address(wallet_address, Platform.HYPERLIQUID)
        data = self._make_request({
            "type": "clearinghouseState",
            "user": wallet_address
        })
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected clearinghouseState response for {wallet_address}")
        return data

    @staticmethod
    def normalize_positions(
        clearinghouse: dict,
        meta: dict,
        asset_ctxs: List[dict]
    ) -> List[DerivedPosition]:
        """Convert clearinghouse asset positions into derived positions."""
        coin_to_index: Dict[str, int] = {
            asset.get('name'): index
            for index, asset in enumerate(meta.get('universe', []))
        }

        positions = []
        for asset_position in clearinghouse.get('assetPositions') or []:
            pos = asset_position.get('position', {})
            signed_size = _float(pos.get('szi'))

            # Skip zero-size positions
            if signed_size == 0:
                continue

            coin = pos.get('coin', 'Unknown')
            market_index = coin_to_index.get(coin, -1)
            asset_ctx = asset_ctxs[market_index] if 0 <= market_index < len(asset_ctxs) else None

            entry = _float(pos.get('entryPx'))
            mark = _float(asset_ctx.get('markPx'), entry) if asset_ctx else entry
            notional = abs(_float(pos.get('positionValue')))
            pnl = _float(pos.get('unrealizedPnl'))
            margin = _float(pos.get('marginUsed'))

            leverage_data = pos.get('leverage')
            if isinstance(leverage_data, dict) and leverage_data.get('value') is not None:
                leverage = float(leverage_data['value'])
            else:
                leverage = notional / margin if margin > 0 else 0.0

            positions.append(DerivedPosition(
                market=f"{coin}-PERP",
                market_index=market_index,
                direction=PositionDirection.LONG if signed_size > 0 else PositionDirection.SHORT,
                size=abs(signed_size),
                entry_price=entry,
                mark_price=mark,
                notional_usd=notional,
                unrealized_pnl=pnl,
                pnl_percent=pnl / margin * 100 if margin > 0 else 0.0,
                margin=margin,
                leverage=leverage,
                liquidation_price=_float(pos.get('liquidationPx')),
                funding_rate=_float(asset_ctx.get('funding')) * 100 if asset_ctx else 0.0
            ))

        return positions

    @staticmethod
    def normalize_equity(clearinghouse: dict) -> AccountEquity:
        """Convert the cross margin summary into account equity."""
        summary = clearinghouse.get('crossMarginSummary') or clearinghouse.get('marginSummary') or {}

        account_value = _float(summary.get('accountValue'))
        margin_used = _float(summary.get('totalMarginUsed'))
        total_notional = _float(summary.get('totalNtlPos'))
        withdrawable = _float(clearinghouse.get('withdrawable'))
        maintenance = _float(clearinghouse.get('crossMaintenanceMarginUsed'))

        unrealized_pnl = sum(
            _float(ap.get('position', {}).get('unrealizedPnl'))
            for ap in clearinghouse.get('assetPositions') or []
        )

        health = 100.0
        if maintenance > 0 and account_value > 0:
            health = clamp_health((account_value - maintenance) / account_value * 100)
        elif maintenance > 0:
            health = 0.0

        return AccountEquity(
            total_equity=account_value,
            free_collateral=max(0.0, withdrawable),
            margin_used=margin_used,
            unrealized_pnl=unrealized_pnl,
            account_health=health,
            leverage=total_notional / account_value if account_value > 0 else 0.0
        )

    @staticmethod
    def normalize_balances(equity: AccountEquity) -> List[DerivedBalance]:
        """Hyperliquid accounts are USDC-margined: one balance equal to account value."""
        if equity.total_equity <= DUST_THRESHOLD:
            return []
        return [DerivedBalance(
            asset=QUOTE_SYMBOL,
            amount=equity.total_equity,
            value_usd=equity.total_equity,
            market_index=QUOTE_SPOT_MARKET_INDEX
        )]

    def get_snapshot(self, wallet: TrackedWallet) -> WalletSnapshot:
        """Fetch positions, balances and equity with a single state request."""
        clearinghouse = self.get_clearinghouse_state(wallet.address)
        meta, asset_ctxs = self.get_meta_and_asset_ctxs()
        try:
            equity = self.normalize_equity(clearinghouse)
            positions = self.normalize_positions(clearinghouse, meta, asset_ctxs)
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Malformed clearinghouse state for {wallet.address}: {e}") from e
        return WalletSnapshot(
            wallet=wallet,
            equity=equity,
            positions=positions,
            balances=self.normalize_balances(equity)
        )

    def get_open_orders(self, wallet_address: str, limit: Optional[int] = None) -> List[Order]:
        """Fetch open orders."""
        validate_address(wallet_address, Platform.HYPERLIQUID)
        self.logger.info("Fetching open orders from Hyperliquid API...")
        data = self._make_request({
            "type": "openOrders",
            "user": wallet_address
        })

        orders_data = data if isinstance(data, list) else []
        if limit is not None:
            orders_data = orders_data[:limit]

        orders = []
        for order_data in orders_data:
            try:
                orders.append(Order.from_hyperliquid_data(order_data))
            except (ValueError, TypeError) as e:
                self.logger.warning(f"Failed to parse order data: {e}")
                self.logger.debug(f"Raw order data: {order_data}")
                continue

        self.logger.info(f"Successfully fetched {len(orders)} open orders")
        return orders

    def get_subaccounts(self, wallet_address: str) -> List[HyperliquidSubAccount]:
        """Fetch sub-accounts; wallets without sub-accounts yield an empty list."""
        validate_address(wallet_address, Platform.HYPERLIQUID)
        try:
            data = self._make_request({
                "type": "subAccounts",
                "user": wallet_address
            })
        except FetchError as e:
            self.logger.warning(f"Could not fetch sub-accounts for {wallet_address}: {e}")
            return []

        if not data:
            self.logger.info("No sub-accounts found")
            return []

        subaccounts = [HyperliquidSubAccount.from_api_data(sub) for sub in data]
        self.logger.info(f"Fetched {len(subaccounts)} sub-accounts")
        return subaccounts

    def test_connectivity(self) -> bool:
        """Test API connectivity."""
        try:
            self.logger.info("Testing Hyperliquid API connectivity...")
            data = self._make_request({"type": "allMids"})
        except FetchError as e:
            self.logger.error(f"Hyperliquid API connectivity test failed: {e}")
            return False

        if isinstance(data, dict) and len(data) > 0:
            self.logger.info("Hyperliquid API connectivity test passed")
            return True

        self.logger.warning("Hyperliquid API returned empty or invalid data")
        return False

    def close(self) -> None:
        """Close the session."""
        self.session.close()
        self._ready = False
        self.logger.debug("API service session closed")
