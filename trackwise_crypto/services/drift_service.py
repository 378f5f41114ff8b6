"""
Drift account service: fetch raw state from a data source, then derive metrics.
"""

import logging
from typing import Dict, List, Tuple

from ..models.order import Order
from ..models.position import DerivedPosition
from ..models.balance import DerivedBalance
from ..models.account import AccountEquity
from ..models.raw import (
    MarketKind,
    OraclePrice,
    PerpMarketFunding,
    RawPerpPosition,
    RawSpotPosition,
    SpotMarketInterest,
    SubAccount,
)
from ..models.summary import WalletSnapshot
from ..models.wallet import Platform, TrackedWallet, validate_address
from .balance_metrics import compute_balances
from .data_source import DriftDataSource
from .equity_service import compute_equity
from .position_metrics import compute_positions


class DriftAccountService:
    """Service deriving Drift positions, balances and equity for a wallet."""

    def __init__(self, source: DriftDataSource):
        self.source = source
        self.logger = logging.getLogger(__name__)

    def _perp_market_data(
        self,
        raw_positions: List[RawPerpPosition]
    ) -> Tuple[Dict[int, OraclePrice], Dict[int, PerpMarketFunding]]:
        oracle_prices = {}
        funding_rates = {}
        for market_index in {p.market_index for p in raw_positions if p.is_open}:
            oracle = self.source.fetch_oracle_price(market_index, MarketKind.PERP)
            if oracle is not None:
                oracle_prices[market_index] = oracle
            funding = self.source.fetch_perp_market_funding(market_index)
            if funding is not None:
                funding_rates[market_index] = funding
        return oracle_prices, funding_rates

    def _spot_market_data(
        self,
        raw_positions: List[RawSpotPosition]
    ) -> Tuple[Dict[int, SpotMarketInterest], Dict[int, OraclePrice]]:
        interest_rates = {}
        oracle_prices = {}
        for market_index in {p.market_index for p in raw_positions if not p.is_empty}:
            interest = self.source.fetch_spot_market_interest(market_index)
            if interest is not None:
                interest_rates[market_index] = interest
            oracle = self.source.fetch_oracle_price(market_index, MarketKind.SPOT)
            if oracle is not None:
                oracle_prices[market_index] = oracle
        return interest_rates, oracle_prices

    def get_positions(self, wallet_address: str, sub_account_id: int = 0) -> List[DerivedPosition]:
        """Fetch and derive open perp positions."""
        validate_address(wallet_address, Platform.DRIFT)
        raw_positions = self.source.fetch_perp_positions(wallet_address, sub_account_id)
        oracle_prices, funding_rates = self._perp_market_data(raw_positions)
        positions = compute_positions(raw_positions, oracle_prices, funding_rates)
        self.logger.info(f"Fetched {len(positions)} Drift positions for {wallet_address}")
        return positions

    def get_balances(self, wallet_address: str, sub_account_id: int = 0) -> List[DerivedBalance]:
        """Fetch and derive non-dust spot balances."""
        validate_address(wallet_address, Platform.DRIFT)
        raw_positions = self.source.fetch_spot_positions(wallet_address, sub_account_id)
        interest_rates, oracle_prices = self._spot_market_data(raw_positions)
        balances = compute_balances(raw_positions, interest_rates, oracle_prices)
        self.logger.info(f"Fetched {len(balances)} Drift balances for {wallet_address}")
        return balances

    def get_equity(self, wallet_address: str, sub_account_id: int = 0) -> AccountEquity:
        """Fetch balances and positions and aggregate them into equity."""
        return compute_equity(
            self.get_balances(wallet_address, sub_account_id),
            self.get_positions(wallet_address, sub_account_id)
        )

    def get_snapshot(self, wallet: TrackedWallet) -> WalletSnapshot:
        """Fetch the full account state of a tracked wallet."""
        positions = self.get_positions(wallet.address, wallet.sub_account_id)
        balances = self.get_balances(wallet.address, wallet.sub_account_id)
        return WalletSnapshot(
            wallet=wallet,
            equity=compute_equity(balances, positions),
            positions=positions,
            balances=balances
        )

    def get_orders(self, wallet_address: str, sub_account_id: int = 0) -> List[Order]:
        """Fetch open and historical orders, newest order id first."""
        validate_address(wallet_address, Platform.DRIFT)
        orders = []
        for record in self.source.fetch_orders(wallet_address, sub_account_id):
            try:
                order = Order.from_drift_data(record)
            except (ValueError, TypeError) as e:
                self.logger.warning(f"Failed to parse order data: {e}")
                continue
            # Empty order slots carry order id 0
            if order.order_id == 0:
                continue
            orders.append(order)

        orders.sort(key=lambda o: o.order_id, reverse=True)
        self.logger.info(f"Fetched {len(orders)} Drift orders for {wallet_address}")
        return orders

    def get_subaccounts(self, wallet_address: str) -> List[SubAccount]:
        """List existing sub-accounts of a wallet."""
        validate_address(wallet_address, Platform.DRIFT)
        subaccounts = self.source.list_subaccounts(wallet_address)
        self.logger.info(f"Found {len(subaccounts)} Drift sub-accounts for {wallet_address}")
        return subaccounts
