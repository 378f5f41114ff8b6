"""
Drift account state data sources.

A data source returns raw, protocol-level records for one wallet. Decoding
Solana accounts is the job of a concrete source; the calculators only ever see
the records defined in ``models.raw``.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import FetchError
from ..models.raw import (
    MarketKind,
    OraclePrice,
    PerpMarketFunding,
    RawPerpPosition,
    RawSpotPosition,
    SpotMarketInterest,
    SubAccount,
)

MAX_SUBACCOUNT_ID = 10


class DriftDataSource(ABC):
    """Read-only source of Drift user and market account state."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__)
        self._ready = False

    @property
    def ready(self) -> bool:
        """Check if the source has completed its warm-up."""
        return self._ready

    async def connect(self) -> None:
        """Warm up the source (load markets, open connections)."""
        await asyncio.to_thread(self._load)
        self._ready = True
        self.logger.info(f"{self.__class__.__name__} ready")

    def _load(self) -> None:
        """Blocking warm-up step run by connect()."""

    def close(self) -> None:
        """Release resources held by the source."""
        self._ready = False

    def _require_ready(self) -> None:
        if not self._ready:
            raise FetchError(f"{self.__class__.__name__} is not connected")

    @abstractmethod
    def fetch_spot_positions(self, wallet_address: str, sub_account_id: int = 0) -> List[RawSpotPosition]:
        """Fetch raw spot positions of a sub-account."""

    @abstractmethod
    def fetch_perp_positions(self, wallet_address: str, sub_account_id: int = 0) -> List[RawPerpPosition]:
        """Fetch raw perp positions of a sub-account."""

    @abstractmethod
    def fetch_oracle_price(self, market_index: int, market_kind: MarketKind) -> Optional[OraclePrice]:
        """Fetch the oracle price of a market; None when unavailable."""

    @abstractmethod
    def fetch_spot_market_interest(self, market_index: int) -> Optional[SpotMarketInterest]:
        """Fetch cumulative interest of a spot market; None when unavailable."""

    @abstractmethod
    def fetch_perp_market_funding(self, market_index: int) -> Optional[PerpMarketFunding]:
        """Fetch last funding rate of a perp market; None when unavailable."""

    @abstractmethod
    def list_subaccounts(self, wallet_address: str) -> List[SubAccount]:
        """Probe sub-account ids 0..MAX_SUBACCOUNT_ID and return the existing ones."""

    def fetch_orders(self, wallet_address: str, sub_account_id: int = 0) -> List[dict]:
        """Fetch raw order records of a sub-account."""
        return []


class SnapshotDriftSource(DriftDataSource):
    """Data source backed by a JSON dump of Drift account state.

    Expected layout::

        {
          "oracles": {"perp": {"0": "<price>"}, "spot": {"1": "<price>"}},
          "spotMarkets": {"1": {"cumulativeDepositInterest": "...",
                                "cumulativeBorrowInterest": "..."}},
          "perpMarkets": {"0": {"amm": {"lastFundingRate": "..."}}},
          "users": {"<wallet>": {"0": {"spotPositions": [...],
                                       "perpPositions": [...],
                                       "orders": [...]}}}
        }
    """

    def __init__(self, source: Union[str, Path, Dict[str, Any]]):
        super().__init__()
        self.source = source
        self._state: Dict[str, Any] = {}

    def _load(self) -> None:
        if isinstance(self.source, dict):
            self._state = self.source
            return

        path = Path(self.source)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                self._state = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FetchError(f"Failed to load Drift snapshot {path}: {e}") from e

        self.logger.info(f"Loaded Drift snapshot from {path}")

    def _user(self, wallet_address: str, sub_account_id: int) -> Optional[dict]:
        self._require_ready()
        user = self._state.get('users', {}).get(wallet_address, {}).get(str(sub_account_id))
        if user is None:
            self.logger.info(f"No Drift user for {wallet_address} sub-account {sub_account_id}")
        return user

    def fetch_spot_positions(self, wallet_address: str, sub_account_id: int = 0) -> List[RawSpotPosition]:
        user = self._user(wallet_address, sub_account_id)
        if user is None:
            return []
        try:
            return [RawSpotPosition.from_api_data(p) for p in user.get('spotPositions', [])]
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Malformed spot positions for {wallet_address}: {e}") from e

    def fetch_perp_positions(self, wallet_address: str, sub_account_id: int = 0) -> List[RawPerpPosition]:
        user = self._user(wallet_address, sub_account_id)
        if user is None:
            return []
        try:
            return [RawPerpPosition.from_api_data(p) for p in user.get('perpPositions', [])]
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Malformed perp positions for {wallet_address}: {e}") from e

    def fetch_orders(self, wallet_address: str, sub_account_id: int = 0) -> List[dict]:
        user = self._user(wallet_address, sub_account_id)
        if user is None:
            return []
        return list(user.get('orders', []))

    def fetch_oracle_price(self, market_index: int, market_kind: MarketKind) -> Optional[OraclePrice]:
        self._require_ready()
        data = self._state.get('oracles', {}).get(market_kind.value, {}).get(str(market_index))
        try:
            return OraclePrice.from_api_data(market_index, data)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Unreadable {market_kind.value} oracle price for market {market_index}: {e}")
            return None

    def fetch_spot_market_interest(self, market_index: int) -> Optional[SpotMarketInterest]:
        self._require_ready()
        data = self._state.get('spotMarkets', {}).get(str(market_index))
        if not data:
            return None
        try:
            return SpotMarketInterest.from_api_data(market_index, data)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Unreadable interest for spot market {market_index}: {e}")
            return None

    def fetch_perp_market_funding(self, market_index: int) -> Optional[PerpMarketFunding]:
        self._require_ready()
        data = self._state.get('perpMarkets', {}).get(str(market_index))
        try:
            return PerpMarketFunding.from_api_data(market_index, data)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Unreadable funding for perp market {market_index}: {e}")
            return None

    def list_subaccounts(self, wallet_address: str) -> List[SubAccount]:
        self._require_ready()
        users = self._state.get('users', {}).get(wallet_address, {})
        return [
            SubAccount(id=sub_id, exists=True)
            for sub_id in range(MAX_SUBACCOUNT_ID + 1)
            if str(sub_id) in users
        ]
