"""
Raw on-chain account state records as returned by a data source.

Drift stores every amount as a fixed-point integer. Values arrive from JSON
dumps or SDK serializations as ints or decimal strings, so the parsers accept
both and keep them as arbitrary-precision Python ints.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .markets import SPOT_CUMULATIVE_INTEREST_PRECISION


def parse_fixed_int(value: Any) -> int:
    """Parse a fixed-point integer from an int, float or decimal string."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Not a fixed-point integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = str(value).strip()
    if not text:
        return 0
    return int(text)


class BalanceType(Enum):
    """Spot balance type enumeration."""
    DEPOSIT = "deposit"
    BORROW = "borrow"

    @classmethod
    def parse(cls, value: Any) -> 'BalanceType':
        """Parse an SDK-style variant ({'deposit': {}}), a plain string or None."""
        if value is None:
            return cls.DEPOSIT
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            if 'borrow' in value:
                return cls.BORROW
            return cls.DEPOSIT
        if str(value).lower() == 'borrow':
            return cls.BORROW
        return cls.DEPOSIT


class MarketKind(Enum):
    """Market kind enumeration."""
    SPOT = "spot"
    PERP = "perp"


@dataclass(frozen=True)
class RawSpotPosition:
    """One spot holding in one sub-account."""

    market_index: int
    scaled_balance: int
    balance_type: BalanceType = BalanceType.DEPOSIT

    @classmethod
    def from_api_data(cls, data: dict) -> 'RawSpotPosition':
        """Create RawSpotPosition from a serialized user account entry."""
        return cls(
            market_index=int(data.get('marketIndex', 0)),
            scaled_balance=parse_fixed_int(data.get('scaledBalance')),
            balance_type=BalanceType.parse(data.get('balanceType'))
        )

    @property
    def is_empty(self) -> bool:
        """Check if the scaled balance is zero."""
        return self.scaled_balance == 0


@dataclass(frozen=True)
class RawPerpPosition:
    """One perpetual position; the sign of base_asset_amount encodes the side."""

    market_index: int
    base_asset_amount: int
    quote_entry_amount: int

    @classmethod
    def from_api_data(cls, data: dict) -> 'RawPerpPosition':
        """Create RawPerpPosition from a serialized user account entry."""
        return cls(
            market_index=int(data.get('marketIndex', 0)),
            base_asset_amount=parse_fixed_int(data.get('baseAssetAmount')),
            quote_entry_amount=parse_fixed_int(data.get('quoteEntryAmount'))
        )

    @property
    def is_open(self) -> bool:
        """Check if the position has a non-zero base amount."""
        return self.base_asset_amount != 0


@dataclass(frozen=True)
class OraclePrice:
    """Oracle price at PRICE_PRECISION (1e6)."""

    market_index: int
    price: int

    @classmethod
    def from_api_data(cls, market_index: int, data: Any) -> Optional['OraclePrice']:
        """Create OraclePrice from {'price': ...} or a bare value; None if absent."""
        if isinstance(data, dict):
            data = data.get('price')
        if data is None:
            return None
        return cls(market_index=market_index, price=parse_fixed_int(data))


@dataclass(frozen=True)
class SpotMarketInterest:
    """Cumulative deposit/borrow interest indices at 1e10 precision."""

    market_index: int
    cumulative_deposit_interest: int = SPOT_CUMULATIVE_INTEREST_PRECISION
    cumulative_borrow_interest: int = SPOT_CUMULATIVE_INTEREST_PRECISION

    @classmethod
    def from_api_data(cls, market_index: int, data: dict) -> 'SpotMarketInterest':
        """Create SpotMarketInterest from a serialized spot market account."""
        return cls(
            market_index=market_index,
            cumulative_deposit_interest=parse_fixed_int(data.get('cumulativeDepositInterest')),
            cumulative_borrow_interest=parse_fixed_int(data.get('cumulativeBorrowInterest'))
        )

    def rate_for(self, balance_type: BalanceType) -> int:
        """Get the cumulative interest index that applies to a balance type."""
        if balance_type is BalanceType.BORROW:
            return self.cumulative_borrow_interest
        return self.cumulative_deposit_interest


@dataclass(frozen=True)
class PerpMarketFunding:
    """Last funding rate of a perp market at 1e9 precision."""

    market_index: int
    last_funding_rate: int

    @classmethod
    def from_api_data(cls, market_index: int, data: Any) -> Optional['PerpMarketFunding']:
        """Create PerpMarketFunding from {'lastFundingRate': ...}, an amm dict or a bare value."""
        if isinstance(data, dict):
            amm = data.get('amm', data)
            data = amm.get('lastFundingRate')
        if data is None:
            return None
        return cls(market_index=market_index, last_funding_rate=parse_fixed_int(data))


@dataclass(frozen=True)
class SubAccount:
    """A probed Drift sub-account id."""

    id: int
    exists: bool

    def to_dict(self) -> dict:
        """Convert sub-account to dictionary."""
        return {'id': self.id, 'exists': self.exists}
