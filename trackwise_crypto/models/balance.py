"""
Derived spot balance model.
"""

from dataclasses import dataclass

from .markets import QUOTE_SPOT_MARKET_INDEX
from .raw import BalanceType


@dataclass
class DerivedBalance:
    """Represents one interest-accrued asset holding valued in USD."""

    asset: str
    amount: float
    value_usd: float
    market_index: int = QUOTE_SPOT_MARKET_INDEX
    balance_type: BalanceType = BalanceType.DEPOSIT

    @property
    def is_quote(self) -> bool:
        """Check if this balance is the quote asset."""
        return self.market_index == QUOTE_SPOT_MARKET_INDEX

    def to_dict(self) -> dict:
        """Convert balance to dictionary."""
        return {
            'asset': self.asset,
            'amount': self.amount,
            'value_usd': self.value_usd,
            'market_index': self.market_index,
            'balance_type': self.balance_type.value
        }
