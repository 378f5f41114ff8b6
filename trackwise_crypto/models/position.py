"""
Derived perpetual position model.
"""

from dataclasses import dataclass
from enum import Enum


class PositionDirection(Enum):
    """Position direction enumeration."""
    LONG = "Long"
    SHORT = "Short"


@dataclass
class DerivedPosition:
    """Represents one open perpetual position with derived metrics."""

    market: str
    market_index: int
    direction: PositionDirection
    size: float
    entry_price: float
    mark_price: float
    notional_usd: float
    unrealized_pnl: float
    pnl_percent: float
    margin: float
    leverage: float
    liquidation_price: float
    funding_rate: float

    @property
    def is_long(self) -> bool:
        """Check if position is long."""
        return self.direction is PositionDirection.LONG

    @property
    def is_profitable(self) -> bool:
        """Check if position is profitable."""
        return self.unrealized_pnl >= 0

    def to_dict(self) -> dict:
        """Convert position to dictionary."""
        return {
            'market': self.market,
            'market_index': self.market_index,
            'direction': self.direction.value,
            'size': self.size,
            'entry_price': self.entry_price,
            'mark_price': self.mark_price,
            'notional_usd': self.notional_usd,
            'unrealized_pnl': self.unrealized_pnl,
            'pnl_percent': self.pnl_percent,
            'margin': self.margin,
            'leverage': self.leverage,
            'liquidation_price': self.liquidation_price,
            'funding_rate': self.funding_rate,
            'is_profitable': self.is_profitable
        }
