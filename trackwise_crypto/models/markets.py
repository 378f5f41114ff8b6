"""
Static Drift market metadata and fixed-point precision constants.
"""

from dataclasses import dataclass
from typing import Dict


# Fixed-point precisions used by Drift account state
PRICE_PRECISION = 10 ** 6
FUNDING_RATE_PRECISION = 10 ** 9
SPOT_BALANCE_PRECISION = 10 ** 9
SPOT_CUMULATIVE_INTEREST_PRECISION = 10 ** 10

QUOTE_SPOT_MARKET_INDEX = 0
QUOTE_SYMBOL = "USDC"

DEFAULT_PERP_BASE_DECIMALS = 8
DEFAULT_PERP_QUOTE_DECIMALS = 6
DEFAULT_SPOT_DECIMALS = 6


@dataclass(frozen=True)
class MarketMetadata:
    """Display symbol and decimal precision for one market index."""

    market_index: int
    symbol: str
    base_decimals: int
    quote_decimals: int = DEFAULT_PERP_QUOTE_DECIMALS

    @property
    def is_quote(self) -> bool:
        """Check if this is the quote (USDC) spot market."""
        return self.market_index == QUOTE_SPOT_MARKET_INDEX

    def to_dict(self) -> dict:
        """Convert market metadata to dictionary."""
        return {
            'market_index': self.market_index,
            'symbol': self.symbol,
            'base_decimals': self.base_decimals,
            'quote_decimals': self.quote_decimals
        }


def _perp(index: int, symbol: str, base_decimals: int) -> MarketMetadata:
    return MarketMetadata(index, symbol, base_decimals, DEFAULT_PERP_QUOTE_DECIMALS)


def _spot(index: int, symbol: str, decimals: int) -> MarketMetadata:
    return MarketMetadata(index, symbol, decimals, decimals)


DRIFT_PERP_MARKETS: Dict[int, MarketMetadata] = {
    m.market_index: m for m in [
        _perp(0, 'SOL-PERP', 9),
        _perp(1, 'BTC-PERP', 6),
        _perp(2, 'ETH-PERP', 6),
        _perp(3, 'mSOL-PERP', 9),
        _perp(4, 'BNB-PERP', 8),
        _perp(5, 'AVAX-PERP', 8),
        _perp(6, 'ARB-PERP', 8),
        _perp(7, 'DOGE-PERP', 8),
        _perp(8, 'MATIC-PERP', 8),
        _perp(9, 'SUI-PERP', 8),
        _perp(10, 'XRP-PERP', 8),
        _perp(11, 'ADA-PERP', 8),
        _perp(12, 'APT-PERP', 8),
        _perp(13, 'LTC-PERP', 8),
        _perp(14, 'BCH-PERP', 8),
        _perp(15, 'OP-PERP', 8),
        _perp(16, 'LINK-PERP', 8),
        _perp(17, 'NEAR-PERP', 8),
        _perp(18, 'JTO-PERP', 8),
        _perp(19, 'TIA-PERP', 8),
        _perp(20, 'JUP-PERP', 8),
        _perp(21, 'WIF-PERP', 8),
        _perp(22, 'SEI-PERP', 8),
        _perp(23, 'DYM-PERP', 8),
        _perp(24, 'STRK-PERP', 8),
        _perp(25, 'BONK-PERP', 5),
        _perp(26, 'PYTH-PERP', 8),
        _perp(27, 'RNDR-PERP', 8),
    ]
}

DRIFT_SPOT_MARKETS: Dict[int, MarketMetadata] = {
    m.market_index: m for m in [
        _spot(0, 'USDC', 6),
        _spot(1, 'SOL', 9),
        _spot(2, 'BTC', 8),
        _spot(3, 'ETH', 8),
        _spot(4, 'PYTH', 6),
        _spot(5, 'BONK', 5),
        _spot(6, 'JTO', 8),
        _spot(7, 'WBTC', 8),
        _spot(8, 'MSOL', 9),
        _spot(9, 'RNDR', 8),
        _spot(10, 'WETH', 8),
        _spot(11, 'JUP', 6),
        _spot(12, 'STRK', 8),
        _spot(13, 'WIF', 6),
        _spot(14, 'DYM', 9),
        _spot(15, 'USDT', 6),
        _spot(16, 'SEI', 6),
    ]
}


def get_perp_market(market_index: int) -> MarketMetadata:
    """Get perp market metadata, synthesizing a default for unknown indices."""
    market = DRIFT_PERP_MARKETS.get(market_index)
    if market is not None:
        return market
    return MarketMetadata(
        market_index=market_index,
        symbol=f"PERP-{market_index}",
        base_decimals=DEFAULT_PERP_BASE_DECIMALS,
        quote_decimals=DEFAULT_PERP_QUOTE_DECIMALS
    )


def get_spot_market(market_index: int) -> MarketMetadata:
    """Get spot market metadata, synthesizing a default for unknown indices."""
    market = DRIFT_SPOT_MARKETS.get(market_index)
    if market is not None:
        return market
    return MarketMetadata(
        market_index=market_index,
        symbol=f"TOKEN{market_index}",
        base_decimals=DEFAULT_SPOT_DECIMALS,
        quote_decimals=DEFAULT_SPOT_DECIMALS
    )
