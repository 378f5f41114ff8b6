"""
Position metrics calculator.

Derives direction, size, prices, PnL, margin, leverage, liquidation price and
funding rate for Drift perpetual positions from raw account state.

Margin figures are approximations: a flat 10% initial margin and 3%
maintenance margin are applied to every market, whereas the protocol uses
per-market, size-tiered requirements. As a consequence leverage is always 10x
for an open position with a known mark price, and liquidation prices are
indicative only.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from ..models.markets import (
    FUNDING_RATE_PRECISION,
    PRICE_PRECISION,
    MarketMetadata,
    get_perp_market,
)
from ..models.position import DerivedPosition, PositionDirection
from ..models.raw import OraclePrice, PerpMarketFunding, RawPerpPosition

logger = logging.getLogger(__name__)

INITIAL_MARGIN_RATIO = 0.10
MAINTENANCE_MARGIN_RATIO = 0.03


def position_size(raw: RawPerpPosition, market: MarketMetadata) -> float:
    """Absolute position size in base asset units."""
    return abs(raw.base_asset_amount) / 10 ** market.base_decimals


def entry_price(raw: RawPerpPosition, market: MarketMetadata) -> float:
    """Average entry price in quote units; 0 when there is no base amount."""
    if raw.base_asset_amount == 0:
        return 0.0
    numerator = abs(raw.quote_entry_amount) * 10 ** market.base_decimals
    denominator = abs(raw.base_asset_amount) * 10 ** market.quote_decimals
    return numerator / denominator


def mark_price(oracle: Optional[OraclePrice]) -> float:
    """Oracle price in quote units; 0 when the oracle is unavailable."""
    if oracle is None:
        return 0.0
    return oracle.price / PRICE_PRECISION


def funding_rate_percent(funding: Optional[PerpMarketFunding]) -> float:
    """Last funding rate as a percentage; 0 when unavailable."""
    if funding is None:
        return 0.0
    return funding.last_funding_rate / FUNDING_RATE_PRECISION * 100


def unrealized_pnl(
    direction: PositionDirection,
    size: float,
    entry: float,
    mark: float
) -> float:
    """Unrealized PnL in USD; 0 unless size, entry and mark are all positive."""
    if not (mark > 0 and entry > 0 and size > 0):
        return 0.0
    if direction is PositionDirection.LONG:
        return size * (mark - entry)
    return size * (entry - mark)


def pnl_percent(direction: PositionDirection, size: float, entry: float, mark: float) -> float:
    """PnL relative to the entry (long) or mark (short) price, in percent."""
    if not (mark > 0 and entry > 0 and size > 0):
        return 0.0
    if direction is PositionDirection.LONG:
        return (mark / entry - 1) * 100
    return (entry / mark - 1) * 100


def liquidation_price(
    direction: PositionDirection,
    entry: float,
    notional: float,
    margin: float
) -> float:
    """Price at which losses consume margin down to the maintenance threshold."""
    if entry <= 0 or notional <= 0:
        return 0.0
    maintenance = notional * MAINTENANCE_MARGIN_RATIO
    buffer_ratio = (margin - maintenance) / notional
    if direction is PositionDirection.LONG:
        return entry * (1 - buffer_ratio)
    return entry * (1 + buffer_ratio)


def derive_position(
    raw: RawPerpPosition,
    market: MarketMetadata,
    oracle: Optional[OraclePrice] = None,
    funding: Optional[PerpMarketFunding] = None
) -> Optional[DerivedPosition]:
    """Derive metrics for one raw position; None for a zero-size position."""
    if not raw.is_open:
        return None

    direction = PositionDirection.LONG if raw.base_asset_amount > 0 else PositionDirection.SHORT
    size = position_size(raw, market)
    entry = entry_price(raw, market)

    if oracle is None:
        logger.debug(f"No oracle price for perp market {raw.market_index}, mark price is 0")
    mark = mark_price(oracle)

    notional = size * mark
    margin = notional * INITIAL_MARGIN_RATIO
    leverage = notional / margin if margin > 0 else 0.0

    return DerivedPosition(
        market=market.symbol,
        market_index=raw.market_index,
        direction=direction,
        size=size,
        entry_price=entry,
        mark_price=mark,
        notional_usd=notional,
        unrealized_pnl=unrealized_pnl(direction, size, entry, mark),
        pnl_percent=pnl_percent(direction, size, entry, mark),
        margin=margin,
        leverage=leverage,
        liquidation_price=liquidation_price(direction, entry, notional, margin),
        funding_rate=funding_rate_percent(funding)
    )


def compute_positions(
    raw_positions: Iterable[RawPerpPosition],
    oracle_prices: Optional[Mapping[int, OraclePrice]] = None,
    funding_rates: Optional[Mapping[int, PerpMarketFunding]] = None,
    markets: Optional[Mapping[int, MarketMetadata]] = None
) -> List[DerivedPosition]:
    """Derive every open position of an account.

    Args:
        raw_positions: raw perp positions of one sub-account
        oracle_prices: perp oracle prices keyed by market index
        funding_rates: perp market funding keyed by market index
        markets: metadata overrides keyed by market index; unknown
            indices fall back to the static table, then to a default

    Returns:
        Derived positions in input order, zero-size positions omitted
    """
    oracle_prices = oracle_prices or {}
    funding_rates = funding_rates or {}
    markets = markets or {}

    positions = []
    for raw in raw_positions:
        market = markets.get(raw.market_index) or get_perp_market(raw.market_index)
        position = derive_position(
            raw,
            market,
            oracle_prices.get(raw.market_index),
            funding_rates.get(raw.market_index)
        )
        if position is not None:
            positions.append(position)

    return positions
