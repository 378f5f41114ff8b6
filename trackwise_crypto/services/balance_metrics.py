"""
Balance metrics calculator.

Converts Drift scaled spot balances into token amounts by applying the
market's cumulative interest index, then values them in USD.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from ..models.balance import DerivedBalance
from ..models.markets import (
    PRICE_PRECISION,
    QUOTE_SYMBOL,
    SPOT_BALANCE_PRECISION,
    SPOT_CUMULATIVE_INTEREST_PRECISION,
    MarketMetadata,
    get_spot_market,
)
from ..models.raw import OraclePrice, RawSpotPosition, SpotMarketInterest

logger = logging.getLogger(__name__)

DUST_THRESHOLD = 1e-6


def cumulative_interest(raw: RawSpotPosition, interest: Optional[SpotMarketInterest]) -> int:
    """Interest index for the balance type; 1.0 (1e10) when unavailable."""
    if interest is None:
        return SPOT_CUMULATIVE_INTEREST_PRECISION
    rate = interest.rate_for(raw.balance_type)
    if rate <= 0:
        return SPOT_CUMULATIVE_INTEREST_PRECISION
    return rate


def token_amount(raw: RawSpotPosition, interest: Optional[SpotMarketInterest]) -> float:
    """Interest-accrued token amount of a scaled balance."""
    numerator = abs(raw.scaled_balance) * cumulative_interest(raw, interest)
    return numerator / (SPOT_BALANCE_PRECISION * SPOT_CUMULATIVE_INTEREST_PRECISION)


def value_usd(amount: float, market: MarketMetadata, oracle: Optional[OraclePrice]) -> float:
    """USD value; the quote asset and unpriced assets are valued 1:1."""
    if market.is_quote:
        return amount
    if oracle is None:
        logger.debug(f"No oracle price for spot market {market.market_index}, valuing 1:1")
        return amount
    return amount * (oracle.price / PRICE_PRECISION)


def derive_balance(
    raw: RawSpotPosition,
    market: MarketMetadata,
    interest: Optional[SpotMarketInterest] = None,
    oracle: Optional[OraclePrice] = None
) -> Optional[DerivedBalance]:
    """Derive one balance; None for empty or dust balances."""
    if raw.is_empty:
        return None

    if interest is None:
        logger.debug(f"No interest data for spot market {raw.market_index}, using rate 1.0")
    amount = token_amount(raw, interest)
    if amount <= DUST_THRESHOLD:
        return None

    return DerivedBalance(
        asset=market.symbol,
        amount=amount,
        value_usd=value_usd(amount, market, oracle),
        market_index=raw.market_index,
        balance_type=raw.balance_type
    )


def sort_balances(balances: List[DerivedBalance]) -> List[DerivedBalance]:
    """Order balances quote asset first, then by descending USD value."""
    return sorted(
        balances,
        key=lambda b: (not (b.is_quote or b.asset == QUOTE_SYMBOL), -b.value_usd)
    )


def compute_balances(
    raw_positions: Iterable[RawSpotPosition],
    interest_rates: Optional[Mapping[int, SpotMarketInterest]] = None,
    oracle_prices: Optional[Mapping[int, OraclePrice]] = None,
    markets: Optional[Mapping[int, MarketMetadata]] = None
) -> List[DerivedBalance]:
    """Derive and order every non-dust balance of an account.

    Args:
        raw_positions: raw spot positions of one sub-account
        interest_rates: spot market interest keyed by market index
        oracle_prices: spot oracle prices keyed by market index
        markets: metadata overrides keyed by market index

    Returns:
        Balances ordered quote asset first, then by descending USD value
    """
    interest_rates = interest_rates or {}
    oracle_prices = oracle_prices or {}
    markets = markets or {}

    balances = []
    for raw in raw_positions:
        market = markets.get(raw.market_index) or get_spot_market(raw.market_index)
        balance = derive_balance(
            raw,
            market,
            interest_rates.get(raw.market_index),
            oracle_prices.get(raw.market_index)
        )
        if balance is not None:
            balances.append(balance)

    return sort_balances(balances)
