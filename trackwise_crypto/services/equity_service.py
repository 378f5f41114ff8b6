"""
Account equity aggregator.
"""

import math
from typing import Iterable, List

from ..models.account import AccountEquity
from ..models.balance import DerivedBalance
from ..models.position import DerivedPosition
from .position_metrics import INITIAL_MARGIN_RATIO, MAINTENANCE_MARGIN_RATIO


def clamp_health(value: float) -> float:
    """Clamp a health percentage into [0, 100]; non-finite values become 0."""
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value))


def account_health(total_equity: float, total_notional: float, margin_used: float) -> float:
    """Distance from liquidation as a percentage; 100 without margin in use."""
    if margin_used <= 0:
        return 100.0
    maintenance = total_notional * MAINTENANCE_MARGIN_RATIO
    buffer = margin_used - maintenance
    if buffer <= 0:
        return 100.0
    return clamp_health((total_equity - maintenance) / buffer * 100)


def compute_equity(
    balances: Iterable[DerivedBalance],
    positions: Iterable[DerivedPosition]
) -> AccountEquity:
    """Aggregate one account's balances and open positions into equity figures.

    Total equity is spot value plus unrealized perp PnL. Margin uses the same
    flat initial-margin ratio as the per-position calculator.
    """
    balances = list(balances)
    positions: List[DerivedPosition] = list(positions)

    spot_value = sum(b.value_usd for b in balances)
    unrealized_pnl = sum(p.unrealized_pnl for p in positions)
    total_notional = sum(p.notional_usd for p in positions)
    margin_used = sum(p.notional_usd * INITIAL_MARGIN_RATIO for p in positions)

    total_equity = spot_value + unrealized_pnl
    free_collateral = max(0.0, total_equity - margin_used)
    leverage = total_notional / total_equity if total_equity > 0 else 0.0

    return AccountEquity(
        total_equity=total_equity,
        free_collateral=free_collateral,
        margin_used=margin_used,
        unrealized_pnl=unrealized_pnl,
        account_health=account_health(total_equity, total_notional, margin_used),
        leverage=leverage
    )
