"""
Open order data model.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .markets import DRIFT_PERP_MARKETS, DRIFT_SPOT_MARKETS, PRICE_PRECISION
from .position import PositionDirection
from .raw import parse_fixed_int


# Drift order slots are ~400ms apart; slot * 400 approximates a ms timestamp
SLOT_DURATION_MS = 400
DEFAULT_ORDER_BASE_DECIMALS = 9


class OrderStatus(Enum):
    """Order status enumeration."""
    OPEN = "Open"
    FILLED = "Filled"
    CANCELLED = "Cancelled"


# Drift encodes the order type as a single-key variant
DRIFT_ORDER_TYPES = {
    'market': 'Market',
    'limit': 'Limit',
    'triggerMarket': 'Stop Market',
    'triggerLimit': 'Stop Limit',
    'oracle': 'Oracle',
}


def _variant(value) -> str:
    """Get the key of an SDK variant such as {'limit': {}}; strings pass through."""
    if isinstance(value, dict):
        return next(iter(value), '')
    return str(value or '')


@dataclass
class Order:
    """Represents an order on a perp or spot market."""

    order_id: int
    market: str
    market_index: int
    order_type: str
    direction: PositionDirection
    price: float
    size: float
    filled_size: float
    status: OrderStatus
    timestamp: int

    @classmethod
    def from_drift_data(cls, data: dict) -> 'Order':
        """Create Order from a Drift user account order record."""
        market_index = int(data.get('marketIndex', 0))
        is_perp = _variant(data.get('marketType')) == 'perp'

        if is_perp:
            market_info = DRIFT_PERP_MARKETS.get(market_index)
            market = market_info.symbol if market_info else f"PERP-{market_index}"
            base_decimals = market_info.base_decimals if market_info else DEFAULT_ORDER_BASE_DECIMALS
        else:
            market_info = DRIFT_SPOT_MARKETS.get(market_index)
            market = market_info.symbol if market_info else f"SPOT-{market_index}"
            base_decimals = DEFAULT_ORDER_BASE_DECIMALS

        order_type = DRIFT_ORDER_TYPES.get(_variant(data.get('orderType')), 'Limit')

        direction = (
            PositionDirection.LONG
            if _variant(data.get('direction')) == 'long'
            else PositionDirection.SHORT
        )

        status_key = _variant(data.get('status'))
        if status_key == 'filled':
            status = OrderStatus.FILLED
        elif status_key == 'canceled':
            status = OrderStatus.CANCELLED
        else:
            status = OrderStatus.OPEN

        price = parse_fixed_int(data.get('price')) / PRICE_PRECISION
        scale = 10 ** base_decimals
        size = abs(parse_fixed_int(data.get('baseAssetAmount'))) / scale
        filled_size = abs(parse_fixed_int(data.get('baseAssetAmountFilled'))) / scale

        slot = parse_fixed_int(data.get('slot'))
        if slot:
            timestamp = slot * SLOT_DURATION_MS
        else:
            timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)

        return cls(
            order_id=parse_fixed_int(data.get('orderId')),
            market=market,
            market_index=market_index,
            order_type=order_type,
            direction=direction,
            price=price,
            size=size,
            filled_size=filled_size,
            status=status,
            timestamp=timestamp
        )

    @classmethod
    def from_hyperliquid_data(cls, data: dict) -> 'Order':
        """Create Order from a Hyperliquid openOrders entry."""
        # 'B' = bid (buy), 'A' = ask (sell)
        direction = PositionDirection.LONG if data.get('side') == 'B' else PositionDirection.SHORT
        size = float(data.get('sz', 0))
        original_size = float(data.get('origSz', size))
        coin = data.get('coin', 'Unknown')

        return cls(
            order_id=int(data.get('oid', 0)),
            market=f"{coin}-PERP",
            market_index=-1,
            order_type=data.get('orderType', 'Limit'),
            direction=direction,
            price=float(data.get('limitPx', 0)),
            size=size,
            filled_size=max(0.0, original_size - size),
            status=OrderStatus.OPEN,
            timestamp=int(data.get('timestamp', 0))
        )

    @property
    def order_value(self) -> float:
        """Calculate order value."""
        return self.size * self.price

    def to_dict(self) -> dict:
        """Convert order to dictionary."""
        return {
            'order_id': self.order_id,
            'market': self.market,
            'market_index': self.market_index,
            'order_type': self.order_type,
            'direction': self.direction.value,
            'price': self.price,
            'size': self.size,
            'filled_size': self.filled_size,
            'status': self.status.value,
            'timestamp': self.timestamp,
            'order_value': self.order_value
        }
