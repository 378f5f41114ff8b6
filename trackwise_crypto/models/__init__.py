"""
Data models for crypto position tracking.
"""

from .markets import MarketMetadata, get_perp_market, get_spot_market
from .raw import (
    BalanceType,
    MarketKind,
    OraclePrice,
    PerpMarketFunding,
    RawPerpPosition,
    RawSpotPosition,
    SpotMarketInterest,
    SubAccount,
)
from .position import DerivedPosition, PositionDirection
from .balance import DerivedBalance
from .account import AccountEquity, HyperliquidSubAccount
from .order import Order, OrderStatus
from .wallet import Platform, TrackedWallet, detect_platform, validate_address
from .summary import PortfolioSummary, WalletSnapshot, WalletSummary

__all__ = [
    'MarketMetadata', 'get_perp_market', 'get_spot_market',
    'BalanceType', 'MarketKind', 'OraclePrice', 'PerpMarketFunding',
    'RawPerpPosition', 'RawSpotPosition', 'SpotMarketInterest', 'SubAccount',
    'DerivedPosition', 'PositionDirection', 'DerivedBalance', 'AccountEquity', 'HyperliquidSubAccount',
    'Order', 'OrderStatus',
    'Platform', 'TrackedWallet', 'detect_platform', 'validate_address',
    'PortfolioSummary', 'WalletSnapshot', 'WalletSummary'
]
