"""
Service layer: metric calculators, aggregators and data sources.
"""

from .position_metrics import compute_positions
from .balance_metrics import compute_balances
from .equity_service import compute_equity
from .summary_service import compute_summary
from .cache_service import CacheService, PortfolioCacheService
from .data_source import DriftDataSource, SnapshotDriftSource
from .drift_service import DriftAccountService
from .hyperliquid_api import HyperliquidAPIService
from .portfolio_service import PortfolioService

__all__ = [
    'compute_positions',
    'compute_balances',
    'compute_equity',
    'compute_summary',
    'CacheService',
    'PortfolioCacheService',
    'DriftDataSource',
    'SnapshotDriftSource',
    'DriftAccountService',
    'HyperliquidAPIService',
    'PortfolioService'
]
