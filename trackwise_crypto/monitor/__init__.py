"""
Periodic polling of tracked wallets.
"""

from .portfolio_monitor import PortfolioMonitor

__all__ = ['PortfolioMonitor']
