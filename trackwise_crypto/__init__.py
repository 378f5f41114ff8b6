"""
TrackWise crypto position tracker.

Read-only aggregation of Drift and Hyperliquid perpetual positions and
balances into per-account equity and portfolio summaries.
"""

__version__ = "0.1.0"
