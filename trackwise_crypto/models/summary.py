"""
Per-wallet snapshot and portfolio summary models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from .account import AccountEquity
from .balance import DerivedBalance
from .position import DerivedPosition
from .wallet import TrackedWallet


@dataclass
class WalletSnapshot:
    """Resolved account state of one tracked wallet, or the reason it is missing."""

    wallet: TrackedWallet
    equity: AccountEquity = field(default_factory=AccountEquity.empty)
    positions: List[DerivedPosition] = field(default_factory=list)
    balances: List[DerivedBalance] = field(default_factory=list)
    error: Optional[str] = None
    synced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def failed(cls, wallet: TrackedWallet, error: str) -> 'WalletSnapshot':
        """Build a zero-valued snapshot for a wallet whose fetch failed."""
        return cls(wallet=wallet, error=error)

    @property
    def ok(self) -> bool:
        """Check if the snapshot holds fetched data."""
        return self.error is None

    def to_dict(self) -> dict:
        """Convert snapshot to dictionary."""
        return {
            'wallet': self.wallet.to_dict(),
            'equity': self.equity.to_dict(),
            'positions': [p.to_dict() for p in self.positions],
            'balances': [b.to_dict() for b in self.balances],
            'error': self.error,
            'synced_at': self.synced_at.isoformat()
        }


@dataclass
class WalletSummary:
    """One row of the portfolio summary."""

    address: str
    platform: str
    label: Optional[str]
    total_equity: float
    unrealized_pnl: float
    positions_count: int
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert wallet summary to dictionary."""
        return {
            'address': self.address,
            'platform': self.platform,
            'label': self.label,
            'total_equity': self.total_equity,
            'unrealized_pnl': self.unrealized_pnl,
            'positions_count': self.positions_count,
            'error': self.error
        }


@dataclass
class PortfolioSummary:
    """Totals across all tracked wallets."""

    total_balance_usd: float = 0.0
    total_unrealized_pnl: float = 0.0
    open_positions_count: int = 0
    per_wallet: List[WalletSummary] = field(default_factory=list)
    failed_wallets: List[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """Check if any wallet failed to contribute."""
        return bool(self.failed_wallets)

    def to_dict(self) -> dict:
        """Convert portfolio summary to dictionary."""
        return {
            'total_balance_usd': self.total_balance_usd,
            'total_unrealized_pnl': self.total_unrealized_pnl,
            'open_positions_count': self.open_positions_count,
            'per_wallet': [w.to_dict() for w in self.per_wallet],
            'failed_wallets': list(self.failed_wallets),
            'is_partial': self.is_partial
        }
