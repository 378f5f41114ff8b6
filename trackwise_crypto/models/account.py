"""
Account equity model.
"""

from dataclasses import dataclass


@dataclass
class AccountEquity:
    """Represents equity and margin state of one account."""

    total_equity: float
    free_collateral: float
    margin_used: float
    unrealized_pnl: float
    account_health: float
    leverage: float

    @classmethod
    def empty(cls) -> 'AccountEquity':
        """Equity of an account with no balances and no positions."""
        return cls(
            total_equity=0.0,
            free_collateral=0.0,
            margin_used=0.0,
            unrealized_pnl=0.0,
            account_health=100.0,
            leverage=0.0
        )

    @property
    def margin_ratio(self) -> float:
        """Calculate margin used as percentage of equity."""
        if self.total_equity > 0:
            return (self.margin_used / self.total_equity) * 100
        return 0.0

    def to_dict(self) -> dict:
        """Convert account equity to dictionary."""
        return {
            'total_equity': self.total_equity,
            'free_collateral': self.free_collateral,
            'margin_used': self.margin_used,
            'unrealized_pnl': self.unrealized_pnl,
            'account_health': self.account_health,
            'leverage': self.leverage,
            'margin_ratio': self.margin_ratio
        }


@dataclass
class HyperliquidSubAccount:
    """Represents a Hyperliquid sub-account of a master wallet."""

    name: str
    sub_account_user: str
    master: str
    equity: float

    @classmethod
    def from_api_data(cls, data: dict) -> 'HyperliquidSubAccount':
        """Create HyperliquidSubAccount from Hyperliquid API data."""
        state = data.get('clearinghouseState') or {}
        summary = state.get('crossMarginSummary') or {}
        return cls(
            name=data.get('name', ''),
            sub_account_user=data.get('subAccountUser', ''),
            master=data.get('master', ''),
            equity=float(summary.get('accountValue', 0) or 0)
        )

    def to_dict(self) -> dict:
        """Convert sub-account to dictionary."""
        return {
            'name': self.name,
            'sub_account_user': self.sub_account_user,
            'master': self.master,
            'equity': self.equity
        }
