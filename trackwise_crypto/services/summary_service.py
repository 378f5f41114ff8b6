"""
Portfolio summary aggregator.
"""

import logging
from typing import Iterable

from ..models.summary import PortfolioSummary, WalletSnapshot, WalletSummary

logger = logging.getLogger(__name__)


def compute_summary(snapshots: Iterable[WalletSnapshot]) -> PortfolioSummary:
    """Sum equity, PnL and open positions across wallet snapshots.

    Failed snapshots contribute nothing to the totals but keep a row in
    ``per_wallet`` and are listed in ``failed_wallets``.
    """
    summary = PortfolioSummary()

    for snapshot in snapshots:
        wallet = snapshot.wallet

        if not snapshot.ok:
            logger.warning(f"Wallet {wallet.short_address} excluded from totals: {snapshot.error}")
            summary.failed_wallets.append(wallet.address)
            summary.per_wallet.append(WalletSummary(
                address=wallet.address,
                platform=wallet.platform.value,
                label=wallet.label,
                total_equity=0.0,
                unrealized_pnl=0.0,
                positions_count=0,
                error=snapshot.error
            ))
            continue

        summary.total_balance_usd += snapshot.equity.total_equity
        summary.total_unrealized_pnl += snapshot.equity.unrealized_pnl
        summary.open_positions_count += len(snapshot.positions)
        summary.per_wallet.append(WalletSummary(
            address=wallet.address,
            platform=wallet.platform.value,
            label=wallet.label,
            total_equity=snapshot.equity.total_equity,
            unrealized_pnl=snapshot.equity.unrealized_pnl,
            positions_count=len(snapshot.positions)
        ))

    return summary
