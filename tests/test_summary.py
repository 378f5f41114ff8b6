import pytest

from trackwise_crypto.models.account import AccountEquity
from trackwise_crypto.models.position import DerivedPosition, PositionDirection
from trackwise_crypto.models.summary import WalletSnapshot
from trackwise_crypto.services.summary_service import compute_summary


def _position(pnl):
    return DerivedPosition(
        market="SOL-PERP", market_index=0, direction=PositionDirection.LONG,
        size=1, entry_price=100, mark_price=100 + pnl, notional_usd=100 + pnl,
        unrealized_pnl=pnl, pnl_percent=pnl, margin=10, leverage=10,
        liquidation_price=90, funding_rate=0
    )


def _snapshot(wallet, equity, pnl, positions):
    return WalletSnapshot(
        wallet=wallet,
        equity=AccountEquity(
            total_equity=equity, free_collateral=equity, margin_used=0,
            unrealized_pnl=pnl, account_health=100, leverage=0
        ),
        positions=[_position(pnl) for _ in range(positions)]
    )


def test_empty_summary():
    summary = compute_summary([])
    assert summary.total_balance_usd == 0
    assert summary.total_unrealized_pnl == 0
    assert summary.open_positions_count == 0
    assert summary.per_wallet == []
    assert not summary.is_partial


def test_summary_totals(drift_wallet, hyperliquid_wallet):
    snapshots = [
        _snapshot(drift_wallet, 1000, 25, 2),
        _snapshot(hyperliquid_wallet, 500, -5, 1),
    ]
    summary = compute_summary(snapshots)

    assert summary.total_balance_usd == pytest.approx(1500)
    assert summary.total_unrealized_pnl == pytest.approx(20)
    assert summary.open_positions_count == 3
    assert [w.platform for w in summary.per_wallet] == ["DRIFT", "HYPERLIQUID"]


def test_summary_is_additive(drift_wallet, hyperliquid_wallet):
    a = _snapshot(drift_wallet, 1000, 25, 2)
    b = _snapshot(hyperliquid_wallet, 500, -5, 1)

    combined = compute_summary([a, b])
    left = compute_summary([a])
    right = compute_summary([b])

    assert combined.total_balance_usd == pytest.approx(left.total_balance_usd + right.total_balance_usd)
    assert combined.total_unrealized_pnl == pytest.approx(left.total_unrealized_pnl + right.total_unrealized_pnl)
    assert combined.open_positions_count == left.open_positions_count + right.open_positions_count


def test_failed_wallet_contributes_zero(drift_wallet, hyperliquid_wallet):
    snapshots = [
        _snapshot(drift_wallet, 1000, 25, 2),
        WalletSnapshot.failed(hyperliquid_wallet, "Timed out after 5s"),
    ]
    summary = compute_summary(snapshots)

    assert summary.total_balance_usd == pytest.approx(1000)
    assert summary.open_positions_count == 2
    assert summary.is_partial
    assert summary.failed_wallets == [hyperliquid_wallet.address]
    assert summary.per_wallet[1].error == "Timed out after 5s"
    assert summary.to_dict()["is_partial"] is True
