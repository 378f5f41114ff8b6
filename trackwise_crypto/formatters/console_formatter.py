"""
Console formatter for portfolio, position and balance data with rich formatting.
"""

from typing import List, Optional, Union
from datetime import datetime
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text

from ..models.account import HyperliquidSubAccount
from ..models.order import Order
from ..models.position import PositionDirection
from ..models.raw import SubAccount
from ..models.summary import PortfolioSummary, WalletSnapshot


class ConsoleFormatter:
    """Formats data for console output with rich formatting."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def format_portfolio_summary(self, summary: PortfolioSummary) -> None:
        """Format and print the cross-wallet summary to console."""

        totals_table = Table(show_header=False, box=None, padding=(0, 1))
        totals_table.add_column("Metric", style="bold cyan")
        totals_table.add_column("Value", style="bold white")

        totals_table.add_row("💰 Total Balance", f"${summary.total_balance_usd:,.2f}")

        pnl_style = "bold green" if summary.total_unrealized_pnl >= 0 else "bold red"
        totals_table.add_row("📈 Unrealized P&L", f"${summary.total_unrealized_pnl:+,.2f}", style=pnl_style)
        totals_table.add_row("🎯 Open Positions", str(summary.open_positions_count))

        wallets_table = Table(title="👛 Wallets")
        wallets_table.add_column("#", style="dim", width=3)
        wallets_table.add_column("Wallet", style="bold")
        wallets_table.add_column("Platform")
        wallets_table.add_column("Equity", justify="right")
        wallets_table.add_column("P&L", justify="right")
        wallets_table.add_column("Positions", justify="right")
        wallets_table.add_column("Status")

        for i, row in enumerate(summary.per_wallet, 1):
            name = row.label or f"{row.address[:6]}...{row.address[-4:]}"
            if row.error:
                wallets_table.add_row(str(i), name, row.platform, "-", "-", "-", f"❌ {row.error}", style="red")
                continue
            wallets_table.add_row(
                str(i),
                name,
                row.platform,
                f"${row.total_equity:,.2f}",
                f"${row.unrealized_pnl:+,.2f}",
                str(row.positions_count),
                "✅"
            )

        self.console.print(Panel(totals_table, title="📊 Portfolio Summary"))
        self.console.print(wallets_table)

        if summary.is_partial:
            self.print_warning(
                f"Partial results: {len(summary.failed_wallets)} wallet(s) could not be fetched"
            )

    def format_wallet_details(self, snapshot: WalletSnapshot) -> None:
        """Format and print one wallet's equity, positions and balances."""
        wallet = snapshot.wallet
        title = f"{wallet.display_name} ({wallet.platform.value})"

        if not snapshot.ok:
            self.console.print(Panel(f"❌ {snapshot.error}", title=title, style="red"))
            return

        equity = snapshot.equity
        account_table = Table(show_header=False, box=None, padding=(0, 1))
        account_table.add_column("Metric", style="bold cyan")
        account_table.add_column("Value", style="bold white")
        account_table.add_row("💰 Total Equity", f"${equity.total_equity:,.2f}")
        account_table.add_row("💵 Free Collateral", f"${equity.free_collateral:,.2f}")
        account_table.add_row("💳 Margin Used", f"${equity.margin_used:,.2f} ({equity.margin_ratio:.1f}%)")
        account_table.add_row("🔄 Leverage", f"{equity.leverage:.2f}x")

        health_style = "green" if equity.account_health >= 50 else "yellow" if equity.account_health >= 20 else "red"
        account_table.add_row("❤️ Health", f"{equity.account_health:.0f}%", style=health_style)

        self.console.print(Panel(account_table, title=f"📊 {title}"))

        if snapshot.positions:
            positions_table = Table(title="🎯 Active Positions")
            positions_table.add_column("Market", style="bold")
            positions_table.add_column("Side", style="bold")
            positions_table.add_column("Size", justify="right")
            positions_table.add_column("Entry", justify="right")
            positions_table.add_column("Mark", justify="right")
            positions_table.add_column("Liq", justify="right")
            positions_table.add_column("Notional", justify="right")
            positions_table.add_column("P&L", justify="right")
            positions_table.add_column("P&L %", justify="right")
            positions_table.add_column("Leverage", justify="right")
            positions_table.add_column("Funding", justify="right")

            for position in sorted(snapshot.positions, key=lambda p: p.unrealized_pnl, reverse=True):
                pnl_style = "green" if position.is_profitable else "red"
                positions_table.add_row(
                    position.market,
                    Text(position.direction.value, style="green" if position.is_long else "red"),
                    f"{position.size:,.4f}",
                    f"${position.entry_price:,.4f}",
                    f"${position.mark_price:,.4f}",
                    f"${position.liquidation_price:,.4f}",
                    f"${position.notional_usd:,.2f}",
                    Text(f"${position.unrealized_pnl:+,.2f}", style=pnl_style),
                    Text(f"{position.pnl_percent:+.2f}%", style=pnl_style),
                    f"{position.leverage:.1f}x",
                    f"{position.funding_rate:+.4f}%"
                )

            self.console.print(positions_table)
        else:
            self.print_info("No open positions")

        if snapshot.balances:
            balances_table = Table(title="🪙 Balances")
            balances_table.add_column("Asset", style="bold")
            balances_table.add_column("Amount", justify="right")
            balances_table.add_column("Value", justify="right")

            for balance in snapshot.balances:
                balances_table.add_row(
                    balance.asset,
                    f"{balance.amount:,.6f}",
                    f"${balance.value_usd:,.2f}"
                )

            self.console.print(balances_table)

    def format_orders_table(self, orders: List[Order]) -> None:
        """Format and print orders to console."""

        if not orders:
            self.console.print(Panel("❌ No open orders found.", title="🧾 Orders"))
            return

        orders_table = Table(title=f"🧾 Orders ({len(orders)})")
        orders_table.add_column("ID", style="dim")
        orders_table.add_column("Market", style="bold")
        orders_table.add_column("Side", style="bold")
        orders_table.add_column("Type")
        orders_table.add_column("Size", justify="right")
        orders_table.add_column("Filled", justify="right")
        orders_table.add_column("Price", justify="right")
        orders_table.add_column("Status")

        for order in orders:
            side_style = "green" if order.direction is PositionDirection.LONG else "red"
            orders_table.add_row(
                str(order.order_id),
                order.market,
                Text(order.direction.value, style=side_style),
                order.order_type,
                f"{order.size:,.4f}",
                f"{order.filled_size:,.4f}",
                f"${order.price:,.4f}",
                order.status.value
            )

        self.console.print(orders_table)

    def format_subaccounts(self, title: str, subaccounts: List[Union[SubAccount, HyperliquidSubAccount]]) -> None:
        """Format and print the sub-accounts of a wallet."""

        if not subaccounts:
            self.print_info(f"{title}: no sub-accounts found")
            return

        table = Table(title=f"🗂️ {title} sub-accounts")
        table.add_column("Sub-account", style="bold")
        table.add_column("Details", justify="right")

        for sub in subaccounts:
            if isinstance(sub, HyperliquidSubAccount):
                table.add_row(sub.name or sub.sub_account_user, f"${sub.equity:,.2f}")
            else:
                table.add_row(str(sub.id), "active" if sub.exists else "-")

        self.console.print(table)

    def format_startup_message(self, wallet_count: int, refresh_interval: int) -> None:
        """Format and print startup message to console."""

        startup_text = f"""🚀 TrackWise Crypto Tracker Started

🔗 Tracking {wallet_count} wallet(s)
🔄 Refresh interval: {refresh_interval} seconds
"""

        self.console.print(Panel(startup_text, title="🚀 Startup", style="green"))

    def print_separator(self) -> None:
        """Print a separator line."""
        self.console.print("─" * 80, style="dim")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self.console.print(f"ℹ️ {message}", style="blue")

    def print_timestamp(self) -> None:
        """Print the update time."""
        self.console.print(Text(f"🕐 Updated: {datetime.now().strftime('%H:%M:%S')}", style="dim"))

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self.console.print(f"⚠️ {message}", style="yellow")

    def print_error(self, message: str) -> None:
        """Print error message."""
        self.console.print(f"❌ {message}", style="red")
