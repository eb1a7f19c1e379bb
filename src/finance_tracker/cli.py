import typer
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from finance_tracker.aggregation import budget_progress, month_period
from finance_tracker.config.settings import ConfigLoader
from finance_tracker.database.connection import DatabaseConfig, DatabaseManager
from finance_tracker.domain.enums import TransactionType
from finance_tracker.log import configure_logging
from finance_tracker.presentation.formatting import (
    FormatOptions,
    format_currency,
    format_month_label,
    format_percentage,
)
from finance_tracker.repositories.sqlite_budget_repository import SQLiteBudgetRepository
from finance_tracker.repositories.sqlite_transaction_repository import SQLiteTransactionRepository
from finance_tracker.services.finance_service import FinanceService

app = typer.Typer(
    name="finance-tracker",
    help="Track income, expenses and budgets",
    add_completion=False,
)

console = Console()


class State:
    verbose: bool = False
    user_id: str = "default"
    format_options: FormatOptions = FormatOptions()
    db_manager: Optional[DatabaseManager] = None
    service: Optional[FinanceService] = None


state = State()


def parse_money(value: str) -> Decimal:
    try:
        amount = Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise typer.BadParameter(f"'{value}' is not an amount")
    if not amount.is_finite() or amount < 0:
        raise typer.BadParameter(f"'{value}' must be a non-negative amount")
    return amount


def fail(e: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {e}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    user: Optional[str] = typer.Option(
        None,
        "--user", "-u",
        help="User whose data to use",
    ),
    currency: Optional[str] = typer.Option(
        None,
        "--currency",
        help="Currency code for display (USD, INR, EUR, ...)",
    ),
):
    """
    Finance Tracker - Record transactions, plan budgets and see where the money goes.
    """
    configure_logging(verbose=verbose)
    settings = ConfigLoader.load_settings()

    if state.service is None:
        state.db_manager = DatabaseManager(DatabaseConfig.from_settings(settings))
        state.service = FinanceService(
            transactions=SQLiteTransactionRepository(state.db_manager),
            budgets=SQLiteBudgetRepository(state.db_manager),
        )

    state.verbose = verbose
    state.user_id = user or settings.get("default_user", "default")
    state.format_options = FormatOptions.from_settings(settings, currency)


@app.command(name="init-db")
def init_db():
    """Create the database tables (existing databases are left as they are)."""
    try:
        version = state.db_manager.initialize()
        console.print(f"[green]✓[/green] Database ready (schema version {version})")
    except Exception as e:
        fail(e)


@app.command(name="add")
def add_transaction(
    amount: str = typer.Argument(..., help="Amount, e.g. 42.50"),
    category: str = typer.Option(
        ...,
        "--category", "-c",
        help="Category id or name (food, Transportation, ...)",
    ),
    transaction_type: TransactionType = typer.Option(
        TransactionType.EXPENSE,
        "--type", "-t",
        help="income or expense",
    ),
    on: Optional[datetime] = typer.Option(
        None,
        "--date", "-d",
        formats=["%Y-%m-%d"],
        help="Transaction date (defaults to today)",
    ),
    description: str = typer.Option("", "--description", "-m", help="What it was for"),
):
    """
    Record an income or expense.

    Examples:
        finance-tracker add 42.50 -c food -m "Groceries"
        finance-tracker add 3000 -t income -c salary -d 2025-01-31
    """
    try:
        txn = state.service.add_transaction(
            state.user_id,
            amount=parse_money(amount),
            transaction_type=transaction_type,
            category=category,
            transaction_date=on.date() if on else date.today(),
            description=description,
        )
        console.print(
            f"[bold green]✓ Recorded {txn.type.value}[/bold green] "
            f"{format_currency(txn.amount, state.format_options)} in {txn.category.name} (id {txn.id})"
        )
    except typer.BadParameter:
        raise
    except Exception as e:
        fail(e)


@app.command(name="list")
def list_transactions(
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
    transaction_type: Optional[TransactionType] = typer.Option(None, "--type", "-t", help="income or expense"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum rows to show", min=1),
):
    """List recent transactions."""
    try:
        start_date = end_date = None
        if month is not None:
            start_date, end_date = month_period(year or date.today().year, month)
            end_date -= timedelta(days=1)

        transactions = state.service.get_transactions(
            state.user_id,
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
        )

        if not transactions:
            console.print("[yellow]No transactions found[/yellow]")
            return

        table = Table(show_header=True, padding=(0, 1))
        table.add_column("ID", style="dim", justify="right")
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Category", style="magenta")
        table.add_column("Description", style="white", max_width=40)
        table.add_column("Amount", justify="right")

        for txn in transactions[:limit]:
            if txn.type == TransactionType.EXPENSE:
                amount_str = f"[red]-{format_currency(txn.amount, state.format_options)}[/red]"
            else:
                amount_str = f"[green]+{format_currency(txn.amount, state.format_options)}[/green]"
            table.add_row(txn.id, str(txn.date)[:10], txn.category.name, txn.description, amount_str)

        console.print(table)
        if len(transactions) > limit:
            console.print(f"\n[dim]Showing {limit} of {len(transactions)} transactions[/dim]")

    except Exception as e:
        fail(e)


@app.command(name="delete")
def delete_transaction(transaction_id: str = typer.Argument(..., help="ID shown by 'list'")):
    """Delete a transaction."""
    try:
        state.service.delete_transaction(state.user_id, transaction_id)
        console.print(f"[green]✓[/green] Deleted transaction {transaction_id}")
    except Exception as e:
        fail(e)


@app.command(name="summary")
def summary(
    months: int = typer.Option(6, "--months", help="Months of history in the trend", min=1),
    transaction_type: TransactionType = typer.Option(
        TransactionType.EXPENSE,
        "--by", "-b",
        help="Break down expense or income categories",
    ),
):
    """
    Show balance, category breakdown and the monthly trend.

    Examples:
        finance-tracker summary
        finance-tracker summary --months 12 --by income
    """
    try:
        fmt = state.format_options
        stats = state.service.get_stats(state.user_id)

        summary_text = (
            f"[green]💰 Income:[/green]    {format_currency(stats.total_income, fmt):>14} ({stats.income_count})\n"
            f"[red]💸 Expenses:[/red]  {format_currency(stats.total_expense, fmt):>14} ({stats.expense_count})\n"
            f"{'─' * 34}\n"
        )
        if stats.balance >= 0:
            summary_text += f"[bold green]📈 Balance:[/bold green]   {format_currency(stats.balance, fmt):>14}"
        else:
            summary_text += f"[bold red]📉 Balance:[/bold red]   {format_currency(stats.balance, fmt):>14}"
        if stats.skipped:
            summary_text += f"\n[yellow]⚠ {stats.skipped} malformed record(s) skipped[/yellow]"

        console.print(Panel(summary_text, title="[bold]Summary[/bold]", border_style="cyan", padding=(1, 2)))

        categories = state.service.get_category_summary(state.user_id, transaction_type)
        if categories:
            console.print(f"\n[bold]{transaction_type.value.title()} by Category[/bold]")
            category_table = Table(show_header=True, box=None, padding=(0, 2))
            category_table.add_column("Category", style="cyan", no_wrap=True)
            category_table.add_column("Amount", justify="right")
            category_table.add_column("% of Total", justify="right", style="dim")

            for item in categories:
                category_table.add_row(
                    f"[{item.color}]●[/{item.color}] {item.category_name}",
                    format_currency(item.amount, fmt),
                    format_percentage(item.percentage),
                )
            console.print(category_table)

        console.print(f"\n[bold]Last {months} Months[/bold]")
        trend_table = Table(show_header=True, padding=(0, 1))
        trend_table.add_column("Month", style="cyan")
        trend_table.add_column("Income", justify="right", style="green")
        trend_table.add_column("Expenses", justify="right", style="red")
        trend_table.add_column("Net", justify="right")

        for bucket in state.service.get_monthly_trend(state.user_id, months=months):
            net_color = "green" if bucket.net >= 0 else "red"
            trend_table.add_row(
                format_month_label(bucket.month),
                format_currency(bucket.income, fmt),
                format_currency(bucket.expense, fmt),
                f"[{net_color}]{format_currency(bucket.net, fmt)}[/{net_color}]",
            )
        console.print(trend_table)

    except Exception as e:
        fail(e)


@app.command(name="budget")
def budget(
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month (1-12)", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year"),
):
    """Compare spending against the budget for a month."""
    try:
        fmt = state.format_options
        month = month or date.today().month
        year = year or date.today().year

        categories = state.service.get_budget_status(state.user_id, year, month)
        overview = state.service.get_budget_overview(state.user_id, year, month)

        console.print(Panel(
            f"Monthly budget: {format_currency(overview.monthly_budget, fmt)}\n"
            f"Total spent:    {format_currency(overview.total_spent, fmt)}\n"
            f"Remaining:      {format_currency(overview.remaining, fmt)}",
            title=f"[bold]Budget {date(year, month, 1).strftime('%B %Y')}[/bold]",
            border_style="cyan",
        ))

        table = Table(show_header=True, padding=(0, 1))
        table.add_column("Category", style="cyan")
        table.add_column("Spent", justify="right")
        table.add_column("Limit", justify="right")
        table.add_column("Used", justify="right")

        for category in categories:
            spent_style = "red" if category.is_over_budget else "white"
            table.add_row(
                f"[{category.color}]●[/{category.color}] {category.name}",
                f"[{spent_style}]{format_currency(category.current_spent, fmt)}[/{spent_style}]",
                format_currency(category.budget_limit, fmt),
                format_percentage(budget_progress(category.current_spent, category.budget_limit)),
            )
        console.print(table)

        if overview.total_budget != overview.monthly_budget:
            console.print(
                f"[dim]Allocated {format_currency(overview.total_budget, fmt)} of "
                f"{format_currency(overview.monthly_budget, fmt)}[/dim]"
            )

        for category in overview.over_budget:
            console.print(
                f"[bold red]⚠ {category.name}[/bold red] is over budget by "
                f"{format_currency(-category.remaining, fmt)}"
            )

    except Exception as e:
        fail(e)


@app.command(name="distribute")
def distribute(
    total: Optional[str] = typer.Argument(None, help="New monthly budget (defaults to the current one)"),
):
    """
    Split the monthly budget evenly across all budget categories.

    Any remainder goes to the first category.
    """
    try:
        amount = parse_money(total) if total is not None else None
        categories = state.service.auto_distribute(state.user_id, amount)
        for category in categories:
            console.print(f"  • {category.name}: {format_currency(category.budget_limit, state.format_options)}")
        console.print(f"[green]✓[/green] Distributed across {len(categories)} categories")
    except typer.BadParameter:
        raise
    except Exception as e:
        fail(e)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
