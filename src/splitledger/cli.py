"""CLI for SplitLedger using Typer."""

import logging
import sys
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import load_settings
from .models import Payment
from .service import ExpenseService, load_entries

app = typer.Typer(
    name="splitledger",
    help="Split shared expenses and settle debts with as few payments as possible",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def format_money(amount: Decimal, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: ($85.02)
    Positive amounts have spaces:      $85.02
    """
    abs_amount = abs(amount)
    if amount < 0:
        if use_color:
            return f"($[red]{abs_amount:,.2f}[/red])"
        return f"(${abs_amount:,.2f})"

    if use_color:
        return f" [green]${abs_amount:,.2f}[/green] "
    return f" ${abs_amount:,.2f} "


def display_payments(payments: list[Payment]):
    """Display settlement payments in a table."""
    if not payments:
        console.print("\n[green]✓ Everyone is settled up[/green]\n")
        return

    table = Table(title="Settlement", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=4)
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right", width=14)

    for idx, payment in enumerate(payments, start=1):
        table.add_row(
            str(idx),
            str(payment.from_participant),
            str(payment.to_participant),
            format_money(payment.display_amount),
        )

    console.print(table)
    console.print(f"\n[bold]Total payments:[/bold] {len(payments)}")


def display_balances(positions: dict, epsilon: Decimal):
    """Display each participant's net position."""
    table = Table(title="Net Balances", show_header=True, header_style="bold magenta")
    table.add_column("Participant", style="cyan")
    table.add_column("Net", justify="right", width=14)
    table.add_column("Status", style="dim")

    for participant, net in positions.items():
        if abs(net) <= epsilon:
            status = "settled"
        elif net > 0:
            status = "is owed"
        else:
            status = "owes"
        table.add_row(str(participant), format_money(net), status)

    console.print(table)

    total = sum(positions.values(), Decimal("0"))
    if abs(total) <= epsilon:
        console.print("  [green]✓ Balances sum to zero[/green]")
    else:
        console.print(f"  [red]✗ Balances sum to {total}, expected 0[/red]")


def _build_service(expenses_file: Path, epsilon: float | None) -> ExpenseService:
    overrides = {}
    if epsilon is not None:
        overrides["epsilon"] = Decimal(str(epsilon))
    settings = load_settings(**overrides)

    service = ExpenseService(settings)
    service.add_entries(load_entries(expenses_file))
    return service


@app.command()
def settle(
    expenses_file: Path = typer.Argument(..., help="JSON file of expenses"),
    epsilon: float | None = typer.Option(
        None, "--epsilon", "-e", help="Tolerance below which balances count as settled"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Compute the payments that settle every debt.

    Reads expenses from a JSON file, splits each one, and prints the
    smallest set of payments the greedy settlement finds.
    """
    setup_logging(verbose)

    try:
        service = _build_service(expenses_file, epsilon)
        display_payments(service.settle())
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)


@app.command()
def balances(
    expenses_file: Path = typer.Argument(..., help="JSON file of expenses"),
    epsilon: float | None = typer.Option(
        None, "--epsilon", "-e", help="Tolerance below which balances count as settled"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show each participant's net position."""
    setup_logging(verbose)

    try:
        service = _build_service(expenses_file, epsilon)
        display_balances(service.net_positions(), service.settings.epsilon)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)


@app.command()
def version():
    """Show the installed version."""
    console.print(f"splitledger {__version__}")


if __name__ == "__main__":
    app()
