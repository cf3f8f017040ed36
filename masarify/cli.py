"""CLI entry point for masarify."""

import logging

import typer
from rich.logging import RichHandler

from masarify.commands.admin import (
    backup_command,
    export_csv_command,
    export_json_command,
    import_command,
    init_command,
)
from masarify.commands.advise import advise_command
from masarify.commands.budget import budget_command
from masarify.commands.categories import (
    add_category_command,
    delete_category_command,
    list_categories_command,
    set_category_limit_command,
)
from masarify.commands.report import report_command, status_command
from masarify.commands.settings import currency_command, language_command, set_pin_command
from masarify.commands.transactions import add_command, delete_command, edit_command, list_command

app = typer.Typer(
    name="masarify",
    help="Masarify - personal budgeting with budget alerts and a spending advisor",
    add_completion=False,
)
category_app = typer.Typer(help="Manage your categories.")
app.add_typer(category_app, name="category")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Masarify - personal budgeting with budget alerts and a spending advisor."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
) -> None:
    """Initialize masarify database and configuration."""
    init_command(force)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: next to the database)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command()
def add(
    amount: float,
    category: str = typer.Option(..., "--category", "-c", help="Category ID"),
    account: str = typer.Option("1", "--account", "-a", help="Account ID (default: Cash)"),
    type: str = typer.Option("expense", "--type", "-t", help="'income' or 'expense'"),
    date: str = typer.Option(None, "--date", "-d", help="Transaction date (default: now)"),
    note: str = typer.Option(None, "--note", "-n", help="Free-text note"),
) -> None:
    """Add a transaction."""
    add_command(amount, category, account, type, date, note)


@app.command()
def edit(
    transaction_id: str,
    amount: float = typer.Option(None, "--amount", help="New amount"),
    category: str = typer.Option(None, "--category", "-c", help="New category ID"),
    account: str = typer.Option(None, "--account", "-a", help="New account ID"),
    type: str = typer.Option(None, "--type", "-t", help="'income' or 'expense'"),
    date: str = typer.Option(None, "--date", "-d", help="New transaction date"),
    note: str = typer.Option(None, "--note", "-n", help="New note"),
) -> None:
    """Edit a transaction."""
    edit_command(transaction_id, amount, category, account, type, date, note)


@app.command()
def delete(transaction_id: str) -> None:
    """Delete a transaction."""
    delete_command(transaction_id)


@app.command(name="list")
def list_transactions(
    limit: int = typer.Option(50, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", help="Show all your transactions"),
) -> None:
    """List your transactions."""
    list_command(limit, all)


@app.command()
def status(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show your balance, monthly totals and budget progress."""
    status_command(month)


@app.command()
def report(
    histogram: bool = typer.Option(True, help="Show histogram of your spending"),
    all: bool = typer.Option(False, "--all", help="Show all time"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show your spending breakdown by category."""
    report_command(histogram, all, month)


@app.command()
def budget(
    monthly: float = typer.Option(None, "--monthly", help="Monthly limit (0 = unlimited)"),
    yearly: float = typer.Option(None, "--yearly", help="Yearly limit (0 = unlimited)"),
    threshold: float = typer.Option(None, "--threshold", help="Alert threshold percentage (0-100)"),
) -> None:
    """Show or set your budget limits."""
    budget_command(monthly, yearly, threshold)


@category_app.command(name="list")
def category_list() -> None:
    """List your categories."""
    list_categories_command()


@category_app.command(name="add")
def category_add(
    name: str,
    name_ar: str = typer.Option(None, "--name-ar", help="Arabic display name"),
    type: str = typer.Option("expense", "--type", "-t", help="'income' or 'expense'"),
    limit: float = typer.Option(0, "--limit", help="Monthly limit (0 = unlimited)"),
) -> None:
    """Add a category."""
    add_category_command(name, name_ar, type, limit)


@category_app.command(name="delete")
def category_delete(category_id: str) -> None:
    """Delete a category no transaction uses."""
    delete_category_command(category_id)


@category_app.command(name="limit")
def category_limit(category_id: str, amount: float) -> None:
    """Set a category's monthly limit (0 = unlimited)."""
    set_category_limit_command(category_id, amount)


@app.command()
def currency(code: str = typer.Argument(None, help="Currency code, e.g. USD")) -> None:
    """Show or set your currency (locked once transactions exist)."""
    currency_command(code)


@app.command()
def language(code: str = typer.Argument(..., help="'en' or 'ar'")) -> None:
    """Set the display language."""
    language_command(code)


@app.command(name="set-pin")
def set_pin(pin: str = typer.Argument(None, help="4-digit PIN (omit to clear)")) -> None:
    """Set or clear your PIN."""
    set_pin_command(pin)


@app.command(name="export-json")
def export_json(
    output: str = typer.Option(None, "--output", "-o", help="Output file"),
) -> None:
    """Export all your data as a JSON backup."""
    export_json_command(output)


@app.command(name="export-csv")
def export_csv(
    output: str = typer.Option(None, "--output", "-o", help="Output file"),
) -> None:
    """Export your transactions as CSV."""
    export_csv_command(output)


@app.command(name="import")
def import_backup(path: str) -> None:
    """Import a JSON backup, replacing your current data."""
    import_command(path)


@app.command()
def advise(question: str) -> None:
    """Ask the smart advisor about your spending."""
    advise_command(question)


if __name__ == "__main__":
    app()
