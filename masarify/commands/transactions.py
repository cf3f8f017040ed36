"""Transaction management commands (add, edit, delete, list)."""

import sys
from dataclasses import replace
from datetime import datetime

import pandas as pd
from rich.table import Table

from masarify.commands.common import (
    console,
    format_money,
    is_valid_amount,
    open_session,
    render_alerts,
    save_state,
)
from masarify.dates import date_part
from masarify.domain.ledger import evaluate_alerts
from masarify.domain.models import (
    AccountId,
    AppState,
    CategoryId,
    Money,
    Transaction,
    TransactionId,
    TransactionType,
)
from masarify.domain.state import (
    add_transaction,
    delete_transaction,
    display_name,
    find_account,
    find_category,
    update_transaction,
)
from masarify.errors import TransactionNotFoundError


def normalize_date(date: str | None) -> str:
    """Normalize a user-entered date to an ISO timestamp.

    Args:
        date: Date in YYYY-MM-DD, DD/MM/YYYY or other formats pandas understands.
            None means now.

    Returns:
        ISO timestamp string.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if date is None:
        return datetime.now().isoformat(timespec="seconds")
    try:
        parsed = pd.to_datetime(date, dayfirst=True)
    except (ValueError, TypeError) as e:
        raise ValueError(str(e)) from e
    if pd.isna(parsed):
        raise ValueError(f"Invalid date: {date}")
    return parsed.to_pydatetime().isoformat(timespec="seconds")


def parse_direction(value: str) -> TransactionType:
    try:
        return TransactionType(value.upper())
    except ValueError:
        console.print(f"[red]Invalid type '{value}' (use income or expense)[/red]")
        sys.exit(1)


def check_references(state: AppState, category_id: str, account_id: str) -> None:
    """Exit with an error if the category or account does not exist."""
    if find_category(state.categories, category_id) is None:
        console.print(f"[red]Category {category_id} not found[/red]")
        console.print("[dim]Use 'masarify category list' to see category ids[/dim]")
        sys.exit(1)
    if find_account(state.accounts, account_id) is None:
        console.print(f"[red]Account {account_id} not found[/red]")
        sys.exit(1)


def add_command(
    amount: float,
    category_id: str,
    account_id: str,
    direction: str = "expense",
    date: str | None = None,
    note: str | None = None,
) -> None:
    """Add a transaction and report any budget alerts it triggers.

    Args:
        amount: Amount in major units (must not be negative).
        category_id: Category id.
        account_id: Account id.
        direction: 'income' or 'expense'.
        date: Transaction date; now if omitted.
        note: Optional note.
    """
    if not is_valid_amount(amount):
        console.print("[red]Amount must be a finite number, not negative[/red]")
        sys.exit(1)

    txn_type = parse_direction(direction)

    try:
        timestamp = normalize_date(date)
    except ValueError as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)

    session, state = open_session()
    check_references(state, category_id, account_id)

    draft = Transaction(
        id=TransactionId(""),
        amount=Money(amount),
        date=timestamp,
        category_id=CategoryId(category_id),
        account_id=AccountId(account_id),
        type=txn_type,
        note=note,
    )
    state, stored = add_transaction(state, draft)
    save_state(session, state)

    category = find_category(state.categories, stored.category_id)
    console.print("[green]✓[/green] Transaction added:")
    console.print(f"  ID: {stored.id}")
    console.print(f"  Date: {stored.date}")
    console.print(f"  Amount: {format_money(stored.amount, state.currency)}")
    console.print(f"  Type: {stored.type.value}")
    console.print(f"  Category: {display_name(category, state.language)}")

    events = evaluate_alerts(state.transactions, state.categories, state.budget, datetime.now(), changed=stored)
    render_alerts(events, state)


def edit_command(
    transaction_id: str,
    amount: float | None = None,
    category_id: str | None = None,
    account_id: str | None = None,
    direction: str | None = None,
    date: str | None = None,
    note: str | None = None,
) -> None:
    """Replace fields of an existing transaction and report budget alerts."""
    session, state = open_session()

    existing = next((t for t in state.transactions if t.id == transaction_id), None)
    if existing is None:
        console.print(f"[red]Transaction {transaction_id} not found[/red]")
        sys.exit(1)

    if amount is not None and not is_valid_amount(amount):
        console.print("[red]Amount must be a finite number, not negative[/red]")
        sys.exit(1)

    try:
        timestamp = normalize_date(date) if date is not None else existing.date
    except ValueError as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        sys.exit(1)

    updated = replace(
        existing,
        amount=Money(amount) if amount is not None else existing.amount,
        category_id=CategoryId(category_id) if category_id is not None else existing.category_id,
        account_id=AccountId(account_id) if account_id is not None else existing.account_id,
        type=parse_direction(direction) if direction is not None else existing.type,
        date=timestamp,
        note=note if note is not None else existing.note,
    )
    check_references(state, updated.category_id, updated.account_id)

    try:
        state = update_transaction(state, updated)
    except TransactionNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print(f"[green]✓[/green] Updated transaction {transaction_id}")

    events = evaluate_alerts(state.transactions, state.categories, state.budget, datetime.now(), changed=updated)
    render_alerts(events, state)


def delete_command(transaction_id: str) -> None:
    """Delete a transaction."""
    session, state = open_session()

    try:
        state = delete_transaction(state, TransactionId(transaction_id))
    except TransactionNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print(f"[green]✓[/green] Deleted transaction {transaction_id}")


def list_command(limit: int = 50, all: bool = False) -> None:
    """List transactions, newest first."""
    _, state = open_session()

    if not state.transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    transactions = state.transactions if all else state.transactions[:limit]
    title = (
        f"Transactions (showing all {len(transactions)})" if all else f"Transactions (showing {len(transactions)})"
    )
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Account", style="white")
    table.add_column("Note", style="dim")

    for txn in transactions:
        if txn.type == TransactionType.EXPENSE:
            amount_display = f"[red]{format_money(Money(-txn.amount), state.currency, include_sign=True)}[/red]"
        else:
            amount_display = f"[green]{format_money(txn.amount, state.currency, include_sign=True)}[/green]"

        table.add_row(
            txn.id,
            date_part(txn.date),
            amount_display,
            display_name(find_category(state.categories, txn.category_id), state.language),
            display_name(find_account(state.accounts, txn.account_id), state.language),
            txn.note or "",
        )

    console.print(table)
