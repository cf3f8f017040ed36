"""Category management commands (list, add, delete, limit)."""

import sys
from dataclasses import replace

from rich.table import Table

from masarify.commands.common import console, format_money, is_valid_amount, open_session, save_state
from masarify.domain.models import DEFAULT_COLOR, DEFAULT_ICON, Category, CategoryId, Money, TransactionType
from masarify.domain.state import add_category, display_name, find_category, update_category
from masarify.errors import CategoryInUseError
from masarify.store.gateway import delete_category


def list_categories_command() -> None:
    """List categories with their type and monthly limit."""
    _, state = open_session()

    table = Table(title="Categories")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="magenta")
    table.add_column("Type")
    table.add_column("Monthly limit", justify="right")
    table.add_column("Used by", justify="right")

    for category in state.categories:
        usage = sum(1 for t in state.transactions if t.category_id == category.id)
        limit = format_money(category.budget_limit, state.currency) if category.budget_limit else "[dim]-[/dim]"
        colour = "green" if category.type == TransactionType.INCOME else "red"
        table.add_row(
            category.id,
            display_name(category, state.language),
            f"[{colour}]{category.type.value}[/{colour}]",
            limit,
            str(usage),
        )

    console.print(table)


def add_category_command(
    name_en: str,
    name_ar: str | None = None,
    direction: str = "expense",
    limit: float = 0,
    icon: str = DEFAULT_ICON,
    color: str = DEFAULT_COLOR,
) -> None:
    """Add a category."""
    try:
        category_type = TransactionType(direction.upper())
    except ValueError:
        console.print(f"[red]Invalid type '{direction}' (use income or expense)[/red]")
        sys.exit(1)

    if not is_valid_amount(limit):
        console.print("[red]Limit must be a finite number, not negative[/red]")
        sys.exit(1)

    session, state = open_session()
    draft = Category(
        id=CategoryId(""),
        name_en=name_en,
        name_ar=name_ar or name_en,
        icon=icon,
        color=color,
        type=category_type,
        budget_limit=Money(limit) if category_type == TransactionType.EXPENSE else None,
    )
    state, stored = add_category(state, draft)
    save_state(session, state)
    console.print(f"[green]✓[/green] Created category: {stored.name_en} (ID: {stored.id})")


def delete_category_command(category_id: str) -> None:
    """Delete a category that no transaction uses."""
    session, state = open_session()

    if find_category(state.categories, category_id) is None:
        console.print(f"[red]Category {category_id} not found[/red]")
        sys.exit(1)

    try:
        state = delete_category(state, CategoryId(category_id))
    except CategoryInUseError as e:
        console.print(f"[red]Cannot delete category: it is used by {e.usage_count} transaction(s)[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print(f"[green]✓[/green] Deleted category {category_id}")


def set_category_limit_command(category_id: str, limit: float) -> None:
    """Set a category's monthly limit (0 = unlimited)."""
    if not is_valid_amount(limit):
        console.print("[red]Limit must be a finite number, not negative[/red]")
        sys.exit(1)

    session, state = open_session()

    category = find_category(state.categories, category_id)
    if category is None:
        console.print(f"[red]Category {category_id} not found[/red]")
        sys.exit(1)
    if category.type != TransactionType.EXPENSE:
        console.print("[red]Limits only apply to expense categories[/red]")
        sys.exit(1)

    state = update_category(state, replace(category, budget_limit=Money(limit)))
    save_state(session, state)

    if limit:
        console.print(f"[green]✓[/green] {category.name_en} limit: {format_money(Money(limit), state.currency)}")
    else:
        console.print(f"[green]✓[/green] {category.name_en} limit removed")
