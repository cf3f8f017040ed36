"""Status and report commands for viewing derived figures."""

import sys
from datetime import datetime

from masarify.commands.common import console, format_money, open_session
from masarify.dates import month_label, month_reference
from masarify.domain.ledger import (
    BudgetProgress,
    budget_percentage,
    calculate_histogram_bar_length,
    compute_balance,
    compute_budget_progress,
    compute_window_totals,
    filter_expense_breakdown,
)
from masarify.domain.models import AppState, Currency, Money, Month
from masarify.domain.state import display_name, find_category


def compute_report_period(all: bool, month: Month | None) -> tuple[datetime | None, str]:
    """Compute the reference date and period display for a report.

    Args:
        all: Whether to report all time.
        month: Optional specific month (YYYY-MM format).

    Returns:
        Tuple of (reference_date, period_display). reference_date is None for all time.

    Raises:
        ValueError: If month is not in YYYY-MM format.
    """
    if all:
        return None, "All Time"

    reference = month_reference(month) if month else datetime.now()
    return reference, month_label(reference)


def format_budget_display_with_color(percentage: float, threshold: float) -> str:
    """Format budget display with color based on percentage.

    Args:
        percentage: Budget usage percentage.
        threshold: Alert threshold percentage.

    Returns:
        Colored string for budget display.
    """
    budget_text = f"({percentage:.0f}%)"
    if percentage >= 100:
        return f"[red]{budget_text}[/red]"
    elif percentage >= threshold:
        return f"[yellow]{budget_text}[/yellow]"
    else:
        return f"[green]{budget_text}[/green]"


def render_progress(progress: BudgetProgress, currency: Currency) -> None:
    """Render one budget progress bar."""
    if progress.limit <= 0:
        console.print(f"  {progress.label}: {format_money(progress.spent, currency)} [dim](no limit)[/dim]")
        return

    if progress.exceeded:
        colour = "red"
    elif progress.warning:
        colour = "yellow"
    else:
        colour = "green"

    bar_width = 30
    filled = calculate_histogram_bar_length(Money(progress.percentage), Money(100), bar_width)
    bar = "█" * filled + "░" * (bar_width - filled)
    console.print(
        f"  {progress.label:8} [{colour}]{bar}[/{colour}] {progress.percentage:3.0f}%  "
        f"{format_money(progress.spent, currency)} / {format_money(progress.limit, currency)}"
    )


def status_command(month: str | None = None) -> None:
    """Show balance, this month's totals and budget progress."""
    try:
        reference = month_reference(Month(month)) if month else datetime.now()
    except ValueError:
        console.print(f"[red]Invalid month '{month}' (use YYYY-MM)[/red]")
        sys.exit(1)
    period = month_label(reference)

    _, state = open_session()

    balance = compute_balance(state.transactions)
    totals = compute_window_totals(state.transactions, reference)

    console.print(f"\n[bold]Status for {period}[/bold]\n")
    balance_colour = "green" if balance >= 0 else "red"
    console.print(f"  Balance:  [{balance_colour}]{format_money(balance, state.currency)}[/{balance_colour}]")
    console.print(f"  Income:   [green]{format_money(totals.monthly_income, state.currency)}[/green]")
    console.print(f"  Expenses: [red]{format_money(totals.monthly_expense, state.currency)}[/red]\n")

    console.print("[bold]Budget limits:[/bold]\n")
    render_progress(
        compute_budget_progress(
            totals.monthly_expense, state.budget.monthly_limit, state.budget.alert_threshold, "Monthly"
        ),
        state.currency,
    )
    render_progress(
        compute_budget_progress(totals.yearly_expense, state.budget.yearly_limit, state.budget.alert_threshold, "Yearly"),
        state.currency,
    )
    console.print()


def render_expense_line(
    state: AppState,
    category_id: str,
    total: Money,
    limit: Money | None,
    max_amount: Money | None,
    bar_width: int,
) -> None:
    """Render single expense category line.

    Args:
        state: Current state (for names, currency and threshold).
        category_id: Category being rendered.
        total: Expense total for the period.
        limit: Monthly limit of the category, if any.
        max_amount: Maximum amount for histogram scaling, None for no histogram.
        bar_width: Width of histogram bar in characters.
    """
    name = display_name(find_category(state.categories, category_id), state.language)
    amount_display = format_money(total, state.currency)

    if limit:
        percentage = budget_percentage(total, limit)
        budget_display = (
            f"/ {format_money(limit, state.currency)} "
            f"{format_budget_display_with_color(percentage, state.budget.alert_threshold)}"
        )
    else:
        budget_display = ""

    if max_amount:
        bar = "█" * calculate_histogram_bar_length(total, max_amount, bar_width)
        console.print(f"  {name:20} {amount_display:>14} {budget_display:30} {bar}")
    else:
        console.print(f"  {name}: {amount_display} {budget_display}".rstrip())


def report_command(histogram: bool = True, all: bool = False, month: str | None = None) -> None:
    """Show expense breakdown by category."""
    try:
        reference, period = compute_report_period(all, Month(month) if month else None)
    except ValueError:
        console.print(f"[red]Invalid month '{month}' (use YYYY-MM)[/red]")
        sys.exit(1)

    _, state = open_session()
    breakdown = filter_expense_breakdown(state.transactions, state.categories, reference)

    console.print(f"\n[bold]Expense report: {period}[/bold]\n")

    if not breakdown:
        console.print("[yellow]No expenses found for this period[/yellow]")
        return

    breakdown.sort(key=lambda item: item.total, reverse=True)
    max_amount = Money(max(item.total for item in breakdown)) if histogram else None

    for item in breakdown:
        category = find_category(state.categories, item.category_id)
        # Category limits are monthly
        limit = category.budget_limit if category is not None and reference is not None else None
        render_expense_line(state, item.category_id, item.total, limit, max_amount, 30)

    total = Money(sum(item.total for item in breakdown))
    console.print(f"\n  [bold]Total expenses:[/bold] {format_money(total, state.currency)}\n")
