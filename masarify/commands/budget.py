"""Budget command for managing global limits and the alert threshold."""

import sys
from dataclasses import replace

from masarify.commands.common import console, format_money, open_session, save_state
from masarify.domain.models import Money
from masarify.domain.state import set_budget


def budget_command(
    monthly: float | None = None,
    yearly: float | None = None,
    threshold: float | None = None,
) -> None:
    """Show budget settings, or save the ones given.

    Args:
        monthly: New monthly limit (0 = unlimited).
        yearly: New yearly limit (0 = unlimited).
        threshold: New alert threshold percentage (0-100).
    """
    session, state = open_session()

    if monthly is None and yearly is None and threshold is None:
        console.print("[bold]Budget settings:[/bold]")
        console.print(f"  Monthly limit:   {format_money(state.budget.monthly_limit, state.currency)}")
        console.print(f"  Yearly limit:    {format_money(state.budget.yearly_limit, state.currency)}")
        console.print(f"  Alert threshold: {state.budget.alert_threshold:.0f}%")
        return

    budget = replace(
        state.budget,
        monthly_limit=Money(monthly) if monthly is not None else state.budget.monthly_limit,
        yearly_limit=Money(yearly) if yearly is not None else state.budget.yearly_limit,
        alert_threshold=threshold if threshold is not None else state.budget.alert_threshold,
    )

    try:
        state = set_budget(state, budget)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print("[green]✓[/green] Budget settings saved")
