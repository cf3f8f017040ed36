"""Shared helpers for commands: session access and rendering."""

import math
import sqlite3
import sys
import tomllib

from rich.console import Console
from rich.markup import escape

from masarify.config import Settings, get_config_path, get_settings
from masarify.domain.models import (
    AlertEvent,
    AlertScope,
    AlertSeverity,
    AppState,
    Currency,
    Money,
)
from masarify.domain.state import display_name, find_category
from masarify.store.session import StateSession

console = Console()


def load_settings() -> Settings:
    """Read the config file, exiting with status 1 if it is invalid."""
    try:
        return get_settings()
    except (tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        console.print(f"[red]Invalid configuration in {get_config_path()}: {escape(str(e))}[/red]", style="bold")
        console.print("[dim]Fix the file or run 'masarify init --force'[/dim]")
        sys.exit(1)


def open_session() -> tuple[StateSession, AppState]:
    """Open the configured store and load the current state.

    Exits with status 1 if the config or the database cannot be read.
    """
    settings = load_settings()
    session = StateSession(settings.db_path)
    try:
        state = session.load()
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    return session, state


def save_state(session: StateSession, state: AppState) -> None:
    """Persist state, exiting with status 1 on database errors."""
    try:
        session.save(state)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def is_valid_amount(amount: float) -> bool:
    """True for finite, non-negative amounts (rejects nan and inf)."""
    return math.isfinite(amount) and amount >= 0


def format_money(amount: Money, currency: Currency, include_sign: bool = False) -> str:
    """Format money amount for display.

    Args:
        amount: Amount in major units.
        currency: Currency whose symbol to use.
        include_sign: Whether to include + or - sign.

    Returns:
        Formatted string (e.g., "-﷼ 1,234.50").
    """
    formatted = f"{currency.symbol} {abs(amount):,.2f}"
    if include_sign:
        return f"-{formatted}" if amount < 0 else f"+{formatted}"
    return f"-{formatted}" if amount < 0 else formatted


def describe_alert(event: AlertEvent, state: AppState) -> str:
    """Build the message for one alert event."""
    if event.scope == AlertScope.GLOBAL:
        subject = "your monthly budget"
    else:
        category = find_category(state.categories, event.category_id or "")
        subject = f"the {display_name(category, state.language)} budget"

    if event.severity == AlertSeverity.EXCEEDED:
        return f"You have exceeded {subject}! ({event.percent:.0f}%)"
    return f"You have used {event.percent:.0f}% of {subject}."


def render_alerts(events: list[AlertEvent], state: AppState) -> None:
    for event in events:
        colour = "red" if event.severity == AlertSeverity.EXCEEDED else "yellow"
        console.print(f"[{colour}]⚠ Warning: {describe_alert(event, state)}[/{colour}]")
