"""Settings commands (currency, language, PIN)."""

import sys

from masarify.commands.common import console, open_session, save_state
from masarify.domain.models import SUPPORTED_CURRENCIES, Language
from masarify.domain.state import set_language, set_pin
from masarify.errors import CurrencyLockedError
from masarify.store.gateway import set_currency


def currency_command(code: str | None = None) -> None:
    """Show the currency, or change it while no transactions exist."""
    session, state = open_session()

    if code is None:
        current = state.currency
        console.print(f"Currency: {current.flag} {current.code} ({current.name_en}, {current.symbol})")
        if state.transactions:
            console.print("[dim]Locked: transactions have been recorded[/dim]")
        console.print(f"[dim]Supported: {', '.join(c.code for c in SUPPORTED_CURRENCIES)}[/dim]")
        return

    currency = next((c for c in SUPPORTED_CURRENCIES if c.code == code.upper()), None)
    if currency is None:
        console.print(f"[red]Unsupported currency '{code}'[/red]")
        sys.exit(1)

    try:
        state = set_currency(state, currency)
    except CurrencyLockedError:
        console.print("[red]Currency cannot be changed after transactions have been recorded[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print(f"[green]✓[/green] Currency set to {currency.code}")


def language_command(language: str) -> None:
    try:
        selected = Language(language.lower())
    except ValueError:
        console.print(f"[red]Unsupported language '{language}' (use en or ar)[/red]")
        sys.exit(1)

    session, state = open_session()
    state = set_language(state, selected)
    save_state(session, state)
    console.print(f"[green]✓[/green] Language set to {selected.value}")


def set_pin_command(pin: str | None = None) -> None:
    """Set the 4-digit PIN, or clear it when none is given."""
    session, state = open_session()

    try:
        state = set_pin(state, pin)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    save_state(session, state)
    console.print("[green]✓[/green] PIN saved" if pin else "[green]✓[/green] PIN cleared")
