"""Pure functions for changing the application state.

Every function takes an AppState and returns a new one; the input is never
modified. Reference lookups degrade to "Unknown" instead of failing.
"""

import math
import uuid
from dataclasses import replace

from masarify.domain.models import (
    Account,
    AccountId,
    AppState,
    BudgetConfig,
    Category,
    CategoryId,
    Language,
    Transaction,
    TransactionId,
    UNKNOWN_LABEL,
)
from masarify.errors import TransactionNotFoundError


def new_id() -> str:
    """Generate a new opaque entity id."""
    return uuid.uuid4().hex


def find_category(categories: tuple[Category, ...], category_id: str) -> Category | None:
    return next((c for c in categories if c.id == category_id), None)


def find_account(accounts: tuple[Account, ...], account_id: str) -> Account | None:
    return next((a for a in accounts if a.id == account_id), None)


def display_name(entity: Category | Account | None, language: Language) -> str:
    """Name of a category or account in the given language.

    Args:
        entity: Resolved category or account, or None if the lookup failed.
        language: Display language.

    Returns:
        Localized name, or "Unknown" for a missing entity.
    """
    if entity is None:
        return UNKNOWN_LABEL
    if language == Language.AR:
        return entity.name_ar or entity.name_en
    return entity.name_en or entity.name_ar


def add_transaction(state: AppState, transaction: Transaction) -> tuple[AppState, Transaction]:
    """Add a transaction with a freshly assigned id.

    Args:
        state: Current state.
        transaction: Transaction data (its id is replaced).

    Returns:
        Tuple of (new_state, stored_transaction). Newest transactions come first.
    """
    stored = replace(transaction, id=TransactionId(new_id()))
    return replace(state, transactions=(stored, *state.transactions)), stored


def update_transaction(state: AppState, transaction: Transaction) -> AppState:
    """Replace the transaction with the same id.

    Raises:
        TransactionNotFoundError: If no transaction has that id.
    """
    if not any(t.id == transaction.id for t in state.transactions):
        raise TransactionNotFoundError(transaction.id)
    transactions = tuple(transaction if t.id == transaction.id else t for t in state.transactions)
    return replace(state, transactions=transactions)


def delete_transaction(state: AppState, transaction_id: TransactionId) -> AppState:
    """Remove a transaction.

    Raises:
        TransactionNotFoundError: If no transaction has that id.
    """
    remaining = tuple(t for t in state.transactions if t.id != transaction_id)
    if len(remaining) == len(state.transactions):
        raise TransactionNotFoundError(transaction_id)
    return replace(state, transactions=remaining)


def add_category(state: AppState, category: Category) -> tuple[AppState, Category]:
    stored = replace(category, id=CategoryId(new_id()))
    return replace(state, categories=(*state.categories, stored)), stored


def update_category(state: AppState, category: Category) -> AppState:
    """Replace the category with the same id (no-op if absent)."""
    categories = tuple(category if c.id == category.id else c for c in state.categories)
    return replace(state, categories=categories)


def add_account(state: AppState, account: Account) -> tuple[AppState, Account]:
    stored = replace(account, id=AccountId(new_id()))
    return replace(state, accounts=(*state.accounts, stored)), stored


def set_budget(state: AppState, budget: BudgetConfig) -> AppState:
    """Save budget settings.

    Raises:
        ValueError: If a limit is negative or not finite, or the threshold is
            outside 0-100.
    """
    if not all(math.isfinite(limit) and limit >= 0 for limit in (budget.monthly_limit, budget.yearly_limit)):
        raise ValueError("Budget limits must be finite numbers, not negative")
    if not 0 <= budget.alert_threshold <= 100:
        raise ValueError("Alert threshold must be between 0 and 100")
    return replace(state, budget=budget)


def set_language(state: AppState, language: Language) -> AppState:
    return replace(state, language=language)


def set_pin(state: AppState, pin: str | None) -> AppState:
    """Set or clear the PIN.

    Raises:
        ValueError: If the PIN is not 4 digits.
    """
    if pin is not None and (len(pin) != 4 or not pin.isdigit()):
        raise ValueError("PIN must be 4 digits")
    return replace(state, pin=pin)


def unlock(state: AppState, pin: str) -> AppState:
    """Authenticate with a PIN.

    Returns:
        State with is_authenticated set when the PIN matches (or none is set),
        otherwise the unchanged state.
    """
    if state.pin is None or pin == state.pin:
        return replace(state, is_authenticated=True)
    return state
