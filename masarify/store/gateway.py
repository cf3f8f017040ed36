"""State persistence gateway.

Serializes the whole AppState to a JSON document and restores it, merging
whatever was stored over the default state so that backups written by an
older schema still produce a complete AppState. Also guards the mutations
that would break references held by transactions, and flattens the ledger
to CSV.

The JSON document uses camelCase keys, matching existing backup files.
"""

import csv
import io
import json
import logging
import math
from dataclasses import replace
from typing import Any

from masarify.dates import date_part
from masarify.domain.models import (
    DEFAULT_COLOR,
    DEFAULT_CURRENCY,
    DEFAULT_ICON,
    SUPPORTED_CURRENCIES,
    Account,
    AccountId,
    AppState,
    BudgetConfig,
    Category,
    CategoryId,
    Currency,
    Language,
    Money,
    Transaction,
    TransactionId,
    TransactionType,
)
from masarify.domain.state import display_name, find_account, find_category
from masarify.errors import CategoryInUseError, CurrencyLockedError, ImportFailure, SnapshotImportError

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "Amount", "Type", "Category", "Account", "Note"]
BOM = "\ufeff"


# --- Serialization ---


def transaction_to_dict(txn: Transaction) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": txn.id,
        "amount": txn.amount,
        "date": txn.date,
        "categoryId": txn.category_id,
        "accountId": txn.account_id,
        "type": txn.type.value,
    }
    if txn.note is not None:
        data["note"] = txn.note
    if txn.receipt_image is not None:
        data["receiptImage"] = txn.receipt_image
    return data


def category_to_dict(category: Category) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": category.id,
        "nameEn": category.name_en,
        "nameAr": category.name_ar,
        "icon": category.icon,
        "color": category.color,
        "type": category.type.value,
    }
    if category.budget_limit is not None:
        data["budgetLimit"] = category.budget_limit
    return data


def account_to_dict(account: Account) -> dict[str, Any]:
    return {"id": account.id, "nameEn": account.name_en, "nameAr": account.name_ar, "type": account.type}


def currency_to_dict(currency: Currency) -> dict[str, Any]:
    return {
        "code": currency.code,
        "symbol": currency.symbol,
        "nameEn": currency.name_en,
        "nameAr": currency.name_ar,
        "flag": currency.flag,
    }


def state_to_dict(state: AppState) -> dict[str, Any]:
    """Convert AppState to its JSON-ready document."""
    return {
        "transactions": [transaction_to_dict(t) for t in state.transactions],
        "categories": [category_to_dict(c) for c in state.categories],
        "accounts": [account_to_dict(a) for a in state.accounts],
        "budget": {
            "monthlyLimit": state.budget.monthly_limit,
            "yearlyLimit": state.budget.yearly_limit,
            "alertThreshold": state.budget.alert_threshold,
        },
        "language": state.language.value,
        "currency": currency_to_dict(state.currency),
        "isAuthenticated": state.is_authenticated,
        "pin": state.pin,
    }


# --- Deserialization ---


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # Integers beyond float range
        return default
    return value if finite else default


def _identifier(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _transaction_type(value: Any) -> TransactionType | None:
    try:
        return TransactionType(value)
    except ValueError:
        return None


def transaction_from_dict(data: Any) -> Transaction | None:
    """Parse a stored transaction.

    Returns:
        Transaction, or None when the entry has no id or direction. A missing
        or non-numeric amount is coerced to 0 and an invalid date is kept as
        is; aggregation tolerates both.
    """
    if not isinstance(data, dict):
        return None
    txn_id = _identifier(data.get("id"))
    txn_type = _transaction_type(data.get("type"))
    if txn_id is None or txn_type is None:
        return None
    return Transaction(
        id=TransactionId(txn_id),
        amount=Money(_number(data.get("amount"), 0)),
        date=_text(data.get("date")),
        category_id=CategoryId(_identifier(data.get("categoryId")) or ""),
        account_id=AccountId(_identifier(data.get("accountId")) or ""),
        type=txn_type,
        note=_optional_text(data.get("note")),
        receipt_image=_optional_text(data.get("receiptImage")),
    )


def category_from_dict(data: Any) -> Category | None:
    if not isinstance(data, dict):
        return None
    category_id = _identifier(data.get("id"))
    if category_id is None:
        return None
    # Older backups predate the per-category direction
    category_type = _transaction_type(data.get("type")) or TransactionType.EXPENSE
    limit = data.get("budgetLimit")
    return Category(
        id=CategoryId(category_id),
        name_en=_text(data.get("nameEn")),
        name_ar=_text(data.get("nameAr")),
        icon=_text(data.get("icon"), DEFAULT_ICON),
        color=_text(data.get("color"), DEFAULT_COLOR),
        type=category_type,
        budget_limit=None if limit is None else Money(_number(limit, 0)),
    )


def account_from_dict(data: Any) -> Account | None:
    if not isinstance(data, dict):
        return None
    account_id = _identifier(data.get("id"))
    if account_id is None:
        return None
    return Account(
        id=AccountId(account_id),
        name_en=_text(data.get("nameEn")),
        name_ar=_text(data.get("nameAr")),
        type=_text(data.get("type")),
    )


def currency_from_dict(data: Any) -> Currency:
    """Parse a stored currency record.

    Anything that is not a mapping with a string code (older backups stored
    a bare code string) falls back to the default currency.
    """
    if not isinstance(data, dict) or not isinstance(data.get("code"), str):
        return DEFAULT_CURRENCY
    known = next((c for c in SUPPORTED_CURRENCIES if c.code == data["code"]), None)
    return Currency(
        code=data["code"],
        symbol=_text(data.get("symbol"), known.symbol if known else data["code"]),
        name_en=_text(data.get("nameEn"), known.name_en if known else data["code"]),
        name_ar=_text(data.get("nameAr"), known.name_ar if known else data["code"]),
        flag=_text(data.get("flag"), known.flag if known else ""),
    )


def budget_from_dict(data: Any, default: BudgetConfig) -> BudgetConfig:
    if not isinstance(data, dict):
        return default
    return BudgetConfig(
        monthly_limit=Money(_number(data.get("monthlyLimit"), default.monthly_limit)),
        yearly_limit=Money(_number(data.get("yearlyLimit"), default.yearly_limit)),
        alert_threshold=_number(data.get("alertThreshold"), default.alert_threshold),
    )


def _collection(data: Any, parse: Any, default: tuple) -> tuple:
    if not isinstance(data, list):
        return default
    parsed = [parse(item) for item in data]
    skipped = sum(1 for item in parsed if item is None)
    if skipped:
        logger.warning("Skipped %d malformed stored entries", skipped)
    return tuple(item for item in parsed if item is not None)


def state_from_dict(data: dict[str, Any]) -> AppState:
    """Merge a stored document over the default state, field by field.

    The result is never authenticated.
    """
    default = AppState()

    try:
        language = Language(data.get("language"))
    except ValueError:
        language = default.language

    pin = data.get("pin")

    return AppState(
        transactions=_collection(data.get("transactions"), transaction_from_dict, default.transactions),
        categories=_collection(data.get("categories"), category_from_dict, default.categories),
        accounts=_collection(data.get("accounts"), account_from_dict, default.accounts),
        budget=budget_from_dict(data.get("budget"), default.budget),
        language=language,
        currency=currency_from_dict(data.get("currency")),
        is_authenticated=False,
        pin=pin if isinstance(pin, str) else None,
    )


# --- Gateway operations ---


def load_state(raw: str | None = None) -> AppState:
    """Restore AppState from its stored form.

    Args:
        raw: Stored JSON document, or None if nothing was stored.

    Returns:
        Restored state, or the default state if raw is absent or unparsable.
        Loading never authenticates.
    """
    if not raw:
        return AppState()

    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning("Failed to load stored data, using defaults: %s", e)
        return AppState()

    if not isinstance(data, dict):
        logger.warning("Stored data is not an object, using defaults")
        return AppState()

    return state_from_dict(data)


def export_snapshot(state: AppState) -> str:
    """Serialize the full state to a JSON document that load_state accepts."""
    return json.dumps(state_to_dict(state), ensure_ascii=False, indent=2)


def import_snapshot(raw: str) -> AppState:
    """Validate and restore a backup file.

    A successful import counts as unlocking the app.

    Args:
        raw: Contents of a JSON backup file.

    Returns:
        Imported state with is_authenticated set.

    Raises:
        SnapshotImportError: If the payload is not JSON or lacks a transactions
            list and a categories list.
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        raise SnapshotImportError(ImportFailure.INVALID_STRUCTURE, "not a JSON document") from e

    if not isinstance(data, dict):
        raise SnapshotImportError(ImportFailure.INVALID_STRUCTURE, "top level must be an object")
    if not isinstance(data.get("transactions"), list):
        raise SnapshotImportError(ImportFailure.INVALID_STRUCTURE, "'transactions' must be a list")
    if not isinstance(data.get("categories"), list):
        raise SnapshotImportError(ImportFailure.INVALID_STRUCTURE, "'categories' must be a list")

    return replace(state_from_dict(data), is_authenticated=True)


def delete_category(state: AppState, category_id: CategoryId) -> AppState:
    """Remove a category that no transaction references.

    Raises:
        CategoryInUseError: If any transaction references the category.
    """
    usage = sum(1 for t in state.transactions if t.category_id == category_id)
    if usage:
        raise CategoryInUseError(category_id, usage)
    return replace(state, categories=tuple(c for c in state.categories if c.id != category_id))


def set_currency(state: AppState, currency: Currency) -> AppState:
    """Change the currency while the ledger is still empty.

    Raises:
        CurrencyLockedError: If any transaction exists.
    """
    if state.transactions:
        raise CurrencyLockedError(len(state.transactions))
    return replace(state, currency=currency)


def export_csv(
    transactions: tuple[Transaction, ...],
    categories: tuple[Category, ...],
    accounts: tuple[Account, ...],
    language: Language,
) -> str:
    """Flatten transactions to CSV text.

    Args:
        transactions: Transactions to export, one row each.
        categories: Categories used to resolve display names.
        accounts: Accounts used to resolve display names.
        language: Language for display names.

    Returns:
        CSV text prefixed with a UTF-8 byte-order mark.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for txn in transactions:
        writer.writerow(
            [
                date_part(txn.date),
                txn.amount,
                txn.type.value,
                display_name(find_category(categories, txn.category_id), language),
                display_name(find_account(accounts, txn.account_id), language),
                txn.note or "",
            ]
        )

    return BOM + buffer.getvalue()
