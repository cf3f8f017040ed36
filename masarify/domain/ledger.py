"""Pure functions for ledger aggregation and budget alert evaluation.

This module contains the functional core for derived figures:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Never raises on malformed transactions

Malformed amounts count as zero. Transactions with unparsable dates are
skipped by windowed totals but still count towards the balance.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from masarify.dates import in_same_month, in_same_year, parse_timestamp
from masarify.domain.models import (
    AlertEvent,
    AlertScope,
    AlertSeverity,
    BudgetConfig,
    Category,
    CategoryId,
    Money,
    Transaction,
    TransactionType,
)


@dataclass(frozen=True)
class WindowTotals:
    """Immutable income/expense totals for the reference month and year."""

    monthly_income: Money
    monthly_expense: Money
    yearly_income: Money
    yearly_expense: Money

    @property
    def monthly_net(self) -> Money:
        return Money(self.monthly_income - self.monthly_expense)


@dataclass(frozen=True)
class CategoryTotal:
    """Immutable expense total for one category."""

    category_id: CategoryId
    total: Money


@dataclass(frozen=True)
class BudgetProgress:
    """Immutable progress of spending against one limit."""

    label: str
    spent: Money
    limit: Money
    percentage: float  # capped at 100
    exceeded: bool
    warning: bool


def safe_amount(transaction: Transaction) -> Money:
    """Amount of a transaction, or zero when it is not a finite number."""
    amount = transaction.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return Money(0)
    try:
        finite = math.isfinite(amount)
    except OverflowError:
        return Money(0)
    return Money(amount) if finite else Money(0)


def compute_balance(transactions: Iterable[Transaction]) -> Money:
    """Calculate the balance over the entire history.

    Args:
        transactions: All transactions.

    Returns:
        Sum of income amounts minus sum of expense amounts.
    """
    balance = 0.0
    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            balance += safe_amount(txn)
        elif txn.type == TransactionType.EXPENSE:
            balance -= safe_amount(txn)
    return Money(balance)


def compute_window_totals(transactions: Iterable[Transaction], reference_date: datetime) -> WindowTotals:
    """Calculate income and expense totals for the reference month and year.

    Args:
        transactions: All transactions.
        reference_date: Date whose calendar month and year define the windows.

    Returns:
        WindowTotals for the month and the year of reference_date.
    """
    monthly_income = monthly_expense = yearly_income = yearly_expense = 0.0

    for txn in transactions:
        timestamp = parse_timestamp(txn.date)
        if timestamp is None or not in_same_year(timestamp, reference_date):
            continue

        amount = safe_amount(txn)
        same_month = in_same_month(timestamp, reference_date)

        if txn.type == TransactionType.INCOME:
            yearly_income += amount
            if same_month:
                monthly_income += amount
        elif txn.type == TransactionType.EXPENSE:
            yearly_expense += amount
            if same_month:
                monthly_expense += amount

    return WindowTotals(
        monthly_income=Money(monthly_income),
        monthly_expense=Money(monthly_expense),
        yearly_income=Money(yearly_income),
        yearly_expense=Money(yearly_expense),
    )


def compute_category_total(
    transactions: Iterable[Transaction],
    category_id: CategoryId,
    reference_date: datetime,
) -> Money:
    """Calculate this month's expense total for one category.

    Args:
        transactions: All transactions.
        category_id: Category to total.
        reference_date: Date whose calendar month defines the window.

    Returns:
        Sum of expense amounts in the category for the reference month.
    """
    total = 0.0
    for txn in transactions:
        if txn.category_id != category_id or txn.type != TransactionType.EXPENSE:
            continue
        timestamp = parse_timestamp(txn.date)
        if timestamp is None or not in_same_month(timestamp, reference_date):
            continue
        total += safe_amount(txn)
    return Money(total)


def budget_percentage(spent: Money, limit: Money | None) -> float:
    """Calculate percentage of a limit used.

    A limit of zero (or none) means unlimited and yields 0.
    """
    if limit is None or limit <= 0:
        return 0.0
    return (spent / limit) * 100


def classify_percentage(percent: float, threshold: float) -> AlertSeverity | None:
    """Map a usage percentage to an alert severity, if any."""
    if percent >= 100:
        return AlertSeverity.EXCEEDED
    if percent >= threshold:
        return AlertSeverity.APPROACHING
    return None


def evaluate_alerts(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    budget: BudgetConfig,
    reference_date: datetime,
    changed: Transaction | None = None,
) -> list[AlertEvent]:
    """Decide which budget alerts fire.

    The global monthly check runs whenever a monthly limit is set. The
    per-category check only runs for the category of a newly added or
    updated expense, and only when that category has a positive limit. A
    limit of zero is unlimited and never alerts.

    Args:
        transactions: All transactions, including the changed one.
        categories: All categories.
        budget: Global budget configuration.
        reference_date: Date whose calendar month defines the window.
        changed: Transaction that was just added or updated, if any.

    Returns:
        List of AlertEvent, global first.
    """
    transactions = list(transactions)
    events: list[AlertEvent] = []

    if budget.monthly_limit > 0:
        totals = compute_window_totals(transactions, reference_date)
        percent = budget_percentage(totals.monthly_expense, budget.monthly_limit)
        severity = classify_percentage(percent, budget.alert_threshold)
        if severity is not None:
            events.append(AlertEvent(severity=severity, scope=AlertScope.GLOBAL, percent=percent))

    if changed is not None and changed.type == TransactionType.EXPENSE:
        category = next((c for c in categories if c.id == changed.category_id), None)
        limit = category.budget_limit if category is not None else None
        if category is not None and limit is not None and limit > 0:
            spent = compute_category_total(transactions, category.id, reference_date)
            percent = budget_percentage(spent, limit)
            severity = classify_percentage(percent, budget.alert_threshold)
            if severity is not None:
                events.append(
                    AlertEvent(
                        severity=severity,
                        scope=AlertScope.CATEGORY,
                        percent=percent,
                        category_id=category.id,
                    )
                )

    return events


def filter_expense_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    reference_date: datetime | None = None,
) -> list[CategoryTotal]:
    """Calculate per-category expense totals for reporting.

    Args:
        transactions: All transactions.
        categories: Categories to report on, in display order.
        reference_date: Restrict to this calendar month. None means all time.

    Returns:
        List of CategoryTotal in category order, zero totals excluded.
    """
    totals: dict[CategoryId, float] = {}
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE:
            continue
        if reference_date is not None:
            timestamp = parse_timestamp(txn.date)
            if timestamp is None or not in_same_month(timestamp, reference_date):
                continue
        totals[txn.category_id] = totals.get(txn.category_id, 0.0) + safe_amount(txn)

    breakdown: list[CategoryTotal] = []
    for category in categories:
        total = totals.get(category.id, 0.0)
        if total > 0:
            breakdown.append(CategoryTotal(category_id=category.id, total=Money(total)))
    return breakdown


def compute_budget_progress(spent: Money, limit: Money, threshold: float, label: str) -> BudgetProgress:
    """Calculate progress against a limit, as shown on the dashboard.

    Args:
        spent: Amount spent in the window.
        limit: Limit for the window (0 = unlimited).
        threshold: Alert threshold percentage.
        label: Display label for the limit.

    Returns:
        BudgetProgress with the percentage capped at 100.
    """
    percentage = min(budget_percentage(spent, limit), 100.0)
    exceeded = limit > 0 and spent > limit
    warning = limit > 0 and percentage >= threshold
    return BudgetProgress(
        label=label,
        spent=spent,
        limit=limit,
        percentage=percentage,
        exceeded=exceeded,
        warning=warning,
    )


def calculate_histogram_bar_length(amount: Money, max_amount: Money, bar_width: int) -> int:
    """Calculate histogram bar length in characters."""
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)
