"""Ledger types and pure functions for masarify.

Everything here works on immutable values: aggregation in ``ledger``,
copy-on-write state changes in ``state``. Nothing touches the database,
the console or the network.
"""

from masarify.domain.models import AppState, Category, Money, Transaction, TransactionType

__all__ = ["AppState", "Category", "Money", "Transaction", "TransactionType"]
