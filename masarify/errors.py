"""Exception types raised by masarify.

Domain and store functions raise these; the command layer catches them,
prints a message and exits non-zero.
"""

from enum import Enum


class MasarifyError(Exception):
    """Base class for all masarify errors."""


class ParseError(MasarifyError):
    """Raised when a stored or imported payload cannot be parsed."""


class ImportFailure(str, Enum):
    INVALID_STRUCTURE = "InvalidStructure"


class SnapshotImportError(ParseError):
    """Raised when an imported backup does not have the required shape."""

    def __init__(self, reason: ImportFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)


class ReferentialError(MasarifyError):
    """Raised when a mutation would break a reference held by transactions."""


class CategoryInUseError(ReferentialError):
    """Raised when deleting a category that transactions still reference."""

    def __init__(self, category_id: str, usage_count: int) -> None:
        self.category_id = category_id
        self.usage_count = usage_count
        super().__init__(f"Category {category_id} is used by {usage_count} transaction(s)")


class CurrencyLockedError(ReferentialError):
    """Raised when changing currency after transactions have been recorded."""

    def __init__(self, transaction_count: int) -> None:
        self.transaction_count = transaction_count
        super().__init__(f"Currency is locked: {transaction_count} transaction(s) recorded")


class TransactionNotFoundError(MasarifyError):
    def __init__(self, transaction_id: str) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class StateNotLoadedError(MasarifyError):
    """Raised when saving before the stored state has been loaded."""


class ExternalServiceError(MasarifyError):
    """Raised when the advisory service call fails."""
