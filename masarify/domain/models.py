"""Domain type definitions for masarify.

The aggregate root (AppState) and every entity it owns are frozen
dataclasses. State changes replace the root wholesale via
dataclasses.replace, never by mutating it in place.

- Money: Amount in major currency units, as entered by the user
- CategoryId / AccountId / TransactionId: Opaque id strings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NewType

# Money amounts are kept in major units (e.g. 12.5 riyals), matching stored backups
Money = NewType("Money", float)

CategoryId = NewType("CategoryId", str)
AccountId = NewType("AccountId", str)
TransactionId = NewType("TransactionId", str)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

UNKNOWN_LABEL = "Unknown"


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Language(str, Enum):
    """Display language preference."""

    EN = "en"
    AR = "ar"


class AlertSeverity(str, Enum):
    APPROACHING = "approaching"
    EXCEEDED = "exceeded"


class AlertScope(str, Enum):
    GLOBAL = "global"
    CATEGORY = "category"


@dataclass(frozen=True)
class Transaction:
    """Immutable transaction data."""

    id: TransactionId
    amount: Money
    date: str  # ISO timestamp
    category_id: CategoryId
    account_id: AccountId
    type: TransactionType
    note: str | None = None
    receipt_image: str | None = None  # base64 payload


@dataclass(frozen=True)
class Category:
    """Immutable category with bilingual display names."""

    id: CategoryId
    name_en: str
    name_ar: str
    icon: str
    color: str
    type: TransactionType
    budget_limit: Money | None = None  # 0 or None = unlimited


@dataclass(frozen=True)
class Account:
    """Immutable account with bilingual display names."""

    id: AccountId
    name_en: str
    name_ar: str
    type: str


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name_en: str
    name_ar: str
    flag: str


@dataclass(frozen=True)
class BudgetConfig:
    """Global budget limits and the alert threshold percentage."""

    monthly_limit: Money = Money(5000)
    yearly_limit: Money = Money(60000)
    alert_threshold: float = 80


@dataclass(frozen=True)
class AlertEvent:
    """Budget alert intent; surfacing it is the caller's job."""

    severity: AlertSeverity
    scope: AlertScope
    percent: float
    category_id: CategoryId | None = None


SUPPORTED_CURRENCIES: tuple[Currency, ...] = (
    Currency("SAR", "﷼", "Saudi Riyal", "ريال سعودي", "🇸🇦"),
    Currency("USD", "$", "US Dollar", "دولار أمريكي", "🇺🇸"),
    Currency("AED", "د.إ", "UAE Dirham", "درهم إماراتي", "🇦🇪"),
    Currency("KWD", "د.ك", "Kuwaiti Dinar", "دينار كويتي", "🇰🇼"),
    Currency("QAR", "ر.ق", "Qatari Riyal", "ريال قطري", "🇶🇦"),
    Currency("EGP", "£", "Egyptian Pound", "جنيه مصري", "🇪🇬"),
    Currency("JOD", "د.ا", "Jordanian Dinar", "دينار أردني", "🇯🇴"),
    Currency("EUR", "€", "Euro", "يورو", "🇪🇺"),
)

DEFAULT_CURRENCY = SUPPORTED_CURRENCIES[0]

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # Expenses
    Category(CategoryId("1"), "Food & Dining", "طعام ومطاعم", "Utensils", "#e11d48", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("2"), "Transportation", "نقل ومواصلات", "Car", "#4f46e5", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("3"), "Shopping", "تسوق", "ShoppingBag", "#8b5cf6", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("4"), "Housing", "سكن", "Home", "#059669", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("6"), "Entertainment", "ترفيه", "Film", "#d97706", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("7"), "Health", "صحة", "Heart", "#ec4899", TransactionType.EXPENSE, Money(0)),
    Category(CategoryId("9"), "Bills", "فواتير", "FileText", "#64748b", TransactionType.EXPENSE, Money(0)),
    # Income
    Category(CategoryId("5"), "Salary", "راتب", "Banknote", "#10b981", TransactionType.INCOME),
    Category(CategoryId("8"), "Investment", "استثمار", "TrendingUp", "#3b82f6", TransactionType.INCOME),
    Category(CategoryId("10"), "Freelance", "عمل حر", "Laptop", "#6366f1", TransactionType.INCOME),
)

DEFAULT_ACCOUNTS: tuple[Account, ...] = (
    Account(AccountId("1"), "Cash", "نقد", "Cash"),
    Account(AccountId("2"), "Bank Account", "حساب بنكي", "Bank"),
    Account(AccountId("3"), "Credit Card", "بطاقة ائتمان", "Credit"),
)

DEFAULT_ICON = "Circle"
DEFAULT_COLOR = "#64748b"


@dataclass(frozen=True)
class AppState:
    """Aggregate root holding all application state.

    The whole AppState is the unit of persistence and of import/export.
    """

    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = DEFAULT_CATEGORIES
    accounts: tuple[Account, ...] = DEFAULT_ACCOUNTS
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    language: Language = Language.EN
    currency: Currency = DEFAULT_CURRENCY
    is_authenticated: bool = False
    pin: str | None = None
