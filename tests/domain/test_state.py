"""Tests for masarify.domain.state pure functions."""

import pytest

from masarify.domain.models import (
    UNKNOWN_LABEL,
    AccountId,
    AppState,
    BudgetConfig,
    Category,
    CategoryId,
    Language,
    Money,
    Transaction,
    TransactionId,
    TransactionType,
)
from masarify.domain.state import (
    add_category,
    add_transaction,
    delete_transaction,
    display_name,
    find_account,
    find_category,
    set_budget,
    set_pin,
    unlock,
    update_category,
    update_transaction,
)
from masarify.errors import TransactionNotFoundError


def draft(amount: float = 10, category_id: str = "1") -> Transaction:
    return Transaction(
        id=TransactionId(""),
        amount=Money(amount),
        date="2025-03-10T09:30:00",
        category_id=CategoryId(category_id),
        account_id=AccountId("1"),
        type=TransactionType.EXPENSE,
    )


class TestTransactions:
    """Tests for add/update/delete transaction."""

    def test_add_assigns_id_and_prepends(self) -> None:
        """Should assign a fresh id and put the newest first."""
        state, first = add_transaction(AppState(), draft(10))
        state, second = add_transaction(state, draft(20))

        assert first.id and second.id and first.id != second.id
        assert [t.id for t in state.transactions] == [second.id, first.id]

    def test_add_does_not_modify_input(self) -> None:
        original = AppState()
        add_transaction(original, draft())
        assert original.transactions == ()

    def test_update_replaces_by_id(self) -> None:
        state, stored = add_transaction(AppState(), draft(10))
        updated = Transaction(
            id=stored.id,
            amount=Money(99),
            date=stored.date,
            category_id=CategoryId("2"),
            account_id=stored.account_id,
            type=TransactionType.EXPENSE,
            note="taxi",
        )
        state = update_transaction(state, updated)
        assert state.transactions == (updated,)

    def test_update_unknown_id(self) -> None:
        with pytest.raises(TransactionNotFoundError):
            update_transaction(AppState(), draft())

    def test_delete(self) -> None:
        state, stored = add_transaction(AppState(), draft())
        assert delete_transaction(state, stored.id).transactions == ()

    def test_delete_unknown_id(self) -> None:
        with pytest.raises(TransactionNotFoundError):
            delete_transaction(AppState(), TransactionId("nope"))


class TestCategories:
    """Tests for category helpers."""

    def test_add_and_update_category(self) -> None:
        category = Category(CategoryId(""), "Pets", "حيوانات", "Heart", "#fff", TransactionType.EXPENSE, Money(0))
        state, stored = add_category(AppState(), category)
        assert state.categories[-1] == stored

        limited = Category(stored.id, "Pets", "حيوانات", "Heart", "#fff", TransactionType.EXPENSE, Money(150))
        state = update_category(state, limited)
        assert find_category(state.categories, stored.id) == limited

    def test_display_name_by_language(self) -> None:
        category = find_category(AppState().categories, "1")
        assert display_name(category, Language.EN) == "Food & Dining"
        assert display_name(category, Language.AR) == "طعام ومطاعم"

    def test_display_name_unknown(self) -> None:
        """Should degrade to 'Unknown' for a missing reference."""
        assert display_name(find_category(AppState().categories, "missing"), Language.EN) == UNKNOWN_LABEL
        assert display_name(find_account(AppState().accounts, "missing"), Language.AR) == UNKNOWN_LABEL


class TestSettings:
    """Tests for budget, PIN and unlock."""

    def test_set_budget(self) -> None:
        budget = BudgetConfig(monthly_limit=Money(3000), yearly_limit=Money(36000), alert_threshold=90)
        assert set_budget(AppState(), budget).budget == budget

    def test_set_budget_rejects_bad_threshold(self) -> None:
        with pytest.raises(ValueError):
            set_budget(AppState(), BudgetConfig(alert_threshold=120))

    def test_set_budget_rejects_negative_limit(self) -> None:
        with pytest.raises(ValueError):
            set_budget(AppState(), BudgetConfig(monthly_limit=Money(-1)))

    @pytest.mark.parametrize("limit", [float("nan"), float("inf")])
    def test_set_budget_rejects_non_finite_limit(self, limit: float) -> None:
        """Should refuse limits that cannot be stored as JSON numbers."""
        with pytest.raises(ValueError):
            set_budget(AppState(), BudgetConfig(monthly_limit=Money(limit)))
        with pytest.raises(ValueError):
            set_budget(AppState(), BudgetConfig(yearly_limit=Money(limit)))

    def test_set_budget_rejects_nan_threshold(self) -> None:
        with pytest.raises(ValueError):
            set_budget(AppState(), BudgetConfig(alert_threshold=float("nan")))

    def test_set_pin_validates(self) -> None:
        assert set_pin(AppState(), "1234").pin == "1234"
        assert set_pin(AppState(pin="1234"), None).pin is None
        with pytest.raises(ValueError):
            set_pin(AppState(), "12a4")

    def test_unlock(self) -> None:
        """Should authenticate only with the matching PIN."""
        locked = AppState(pin="4321")
        assert unlock(locked, "0000").is_authenticated is False
        assert unlock(locked, "4321").is_authenticated is True
        assert unlock(AppState(), "").is_authenticated is True
