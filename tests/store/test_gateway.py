"""Tests for masarify.store.gateway."""

import csv
import io
import json

import pytest

from masarify.domain.models import (
    DEFAULT_CURRENCY,
    SUPPORTED_CURRENCIES,
    Account,
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
from masarify.errors import CategoryInUseError, CurrencyLockedError, ImportFailure, SnapshotImportError
from masarify.store.gateway import (
    delete_category,
    export_csv,
    export_snapshot,
    import_snapshot,
    load_state,
    set_currency,
)

USD = next(c for c in SUPPORTED_CURRENCIES if c.code == "USD")


def make_transaction(txn_id: str, category_id: str = "1", **kwargs: object) -> Transaction:
    fields: dict = {
        "id": TransactionId(txn_id),
        "amount": Money(42.5),
        "date": "2025-03-10T09:30:00",
        "category_id": CategoryId(category_id),
        "account_id": AccountId("1"),
        "type": TransactionType.EXPENSE,
    }
    fields.update(kwargs)
    return Transaction(**fields)


def sample_state() -> AppState:
    return AppState(
        transactions=(
            make_transaction("t1", note="Lunch, with \"friends\""),
            make_transaction("t2", category_id="5", type=TransactionType.INCOME, amount=Money(8000)),
            make_transaction("t3", receipt_image="aGVsbG8="),
        ),
        categories=(
            *AppState().categories,
            Category(CategoryId("c1"), "Pets", "حيوانات", "Heart", "#fff", TransactionType.EXPENSE, Money(150)),
        ),
        accounts=(Account(AccountId("1"), "Cash", "نقد", "Cash"),),
        budget=BudgetConfig(monthly_limit=Money(3000), yearly_limit=Money(36000), alert_threshold=75),
        language=Language.AR,
        currency=USD,
        is_authenticated=True,
        pin="1234",
    )


class TestLoadState:
    """Tests for load_state."""

    @pytest.mark.parametrize("raw", [None, "", "{not json", "[1, 2]", "42", "null"])
    def test_absent_or_unparsable_gives_default(self, raw: str | None) -> None:
        """Should fall back to the default state."""
        assert load_state(raw) == AppState()

    def test_merges_over_defaults(self) -> None:
        """Should keep defaults for fields the stored document lacks."""
        state = load_state(json.dumps({"budget": {"monthlyLimit": 1200}, "language": "ar"}))

        assert state.transactions == ()
        assert state.categories == AppState().categories
        assert state.accounts == AppState().accounts
        assert state.budget == BudgetConfig(monthly_limit=Money(1200))
        assert state.language == Language.AR
        assert state.currency == DEFAULT_CURRENCY
        assert state.pin is None

    def test_never_authenticated(self) -> None:
        """Should reset is_authenticated even when stored as true."""
        assert load_state(json.dumps({"isAuthenticated": True})).is_authenticated is False

    def test_bare_currency_code_falls_back(self) -> None:
        """Should replace an unstructured currency with the default."""
        assert load_state(json.dumps({"currency": "USD"})).currency == DEFAULT_CURRENCY

    def test_partial_currency_record_filled_from_known(self) -> None:
        assert load_state(json.dumps({"currency": {"code": "USD"}})).currency == USD

    def test_skips_malformed_entries(self) -> None:
        """Should drop entries without id or direction and coerce bad amounts."""
        raw = json.dumps(
            {
                "transactions": [
                    {"id": "a", "amount": "oops", "date": "bad", "categoryId": "1", "accountId": "1", "type": "EXPENSE"},
                    {"id": "b", "type": "SIDEWAYS"},
                    "junk",
                ],
                "categories": [{"id": 7, "nameEn": "Old"}, {"nameEn": "No id"}],
            }
        )
        state = load_state(raw)

        assert [t.id for t in state.transactions] == ["a"]
        assert state.transactions[0].amount == 0
        assert [c.id for c in state.categories] == ["7"]
        assert state.categories[0].type == TransactionType.EXPENSE

    def test_reads_camelcase_backup(self) -> None:
        """Should accept camelCase documents written by earlier versions."""
        raw = json.dumps(
            {
                "transactions": [
                    {
                        "id": "1717000000000",
                        "amount": 250,
                        "date": "2025-03-10T00:00:00.000Z",
                        "categoryId": "1",
                        "accountId": "2",
                        "type": "EXPENSE",
                        "note": "dinner",
                    }
                ],
                "categories": [],
                "isAuthenticated": True,
                "pin": "1111",
            }
        )
        state = load_state(raw)

        assert state.transactions[0].category_id == "1"
        assert state.transactions[0].account_id == "2"
        assert state.transactions[0].note == "dinner"
        assert state.categories == ()
        assert state.pin == "1111"

    @pytest.mark.parametrize(
        "raw",
        [
            '{"transactions": [{"id": "a", "type": "EXPENSE", "amount": 1' + "0" * 400 + "}]}",
            '{"budget": {"monthlyLimit": ' + "9" * 5001 + "}}",
            "[" * 100000 + "]" * 100000,
        ],
        ids=["int-beyond-float", "int-beyond-digit-limit", "deep-nesting"],
    )
    def test_oversized_payloads_give_defaults_or_zero(self, raw: str) -> None:
        """Should never raise on numbers or nesting the parser cannot handle."""
        state = load_state(raw)
        assert state.budget == BudgetConfig()
        assert all(t.amount == 0 for t in state.transactions)


class TestSnapshotRoundTrip:
    """Tests for export_snapshot with load_state."""

    def test_round_trip(self) -> None:
        """Should restore every field except authentication."""
        state = sample_state()
        restored = load_state(export_snapshot(state))

        assert restored.transactions == state.transactions
        assert restored.categories == state.categories
        assert restored.accounts == state.accounts
        assert restored.budget == state.budget
        assert restored.language == state.language
        assert restored.currency == state.currency
        assert restored.pin == state.pin
        assert restored.is_authenticated is False

    def test_default_state_round_trip(self) -> None:
        assert load_state(export_snapshot(AppState())) == AppState()

    def test_snapshot_is_self_describing_json(self) -> None:
        data = json.loads(export_snapshot(sample_state()))
        assert set(data) == {
            "transactions",
            "categories",
            "accounts",
            "budget",
            "language",
            "currency",
            "isAuthenticated",
            "pin",
        }
        assert data["transactions"][0]["categoryId"] == "1"
        assert data["currency"]["code"] == "USD"


class TestImportSnapshot:
    """Tests for import_snapshot."""

    def test_minimal_document(self) -> None:
        """Should accept empty collections and authenticate."""
        state = import_snapshot('{"transactions":[],"categories":[]}')

        assert state.transactions == ()
        assert state.categories == ()
        assert state.accounts == AppState().accounts
        assert state.is_authenticated is True

    @pytest.mark.parametrize(
        "raw",
        [
            '{"foo":1}',
            '{"transactions":[],"categories":{}}',
            '{"transactions":"x","categories":[]}',
            '{"categories":[]}',
            "[]",
            "not json",
        ],
    )
    def test_invalid_structure(self, raw: str) -> None:
        """Should reject documents without both lists."""
        with pytest.raises(SnapshotImportError) as excinfo:
            import_snapshot(raw)
        assert excinfo.value.reason == ImportFailure.INVALID_STRUCTURE

    @pytest.mark.parametrize(
        "raw",
        [
            '{"transactions": [], "categories": [], "budget": {"monthlyLimit": ' + "9" * 5001 + "}}",
            "[" * 100000 + "]" * 100000,
        ],
        ids=["int-beyond-digit-limit", "deep-nesting"],
    )
    def test_unparsable_payload_is_invalid_structure(self, raw: str) -> None:
        with pytest.raises(SnapshotImportError) as excinfo:
            import_snapshot(raw)
        assert excinfo.value.reason == ImportFailure.INVALID_STRUCTURE

    def test_amount_beyond_float_range_counts_as_zero(self) -> None:
        raw = '{"transactions": [{"id": "a", "type": "EXPENSE", "amount": 1' + "0" * 400 + '}], "categories": []}'
        state = import_snapshot(raw)
        assert state.transactions[0].amount == 0

    def test_import_round_trip(self) -> None:
        state = sample_state()
        imported = import_snapshot(export_snapshot(state))
        assert imported.transactions == state.transactions
        assert imported.categories == state.categories


class TestDeleteCategory:
    """Tests for delete_category."""

    def test_rejects_category_in_use(self) -> None:
        """Should refuse and leave the state untouched."""
        state = sample_state()
        with pytest.raises(CategoryInUseError) as excinfo:
            delete_category(state, CategoryId("1"))
        assert excinfo.value.usage_count == 2
        assert any(c.id == "1" for c in state.categories)

    def test_removes_unused_category(self) -> None:
        state = delete_category(sample_state(), CategoryId("c1"))
        assert all(c.id != "c1" for c in state.categories)
        assert len(state.categories) == len(sample_state().categories) - 1


class TestSetCurrency:
    """Tests for set_currency."""

    def test_locked_with_transactions(self) -> None:
        """Should refuse any currency once a transaction exists."""
        state = AppState(transactions=(make_transaction("t1"),))
        for currency in SUPPORTED_CURRENCIES:
            with pytest.raises(CurrencyLockedError):
                set_currency(state, currency)

    def test_changes_when_empty(self) -> None:
        assert set_currency(AppState(), USD).currency == USD


class TestExportCsv:
    """Tests for export_csv."""

    def test_header_bom_and_rows(self) -> None:
        """Should write a BOM, the header and one row per transaction."""
        state = sample_state()
        text = export_csv(state.transactions, state.categories, state.accounts, Language.EN)

        assert text.startswith("\ufeff")
        rows = list(csv.reader(io.StringIO(text[1:])))
        assert rows[0] == ["Date", "Amount", "Type", "Category", "Account", "Note"]
        assert rows[1] == ["2025-03-10", "42.5", "EXPENSE", "Food & Dining", "Cash", 'Lunch, with "friends"']
        assert rows[2] == ["2025-03-10", "8000", "INCOME", "Salary", "Cash", ""]
        assert len(rows) == 4

    def test_escapes_note(self) -> None:
        text = export_csv(sample_state().transactions[:1], AppState().categories, AppState().accounts, Language.EN)
        assert '"Lunch, with ""friends"""' in text

    def test_unknown_references(self) -> None:
        """Should render unresolved category and account as 'Unknown'."""
        txn = make_transaction("t9", category_id="gone", account_id=AccountId("gone"))
        text = export_csv((txn,), (), (), Language.EN)
        rows = list(csv.reader(io.StringIO(text[1:])))
        assert rows[1][3:5] == ["Unknown", "Unknown"]

    def test_arabic_names(self) -> None:
        state = sample_state()
        text = export_csv(state.transactions[:1], state.categories, state.accounts, Language.AR)
        rows = list(csv.reader(io.StringIO(text[1:])))
        assert rows[1][3:5] == ["طعام ومطاعم", "نقد"]

    def test_empty_ledger(self) -> None:
        assert export_csv((), (), (), Language.EN) == "\ufeffDate,Amount,Type,Category,Account,Note\n"
