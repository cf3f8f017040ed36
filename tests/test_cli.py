"""End-to-end tests for the masarify CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from masarify.cli import app
from masarify.commands.common import console

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr(console, "width", 200)
    return tmp_path


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestTransactions:
    """Tests for add, list and status."""

    def test_add_and_list(self) -> None:
        result = invoke("add", "120", "--category", "1", "--note", "groceries")
        assert result.exit_code == 0
        assert "Transaction added" in result.output

        result = invoke("list")
        assert result.exit_code == 0
        assert "groceries" in result.output

    def test_add_unknown_category(self) -> None:
        result = invoke("add", "10", "--category", "nope")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_add_warns_when_approaching_budget(self) -> None:
        """Should print a warning once monthly spending reaches the threshold."""
        assert invoke("budget", "--monthly", "1000").exit_code == 0
        result = invoke("add", "850", "--category", "1")
        assert result.exit_code == 0
        assert "85% of your monthly budget" in result.output

    def test_status(self) -> None:
        invoke("add", "3000", "--category", "5", "--type", "income")
        result = invoke("status")
        assert result.exit_code == 0
        assert "3,000.00" in result.output


class TestReferentialRules:
    """Tests for category deletion and the currency lock."""

    def test_delete_category_in_use(self) -> None:
        invoke("add", "20", "--category", "2")
        result = invoke("category", "delete", "2")
        assert result.exit_code == 1
        assert "used by 1" in result.output

    def test_delete_unused_category(self) -> None:
        assert invoke("category", "delete", "9").exit_code == 0
        assert "Bills" not in invoke("category", "list").output

    def test_currency_locked(self) -> None:
        assert invoke("currency", "USD").exit_code == 0
        invoke("add", "20", "--category", "2")
        result = invoke("currency", "EUR")
        assert result.exit_code == 1


class TestExportImport:
    """Tests for export-json, export-csv and import."""

    def test_export_and_import(self, isolated_home: Path) -> None:
        backup = isolated_home / "backup.json"
        invoke("add", "75", "--category", "3", "--note", "taxi")
        assert invoke("export-json", "--output", str(backup)).exit_code == 0
        assert json.loads(backup.read_text(encoding="utf-8"))["transactions"][0]["note"] == "taxi"

        backup.write_text(json.dumps({"transactions": [], "categories": []}), encoding="utf-8")
        assert invoke("import", str(backup)).exit_code == 0
        assert "No transactions found" in invoke("list").output

    def test_import_invalid_leaves_data(self, isolated_home: Path) -> None:
        """Should keep current data when the backup is malformed."""
        bad = isolated_home / "bad.json"
        bad.write_text('{"foo": 1}', encoding="utf-8")
        invoke("add", "75", "--category", "3", "--note", "taxi")

        result = invoke("import", str(bad))

        assert result.exit_code == 1
        assert "taxi" in invoke("list").output

    def test_export_csv(self, isolated_home: Path) -> None:
        output = isolated_home / "out.csv"
        invoke("add", "75", "--category", "2")
        assert invoke("export-csv", "--output", str(output)).exit_code == 0
        raw = output.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        assert b"Transportation" in raw


class TestInputValidation:
    """Tests for rejecting amounts and limits that are not finite."""

    @pytest.mark.parametrize("amount", ["nan", "inf"])
    def test_add_rejects_non_finite_amount(self, amount: str) -> None:
        result = invoke("add", amount, "--category", "1")
        assert result.exit_code == 1
        assert "No transactions found" in invoke("list").output

    def test_budget_rejects_nan_limit(self) -> None:
        """Should keep the stored budget when the new limit is not a number."""
        result = invoke("budget", "--monthly", "nan")
        assert result.exit_code == 1
        assert "5,000.00" in invoke("budget").output

    def test_category_limit_rejects_infinity(self) -> None:
        assert invoke("category", "limit", "1", "inf").exit_code == 1


class TestConfiguration:
    """Tests for an unreadable config file."""

    @pytest.mark.parametrize(
        "content",
        ["[advisor\nmodel = ", '[advisor]\ntemperature = "warm"\n'],
        ids=["malformed-toml", "non-numeric-temperature"],
    )
    def test_invalid_config_exits_cleanly(self, isolated_home: Path, content: str) -> None:
        config_path = isolated_home / "config" / "masarify" / "config.toml"
        config_path.parent.mkdir(parents=True)
        config_path.write_text(content, encoding="utf-8")

        result = invoke("status")

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, (ValueError, TypeError))

    def test_init_force_replaces_invalid_config(self, isolated_home: Path) -> None:
        config_path = isolated_home / "config" / "masarify" / "config.toml"
        config_path.parent.mkdir(parents=True)
        config_path.write_text("[advisor\nmodel = ", encoding="utf-8")

        assert invoke("init", "--force").exit_code == 0
        assert invoke("status").exit_code == 0
