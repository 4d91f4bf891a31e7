"""End-to-end tests for the click CLI against a temporary data directory."""

import json

import pytest
from click.testing import CliRunner

from stockroom.infrastructure import bootstrap
from stockroom.infrastructure.cli.main import cli
from tests.fakes import VALID_CPF


def _clear_caches():
    bootstrap.settings.cache_clear()
    bootstrap._store.cache_clear()
    bootstrap.event_publisher.cache_clear()


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("STOCKROOM_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STOCKROOM_LOG_LEVEL", "WARNING")
    for name in ("STOCKROOM_EVENTS_FILE", "STOCKROOM_LOCK_TIMEOUT", "STOCKROOM_ACTOR"):
        monkeypatch.delenv(name, raising=False)
    _clear_caches()
    yield CliRunner()
    bootstrap.shutdown()
    _clear_caches()


def _ok(runner, *args):
    result = runner.invoke(cli, list(args))
    assert result.exit_code == 0, result.output
    return result.output


@pytest.fixture
def stocked(runner):
    _ok(runner, "product", "add", "--name", "Running Shoe", "--price", "199.90")
    _ok(runner, "product", "add", "--name", "Football", "--price", "89.50")
    _ok(runner, "stock", "receive", "--product", "1", "--quantity", "10", "--invoice", "NF-100")
    return runner


class TestProductCommands:

    def test_add(self, runner):
        output = _ok(runner, "product", "add", "--name", "Running Shoe", "--price", "199.90")
        assert "Product #1 'Running Shoe' added at R$ 199,90" in output

    def test_add_duplicate(self, stocked):
        result = stocked.invoke(cli, ["product", "add", "--name", "football", "--price", "1"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_update(self, stocked):
        assert "price updated" in _ok(stocked, "product", "update", "--id", "2", "--price", "95")

    def test_deactivated_product_cannot_be_sold(self, stocked):
        _ok(stocked, "product", "deactivate", "--id", "1")
        result = stocked.invoke(cli, [
            "order", "fulfill", "--document", VALID_CPF, "--customer", "Alice", "--items", "1:1",
        ])
        assert result.exit_code == 1
        assert "not found or inactive" in result.output


class TestStockCommands:

    def test_receive_and_available(self, stocked):
        output = _ok(stocked, "stock", "available", "--product", "1")
        assert "Product #1: 10 available" in output

    def test_available_unknown_product(self, stocked):
        result = stocked.invoke(cli, ["stock", "available", "--product", "9"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_receive_zero_rejected(self, stocked):
        result = stocked.invoke(cli, ["stock", "receive", "--product", "1", "--quantity", "0"])
        assert result.exit_code == 1
        assert "must be positive" in result.output

    def test_history(self, stocked):
        _ok(stocked, "order", "fulfill", "--document", VALID_CPF,
            "--customer", "Alice", "--items", "1:2")
        output = _ok(stocked, "stock", "history", "--product", "1")
        lines = output.splitlines()
        assert "OUTBOUND" in lines[2] and "ORDER-1" in lines[2]
        assert "INBOUND" in lines[3] and "NF-100" in lines[3]

    def test_empty_history(self, runner):
        assert "No stock movements found." in _ok(runner, "stock", "history")

    def test_history_reports_corrupt_ledger(self, stocked, tmp_path):
        (tmp_path / "stock_movements.json").write_text('[{"id": "x"}]', encoding="utf-8")
        result = stocked.invoke(cli, ["stock", "history"])
        assert result.exit_code == 1
        assert "Corrupt data" in result.output


class TestOrderCommands:

    def test_fulfill(self, stocked):
        output = _ok(stocked, "--actor", "maria", "order", "fulfill",
                     "--document", VALID_CPF, "--customer", "Alice", "--items", "1:4")
        assert "Order #1  (status=FINALIZED)" in output
        assert "***.***.***-25" in output
        assert "Seller:   maria" in output
        assert "R$ 799,60" in output
        assert "6 available" in _ok(stocked, "stock", "available", "--product", "1")

    def test_actor_from_environment(self, stocked, monkeypatch):
        monkeypatch.setenv("STOCKROOM_ACTOR", "joao")
        output = _ok(stocked, "order", "fulfill", "--document", VALID_CPF,
                     "--customer", "Alice", "--items", "1:1")
        assert "Seller:   joao" in output

    def test_insufficient_stock(self, stocked):
        result = stocked.invoke(cli, [
            "order", "fulfill", "--document", VALID_CPF, "--customer", "Alice",
            "--items", "1:3,2:1",
        ])
        assert result.exit_code == 1
        assert "Insufficient stock for product '2' (available 0, requested 1)" in result.output
        assert "10 available" in _ok(stocked, "stock", "available", "--product", "1")
        assert "No orders found." in _ok(stocked, "order", "list")

    def test_invalid_document(self, stocked):
        result = stocked.invoke(cli, [
            "order", "fulfill", "--document", "123.456.789-00", "--customer", "Alice",
            "--items", "1:1",
        ])
        assert result.exit_code == 1
        assert "Invalid CPF" in result.output

    @pytest.mark.parametrize("items", ["1-4", "1:x"])
    def test_malformed_items(self, stocked, items):
        result = stocked.invoke(cli, [
            "order", "fulfill", "--document", VALID_CPF, "--customer", "Alice",
            "--items", items,
        ])
        assert result.exit_code == 2
        assert "Invalid" in result.output

    def test_show_and_list(self, stocked):
        _ok(stocked, "order", "fulfill", "--document", VALID_CPF,
            "--customer", "Alice", "--items", "1:1")
        assert "Running Shoe" in _ok(stocked, "order", "show", "--id", "1")
        listing = _ok(stocked, "order", "list")
        assert "Alice" in listing and "R$ 199,90" in listing

    def test_show_missing(self, stocked):
        result = stocked.invoke(cli, ["order", "show", "--id", "42"])
        assert result.exit_code == 1
        assert "Order #42 not found" in result.output

    def test_list_reports_corrupt_orders(self, stocked, tmp_path):
        (tmp_path / "orders.json").write_text('[{"id": "x"}]', encoding="utf-8")
        result = stocked.invoke(cli, ["order", "list"])
        assert result.exit_code == 1
        assert "Corrupt data" in result.output

    def test_events_written_to_outbox(self, stocked, tmp_path):
        _ok(stocked, "order", "fulfill", "--document", VALID_CPF,
            "--customer", "Alice", "--items", "1:2")
        events = [
            json.loads(line)
            for line in (tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()
        ]
        assert [e["event"] for e in events] == ["stock.received", "orders.fulfilled"]
        assert events[1]["data"]["total"] == "399.80"


class TestConfiguration:

    def test_invalid_settings_reported(self, runner, monkeypatch):
        monkeypatch.setenv("STOCKROOM_LOCK_TIMEOUT", "later")
        result = runner.invoke(cli, ["order", "list"])
        assert result.exit_code == 1
        assert "STOCKROOM_LOCK_TIMEOUT must be a number" in result.output
