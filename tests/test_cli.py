"""Tests for the command line interface."""

import json
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from wallet_accumulator.cli import main
from wallet_accumulator.data import AccumulatorSettings
from wallet_accumulator.providers import StatementProvider

runner = CliRunner()


class FakeCoinGecko:
    def __init__(self, *args, **kwargs):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def get_prices(self, ids, vs_currency):
        return {"bitcoin": Decimal("8000000")}


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("WA_DEBUG", "BITPOINT_CSV_PATH", "COINGECKO_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


def test_list_sources():
    """Test every registered source is listed."""
    result = runner.invoke(main.app, ["list-sources"])

    assert result.exit_code == 0
    for name in ("evm", "solana", "bitcoin", "cex", "statement"):
        assert name in result.output


def test_init_writes_templates(workdir):
    """Test init creates templates once and never overwrites."""
    result = runner.invoke(main.app, ["init"])

    assert result.exit_code == 0
    tokens = json.loads((workdir / "tokens.json").read_text(encoding="utf-8"))
    assert tokens["tokens"][0]["symbol"] == "BTC"
    assert (workdir / "wallets.txt").exists()
    assert (workdir / ".env").exists()

    (workdir / "wallets.txt").write_text("0xabc\n", encoding="utf-8")
    result = runner.invoke(main.app, ["init"])

    assert "already exists" in result.output
    assert (workdir / "wallets.txt").read_text(encoding="utf-8") == "0xabc\n"


def test_build_providers_order(workdir, monkeypatch):
    """Test providers are built in fixed order with the statement last."""
    monkeypatch.setattr(main.EvmProvider, "_default_clients", staticmethod(lambda debug: {}))
    statement = workdir / "bitpoint.csv"
    settings = AccumulatorSettings()

    providers = main.build_providers(settings, [], [], statement_path=statement)

    assert [provider.name for provider in providers] == ["evm", "solana", "bitcoin", "cex", "statement"]
    assert providers[-1].path == statement
    for provider in providers:
        provider.close()


def test_run_exports_csv(workdir, monkeypatch):
    """Test a full run with the statement provider writes the total CSV."""
    (workdir / "tokens.json").write_text(
        json.dumps({"tokens": [{"symbol": "BTC", "coingeckoId": "bitcoin", "chains": {"bitcoin": "native"}}]}),
        encoding="utf-8",
    )
    statement = workdir / "bitpoint.csv"
    statement.write_bytes("No,BTC,JPY\r\n1,0.5,1000\r\n".encode("shift_jis"))

    monkeypatch.setattr(main, "build_providers", lambda *args, **kwargs: [StatementProvider(statement)])
    monkeypatch.setattr(main, "CoinGeckoClient", FakeCoinGecko)

    result = runner.invoke(main.app, ["run", "-o", "out.csv"])

    assert result.exit_code == 0, result.output
    lines = (workdir / "out.csv").read_bytes().decode("shift_jis").split("\r\n")
    assert lines[1] == "BTC,,保有量,,0.5,,,8000000"


def test_run_missing_token_config(workdir):
    """Test a missing token config exits with an error."""
    result = runner.invoke(main.app, ["run", "-t", "missing.json"])

    assert result.exit_code == 1
    assert "Token config not found" in result.output


def test_run_invalid_statement_fails_before_fetch(workdir, monkeypatch):
    """Test a malformed statement aborts the run before any provider fetches."""
    (workdir / "tokens.json").write_text(json.dumps({"tokens": [{"symbol": "BTC"}]}), encoding="utf-8")
    statement = workdir / "bitpoint.csv"
    statement.write_text("Date,BTC\n1,2\n", encoding="utf-8")
    fetched = []

    class RecordingProvider(StatementProvider):
        def fetch(self, tokens):
            fetched.append(tokens)
            return super().fetch(tokens)

    monkeypatch.setattr(main, "build_providers", lambda *args, **kwargs: [RecordingProvider(statement)])
    monkeypatch.setattr(main, "CoinGeckoClient", FakeCoinGecko)

    result = runner.invoke(main.app, ["run"])

    assert result.exit_code == 1
    assert "header row" in result.output
    assert fetched == []
