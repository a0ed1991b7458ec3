"""Tests for the balance aggregator."""

import threading
from decimal import Decimal

import pytest

from wallet_accumulator.core import BalanceAggregator, BalanceRecord, SourceKind, TokenDefinition


class FakeProvider:
    """Provider returning canned records."""

    def __init__(self, name, records, started=None):
        self.name = name
        self.records = records
        self.started = started
        self.calls = []

    def fetch(self, tokens):
        self.calls.append(list(tokens))
        if self.started is not None:
            self.started.wait(timeout=5)
        return list(self.records)


class FailingProvider:
    name = "broken"

    def fetch(self, tokens):
        raise RuntimeError("provider crashed")


class FakeResolver:
    """Resolver returning a fixed price table."""

    def __init__(self, prices):
        self.prices = prices
        self.calls = 0

    def resolve(self, tokens):
        self.calls += 1
        return dict(self.prices)


def _record(symbol, amount, label="0xabc", chain="ethereum", kind=SourceKind.WALLET):
    return BalanceRecord(symbol=symbol, amount=Decimal(amount), source_kind=kind, source_label=label, chain=chain)


@pytest.fixture
def tokens():
    return [
        TokenDefinition(symbol="BTC", valuation_id="bitcoin", native_chains=["bitcoin"]),
        TokenDefinition(symbol="ETH", valuation_id="ethereum", native_chains=["ethereum"]),
    ]


def test_ranks_by_value(tokens):
    """Test a BTC wallet outranks a small ETH exchange balance."""
    wallet = FakeProvider("bitcoin", [_record("BTC", "0.5", "bc1qx", "bitcoin")])
    exchange = FakeProvider("cex", [_record("ETH", "2", "bitFlyer", "cex", SourceKind.EXCHANGE)])
    resolver = FakeResolver({"JPY": Decimal("1"), "BTC": Decimal("8000000"), "ETH": Decimal("400000")})

    report = BalanceAggregator(tokens, [wallet, exchange], resolver).aggregate()

    assert report.symbols() == ["BTC", "ETH"]
    btc = report.get("BTC")
    assert btc.total_amount == Decimal("0.5")
    assert btc.value == Decimal("4000000")
    assert report.get("ETH").value == Decimal("800000")
    assert resolver.calls == 1


def test_sums_are_exact_and_details_keep_order(tokens):
    """Test decimal sums across sources keep emission order in details."""
    first = FakeProvider("evm", [_record("ETH", "0.1", "0xaaa"), _record("ETH", "0.2", "0xbbb", "base")])
    second = FakeProvider("cex", [_record("ETH", "0.3", "Binance", "cex", SourceKind.EXCHANGE)])

    report = BalanceAggregator(tokens, [first, second], FakeResolver({"ETH": Decimal("10")})).aggregate()

    eth = report.get("ETH")
    assert eth.total_amount == Decimal("0.6")
    assert [record.source_label for record in eth.details] == ["0xaaa", "0xbbb", "Binance"]
    assert eth.value == Decimal("6.0")


def test_sum_keeps_digits_beyond_default_precision():
    """Test a huge balance and a dust balance add up without rounding."""
    tokens = [TokenDefinition(symbol="PEPE")]
    provider = FakeProvider("evm", [_record("PEPE", "1E+10", "0xaaa"), _record("PEPE", "1E-18", "0xbbb")])

    report = BalanceAggregator(tokens, [provider], FakeResolver({"PEPE": Decimal("0.003")})).aggregate()

    pepe = report.get("PEPE")
    assert pepe.total_amount == Decimal("10000000000.000000000000000001")
    assert pepe.value == Decimal("30000000.000000000000000000003")
    assert report.total_value() == Decimal("30000000.000000000000000000003")


def test_configured_symbol_kept_at_zero(tokens):
    """Test a configured symbol with no holdings is reported at zero."""
    provider = FakeProvider("evm", [_record("ETH", "1")])

    report = BalanceAggregator(tokens, [provider], FakeResolver({"ETH": Decimal("5"), "BTC": Decimal("9")})).aggregate()

    btc = report.get("BTC")
    assert btc is not None
    assert btc.total_amount == Decimal("0")
    assert btc.details == []
    assert btc.value == Decimal("0")
    assert report.symbols() == ["ETH", "BTC"]


def test_unconfigured_symbols(tokens):
    """Test unconfigured symbols appear only with a positive total."""
    provider = FakeProvider(
        "statement",
        [
            _record("XRP", "0", "BITPOINT", "cex", SourceKind.EXCHANGE),
            _record("DOGE", "100", "BITPOINT", "cex", SourceKind.EXCHANGE),
        ],
    )

    report = BalanceAggregator(tokens, [provider], FakeResolver({})).aggregate()

    assert report.get("XRP") is None
    doge = report.get("DOGE")
    assert doge.total_amount == Decimal("100")
    assert doge.price == Decimal("0")
    assert doge.value == Decimal("0")


def test_valuation_currency_excluded(tokens):
    """Test cash balances in the valuation currency never become entries."""
    tokens = [*tokens, TokenDefinition(symbol="JPY")]
    provider = FakeProvider("cex", [_record("JPY", "50000", "bitFlyer", "cex", SourceKind.EXCHANGE)])

    report = BalanceAggregator(tokens, [provider], FakeResolver({"JPY": Decimal("1")})).aggregate()

    assert "JPY" not in report.symbols()
    assert report.valuation_currency == "JPY"


def test_equal_values_keep_discovery_order():
    """Test ties keep configured order, then observed order."""
    tokens = [TokenDefinition(symbol="B"), TokenDefinition(symbol="A")]
    provider = FakeProvider("evm", [_record("Z", "1"), _record("A", "1"), _record("Y", "1")])

    report = BalanceAggregator(tokens, [provider], FakeResolver({})).aggregate()

    assert report.symbols() == ["B", "A", "Z", "Y"]


def test_no_providers(tokens):
    """Test an empty provider list yields configured symbols at zero."""
    report = BalanceAggregator(tokens, [], FakeResolver({})).aggregate()

    assert report.symbols() == ["BTC", "ETH"]
    assert all(entry.total_amount == 0 for entry in report.entries)
    assert report.total_value() == Decimal("0")


def test_all_prices_zero(tokens):
    """Test a price table with nothing priced keeps amounts and values at zero."""
    provider = FakeProvider("evm", [_record("ETH", "3"), _record("BTC", "1", "bc1q", "bitcoin")])

    report = BalanceAggregator(tokens, [provider], FakeResolver({"JPY": Decimal("1")})).aggregate()

    assert report.get("ETH").total_amount == Decimal("3")
    assert report.get("ETH").value == Decimal("0")
    assert report.get("BTC").value == Decimal("0")


def test_every_provider_gets_full_token_set(tokens):
    """Test providers receive the complete token list."""
    first = FakeProvider("a", [])
    second = FakeProvider("b", [])

    BalanceAggregator(tokens, [first, second], FakeResolver({})).aggregate()

    assert first.calls == [tokens]
    assert second.calls == [tokens]


def test_fetch_all_concurrent_keeps_declared_order():
    """Test providers run concurrently but records follow declared order."""
    started = threading.Event()
    slow = FakeProvider("slow", [_record("ETH", "1", "slow")], started=started)

    class Releaser(FakeProvider):
        def fetch(self, tokens):
            started.set()
            return super().fetch(tokens)

    fast = Releaser("fast", [_record("ETH", "2", "fast")])

    records = BalanceAggregator([], [slow, fast], FakeResolver({}), max_workers=2).fetch_all()

    assert [record.source_label for record in records] == ["slow", "fast"]


def test_provider_failure_propagates(tokens):
    """Test an uncaught provider error aborts aggregation."""
    with pytest.raises(RuntimeError, match="provider crashed"):
        BalanceAggregator(tokens, [FailingProvider()], FakeResolver({})).aggregate()
