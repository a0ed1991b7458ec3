"""Tests for Pydantic data models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from wallet_accumulator.core.models import (
    AggregatedEntry,
    BalanceRecord,
    Report,
    SourceKind,
    TokenDefinition,
)


def test_token_definition_from_config_aliases():
    """Test TokenDefinition accepts the tokens.json field names."""
    token = TokenDefinition.model_validate(
        {
            "symbol": "SOL",
            "native": True,
            "coingeckoId": "solana",
            "chains": {"solana": "native"},
            "addresses": {"solana": "So11111111111111111111111111111111111111112"},
        }
    )

    assert token.symbol == "SOL"
    assert token.valuation_id == "solana"
    assert token.native_chains == ["solana"]
    assert token.is_native_on("solana")
    assert not token.is_native_on("ethereum")
    assert token.contract_on("solana") == "So11111111111111111111111111111111111111112"
    assert token.contract_on("ethereum") is None


def test_token_definition_field_names():
    """Test TokenDefinition also accepts its own field names."""
    token = TokenDefinition(
        symbol="USDC",
        valuation_id="usd-coin",
        decimals=6,
        contract_addresses={"ethereum": "0xa0b8...", "base": "0x8335..."},
    )

    assert token.valuation_id == "usd-coin"
    assert token.native_chains == []
    assert token.chains() == ["ethereum", "base"]


def test_token_chains_native_first():
    """Test chains() lists native chains before contract chains without duplicates."""
    token = TokenDefinition(
        symbol="ETH",
        native_chains=["ethereum", "base"],
        contract_addresses={"bsc": "0x2170...", "base": "0xdead..."},
    )

    assert token.chains() == ["ethereum", "base", "bsc"]


def test_token_definition_rejects_empty_symbol():
    """Test validation of symbol and decimals."""
    with pytest.raises(ValidationError):
        TokenDefinition(symbol="")

    with pytest.raises(ValidationError):
        TokenDefinition(symbol="BAD", decimals=-1)


def test_token_definition_rejects_chains_list():
    """Test a 'chains' value that is not a mapping is a validation error."""
    with pytest.raises(ValidationError, match="'chains' must map"):
        TokenDefinition.model_validate({"symbol": "BTC", "chains": ["bitcoin"]})


def test_balance_record_model():
    """Test BalanceRecord model."""
    record = BalanceRecord(
        symbol="BTC",
        amount=Decimal("0.5"),
        source_kind=SourceKind.WALLET,
        source_label="bc1qexample",
        chain="bitcoin",
    )

    assert record.amount == Decimal("0.5")
    assert record.source_kind == "wallet"

    with pytest.raises(ValidationError):
        BalanceRecord(symbol="BTC", amount=Decimal("-1"), source_kind=SourceKind.WALLET, source_label="x")


def test_report_helpers():
    """Test Report lookups and total value."""
    report = Report(
        entries=[
            AggregatedEntry(symbol="BTC", total_amount=Decimal("1"), price=Decimal("100"), value=Decimal("100")),
            AggregatedEntry(symbol="ETH", total_amount=Decimal("2"), price=Decimal("10"), value=Decimal("20")),
        ]
    )

    assert report.symbols() == ["BTC", "ETH"]
    assert report.get("ETH").total_amount == Decimal("2")
    assert report.get("DOGE") is None
    assert report.total_value() == Decimal("120")
    assert report.valuation_currency == "JPY"


def test_empty_report():
    """Test empty Report."""
    report = Report()

    assert report.entries == []
    assert report.total_value() == Decimal("0")
