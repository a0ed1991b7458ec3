"""Tests for data loading and configuration."""

import json
from pathlib import Path

import pytest

from wallet_accumulator.data import (
    DEFAULT_TOKENS,
    load_exchange_credentials,
    load_settings,
    load_token_config,
    load_wallets,
    parse_token_config,
)
from wallet_accumulator.errors import ConfigError


def test_default_tokens_are_valid():
    """Test the init template parses into token definitions."""
    tokens = parse_token_config({"tokens": DEFAULT_TOKENS})

    symbols = [token.symbol for token in tokens]
    assert symbols == ["BTC", "ETH", "SOL", "USDT", "USDC", "JPY"]
    assert tokens[0].is_native_on("bitcoin")
    assert tokens[3].contract_on("ethereum") == "0xdac17f958d2ee523a2206206994597c13d831ec7"


def test_load_token_config_json(tmp_path):
    """Test loading tokens.json."""
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps({"tokens": [{"symbol": "ETH", "coingeckoId": "ethereum", "chains": {"ethereum": "native"}}]}),
        encoding="utf-8",
    )

    tokens = load_token_config(path)

    assert len(tokens) == 1
    assert tokens[0].valuation_id == "ethereum"
    assert tokens[0].native_chains == ["ethereum"]


def test_load_token_config_yaml_list(tmp_path):
    """Test loading a YAML file holding a bare list."""
    path = tmp_path / "tokens.yaml"
    path.write_text(
        "- symbol: USDC\n  valuation_id: usd-coin\n  decimals: 6\n  contract_addresses:\n    base: '0x8335'\n",
        encoding="utf-8",
    )

    tokens = load_token_config(path)

    assert tokens[0].symbol == "USDC"
    assert tokens[0].contract_on("base") == "0x8335"


def test_load_token_config_missing_file(tmp_path):
    """Test that a missing token config is fatal."""
    with pytest.raises(ConfigError, match="not found"):
        load_token_config(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "data",
    [
        {"tokens": "BTC"},
        {"other": []},
        {"tokens": [{"symbol": ""}]},
        {"tokens": [{"symbol": "BTC"}, {"symbol": "BTC"}]},
        {"tokens": [{"symbol": "BTC", "chains": ["bitcoin"]}]},
    ],
)
def test_parse_token_config_rejects_invalid(data):
    """Test structural errors, invalid entries, and duplicate symbols."""
    with pytest.raises(ConfigError):
        parse_token_config(data)


def test_load_wallets(tmp_path):
    """Test wallet list parsing skips blanks and comments."""
    path = tmp_path / "wallets.txt"
    path.write_text(
        "# comment\n\n  0x1111111111111111111111111111111111111111  \nbc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq\n",
        encoding="utf-8",
    )

    assert load_wallets(path) == [
        "0x1111111111111111111111111111111111111111",
        "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq",
    ]


def test_load_wallets_missing_file(tmp_path):
    """Test a missing wallet file means no wallets."""
    assert load_wallets(tmp_path / "wallets.txt") == []


def test_load_settings_defaults():
    """Test settings built from an empty environment."""
    settings = load_settings({})

    assert settings.valuation_currency == "JPY"
    assert settings.solana_rpc_url == "https://api.mainnet-beta.solana.com"
    assert settings.bitcoin_api_url == "https://mempool.space/api"
    assert settings.coingecko_api_key is None
    assert settings.statement_path is None
    assert settings.debug is False


def test_load_settings_from_env():
    """Test environment keys override defaults."""
    settings = load_settings(
        {
            "WA_DEBUG": "true",
            "SOLANA_RPC_URL": "https://solana.example",
            "COINGECKO_API_KEY": "demo",
            "BITPOINT_CSV_PATH": "statement.csv",
            "BITCOIN_API_URL": "",
        }
    )

    assert settings.debug is True
    assert settings.solana_rpc_url == "https://solana.example"
    assert settings.coingecko_api_key == "demo"
    assert settings.statement_path == Path("statement.csv")
    assert settings.bitcoin_api_url == "https://mempool.space/api"
    assert "demo" not in repr(settings)


def test_load_exchange_credentials():
    """Test only exchanges with both key and secret are enabled."""
    env = {
        "BITFLYER_API_KEY": "key1",
        "BITFLYER_API_SECRET": "secret1",
        "BINANCE_API_KEY": "key2",
        "BYBIT_API_SECRET": "secret3",
    }

    credentials = load_exchange_credentials(env)

    assert [cred.exchange_id for cred in credentials] == ["bitflyer"]
    assert credentials[0].api_key == "key1"
    assert "secret1" not in repr(credentials[0])
