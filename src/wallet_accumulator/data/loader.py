"""Token configuration and wallet list loader."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from wallet_accumulator.core.models import TokenDefinition
from wallet_accumulator.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TOKENS: list[dict[str, Any]] = [
    {"symbol": "BTC", "native": True, "coingeckoId": "bitcoin", "chains": {"bitcoin": "native"}},
    {"symbol": "ETH", "native": True, "coingeckoId": "ethereum", "chains": {"ethereum": "native"}},
    {
        "symbol": "SOL",
        "native": True,
        "coingeckoId": "solana",
        "chains": {"solana": "native"},
        "addresses": {"solana": "So11111111111111111111111111111111111111112"},
    },
    {
        "symbol": "USDT",
        "coingeckoId": "tether",
        "decimals": 6,
        "addresses": {
            "ethereum": "0xdac17f958d2ee523a2206206994597c13d831ec7",
            "solana": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
        },
    },
    {
        "symbol": "USDC",
        "coingeckoId": "usd-coin",
        "decimals": 6,
        "addresses": {
            "ethereum": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            "solana": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        },
    },
    {"symbol": "JPY", "coingeckoId": "jpy-coin"},
]


def parse_token_config(data: Any) -> list[TokenDefinition]:
    """
    Validate raw token configuration data.

    Parameters
    ----------
    data : Any
        Parsed document: either ``{"tokens": [...]}`` or a bare list

    Returns
    -------
    list[TokenDefinition]
        Token definitions in configured order

    Raises
    ------
    ConfigError
        If the structure is wrong, a definition is invalid, or a symbol repeats

    """
    entries = data.get("tokens") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        msg = "Token config must contain a 'tokens' list"
        raise ConfigError(msg)

    tokens = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            token = TokenDefinition.model_validate(entry)
        except ValidationError as e:
            msg = f"Invalid token definition at index {index}: {e}"
            raise ConfigError(msg) from e
        if token.symbol in seen:
            msg = f"Duplicate token symbol: {token.symbol}"
            raise ConfigError(msg)
        seen.add(token.symbol)
        tokens.append(token)
    return tokens


def load_token_config(path: str | Path) -> list[TokenDefinition]:
    """
    Load token definitions from a JSON or YAML file.

    Parameters
    ----------
    path : str | Path
        Path to tokens.json / tokens.yaml

    Returns
    -------
    list[TokenDefinition]
        Token definitions in configured order

    Raises
    ------
    ConfigError
        If the file is missing or cannot be parsed

    """
    path = Path(path)
    if not path.is_file():
        msg = f"Token config not found: {path}"
        raise ConfigError(msg)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Token config is not valid JSON/YAML: {path}: {e}"
        raise ConfigError(msg) from e

    return parse_token_config(data)


def load_wallets(path: str | Path) -> list[str]:
    """
    Load wallet addresses, one per line, skipping blanks and ``#`` comments.

    A missing file is not an error: the run continues with exchanges only.

    Parameters
    ----------
    path : str | Path
        Path to wallets.txt

    Returns
    -------
    list[str]
        Wallet addresses in file order

    """
    path = Path(path)
    if not path.is_file():
        logger.warning("Wallet file not found: %s. Running with exchanges only.", path)
        return []

    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    return [line for line in lines if line and not line.startswith("#")]
