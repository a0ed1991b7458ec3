"""Configuration loading: token definitions, wallets, credentials, and settings."""

from wallet_accumulator.data.loader import (
    DEFAULT_TOKENS,
    load_token_config,
    load_wallets,
    parse_token_config,
)
from wallet_accumulator.data.settings import (
    SUPPORTED_EXCHANGES,
    AccumulatorSettings,
    ExchangeCredentials,
    load_exchange_credentials,
    load_settings,
)

__all__ = [
    "DEFAULT_TOKENS",
    "SUPPORTED_EXCHANGES",
    "AccumulatorSettings",
    "ExchangeCredentials",
    "load_exchange_credentials",
    "load_settings",
    "load_token_config",
    "load_wallets",
    "parse_token_config",
]
