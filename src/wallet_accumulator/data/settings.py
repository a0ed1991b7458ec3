"""Runtime settings and exchange credentials, built once from an environment mapping."""

from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wallet_accumulator.core.models import DEFAULT_VALUATION_CURRENCY
from wallet_accumulator.errors import ConfigError
from wallet_accumulator.pricing.coingecko import DEFAULT_COINGECKO_API_URL
from wallet_accumulator.rpc.bitcoin import DEFAULT_BITCOIN_API_URL
from wallet_accumulator.rpc.solana import DEFAULT_SOLANA_RPC_URL

SUPPORTED_EXCHANGES = ("bitflyer", "coincheck", "bitbank", "binance", "bybit")

TRUTHY = {"1", "true", "yes", "on"}


class ExchangeCredentials(BaseModel):
    """
    API credentials for one exchange account.

    Attributes
    ----------
    exchange_id : str
        ccxt exchange id (e.g. 'bitflyer')
    api_key : str
        API key
    secret : str
        API secret (hidden from repr)

    """

    model_config = ConfigDict(frozen=True)

    exchange_id: str
    api_key: str = Field(repr=False)
    secret: str = Field(repr=False)


class AccumulatorSettings(BaseModel):
    """
    Settings for one accumulation run.

    Attributes
    ----------
    valuation_currency : str
        Currency every value is expressed in
    solana_rpc_url : str
        Solana JSON-RPC endpoint
    bitcoin_api_url : str
        Esplora-style Bitcoin explorer base URL
    coingecko_api_url : str
        CoinGecko API base URL
    coingecko_api_key : str | None
        Optional CoinGecko demo API key
    statement_path : Path | None
        Offline statement CSV, if any
    debug : bool
        Enable debug diagnostics in every component

    """

    valuation_currency: str = DEFAULT_VALUATION_CURRENCY
    solana_rpc_url: str = DEFAULT_SOLANA_RPC_URL
    bitcoin_api_url: str = DEFAULT_BITCOIN_API_URL
    coingecko_api_url: str = DEFAULT_COINGECKO_API_URL
    coingecko_api_key: str | None = Field(default=None, repr=False)
    statement_path: Path | None = None
    debug: bool = False


def load_settings(env: Mapping[str, str]) -> AccumulatorSettings:
    """
    Build settings from an environment mapping.

    Recognised keys: ``WA_DEBUG``, ``WA_VALUATION_CURRENCY``, ``SOLANA_RPC_URL``,
    ``BITCOIN_API_URL``, ``COINGECKO_API_URL``, ``COINGECKO_API_KEY`` and
    ``BITPOINT_CSV_PATH``. Empty values are treated as unset.

    Raises
    ------
    ConfigError
        If a value fails validation

    """
    mapping = {
        "valuation_currency": "WA_VALUATION_CURRENCY",
        "solana_rpc_url": "SOLANA_RPC_URL",
        "bitcoin_api_url": "BITCOIN_API_URL",
        "coingecko_api_url": "COINGECKO_API_URL",
        "coingecko_api_key": "COINGECKO_API_KEY",
        "statement_path": "BITPOINT_CSV_PATH",
    }
    values: dict[str, object] = {field: env[key] for field, key in mapping.items() if env.get(key)}
    values["debug"] = env.get("WA_DEBUG", "").strip().lower() in TRUTHY

    try:
        return AccumulatorSettings(**values)
    except ValidationError as e:
        msg = f"Invalid settings: {e}"
        raise ConfigError(msg) from e


def load_exchange_credentials(
    env: Mapping[str, str],
    exchange_ids: Iterable[str] = SUPPORTED_EXCHANGES,
) -> list[ExchangeCredentials]:
    """
    Collect credential pairs for the given exchanges.

    An exchange is enabled only when both ``<ID>_API_KEY`` and
    ``<ID>_API_SECRET`` are set; otherwise it is silently skipped.

    Parameters
    ----------
    env : Mapping[str, str]
        Environment mapping (e.g. os.environ after loading .env)
    exchange_ids : Iterable[str]
        ccxt exchange ids to look up

    Returns
    -------
    list[ExchangeCredentials]
        Credentials in the order of ``exchange_ids``

    """
    credentials = []
    for exchange_id in exchange_ids:
        prefix = exchange_id.upper()
        api_key = env.get(f"{prefix}_API_KEY")
        secret = env.get(f"{prefix}_API_SECRET")
        if api_key and secret:
            credentials.append(ExchangeCredentials(exchange_id=exchange_id, api_key=api_key, secret=secret))
    return credentials
