"""Data models for token definitions, balance records, and aggregated reports."""

from decimal import MAX_PREC, Decimal, localcontext
from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_VALUATION_CURRENCY = "JPY"

# symbol -> price in the valuation currency. 0 means "requested but could not price".
PriceTable = dict[str, Decimal]


def exact_arithmetic():
    """
    Decimal context in which sums and products of amounts are never rounded.

    The default context keeps 28 significant digits, which an 18-decimal token
    balance above 10^10 already exceeds.

    Examples
    --------
    >>> with exact_arithmetic():
    ...     Decimal("1E+10") + Decimal("1E-18")
    Decimal('10000000000.000000000000000001')

    """
    return localcontext(prec=MAX_PREC)


class SourceKind(StrEnum):
    """Kind of place a balance was observed."""

    WALLET = "wallet"
    EXCHANGE = "exchange"


class TokenDefinition(BaseModel):
    """
    Configuration for one tracked asset symbol.

    Attributes
    ----------
    symbol : str
        Case-sensitive identifier, the only join key between providers, prices and config
    valuation_id : str | None
        Identifier used to look up a price (e.g. a CoinGecko id). None means "do not price"
    decimals : int | None
        Fallback decimals for contract tokens when the contract cannot be queried
    native_chains : list[str]
        Chains where this symbol is the chain's native asset
    contract_addresses : dict[str, str]
        Mapping of chain to contract or mint address for non-native tokens

    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    symbol: str = Field(min_length=1)
    valuation_id: str | None = Field(default=None, validation_alias=AliasChoices("valuation_id", "coingeckoId"))
    decimals: int | None = Field(default=None, ge=0)
    native_chains: list[str] = Field(default_factory=list)
    contract_addresses: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("contract_addresses", "addresses"),
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_chains_mapping(cls, data: object) -> object:
        # tokens.json describes native chains as {"chains": {"ethereum": "native"}}
        if isinstance(data, dict) and "chains" in data and "native_chains" not in data:
            data = dict(data)
            chains = data.pop("chains") or {}
            if not isinstance(chains, dict):
                msg = f"'chains' must map chain names to 'native', got {type(chains).__name__}"
                raise ValueError(msg)
            data["native_chains"] = [chain for chain, kind in chains.items() if kind == "native"]
            data.pop("native", None)
        elif isinstance(data, dict):
            data = {k: v for k, v in data.items() if k != "native"}
        return data

    def is_native_on(self, chain: str) -> bool:
        """Return True if this symbol is the native asset of ``chain``."""
        return chain in self.native_chains

    def contract_on(self, chain: str) -> str | None:
        """Return the contract or mint address on ``chain``, if configured."""
        return self.contract_addresses.get(chain)

    def chains(self) -> list[str]:
        """Chains where this token can be held, native chains first."""
        result = list(self.native_chains)
        for chain in self.contract_addresses:
            if chain not in result:
                result.append(chain)
        return result


class BalanceRecord(BaseModel):
    """
    One observation of a holding, created by a provider during a single fetch.

    Attributes
    ----------
    symbol : str
        Token symbol
    amount : Decimal
        Human-readable amount (non-negative)
    source_kind : SourceKind
        Wallet or exchange
    source_label : str
        Wallet address or exchange name
    chain : str | None
        Network tag (e.g. 'ethereum', 'solana', 'cex')

    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    amount: Decimal = Field(ge=0)
    source_kind: SourceKind
    source_label: str
    chain: str | None = None


class AggregatedEntry(BaseModel):
    """
    Per-symbol aggregation result.

    Attributes
    ----------
    symbol : str
        Token symbol
    total_amount : Decimal
        Exact sum of all contributing record amounts
    details : list[BalanceRecord]
        Contributing records in provider emission order
    price : Decimal
        Price in the valuation currency (0 if unpriced)
    value : Decimal
        total_amount * price

    """

    symbol: str
    total_amount: Decimal
    details: list[BalanceRecord] = Field(default_factory=list)
    price: Decimal = Decimal("0")
    value: Decimal = Decimal("0")


class Report(BaseModel):
    """Aggregated entries ranked by value, highest first."""

    entries: list[AggregatedEntry] = Field(default_factory=list)
    valuation_currency: str = DEFAULT_VALUATION_CURRENCY

    @field_validator("valuation_currency")
    @classmethod
    def _non_empty_currency(cls, value: str) -> str:
        if not value:
            msg = "valuation_currency must not be empty"
            raise ValueError(msg)
        return value

    def symbols(self) -> list[str]:
        """Symbols in report order."""
        return [entry.symbol for entry in self.entries]

    def get(self, symbol: str) -> AggregatedEntry | None:
        """Return the entry for ``symbol``, if present."""
        for entry in self.entries:
            if entry.symbol == symbol:
                return entry
        return None

    def total_value(self) -> Decimal:
        """Sum of all entry values."""
        with exact_arithmetic():
            return sum((entry.value for entry in self.entries), Decimal("0"))
