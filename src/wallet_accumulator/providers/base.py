"""Base balance provider class with common functionality."""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import ClassVar

from wallet_accumulator.core.models import BalanceRecord, SourceKind, TokenDefinition

logger = logging.getLogger(__name__)


def to_human_amount(raw_amount: int, decimals: int) -> Decimal:
    """
    Convert an integer amount in the smallest unit to a human-readable Decimal.

    Parameters
    ----------
    raw_amount : int
        Amount in base units (wei, lamports, satoshis)
    decimals : int
        Number of decimal places

    Returns
    -------
    Decimal
        Exact scaled amount (built from digits, so no context rounding applies)

    """
    raw = int(raw_amount)
    digits = tuple(int(digit) for digit in str(abs(raw)))
    return Decimal((1 if raw < 0 else 0, digits, -decimals))


class BaseBalanceProvider(ABC):
    """
    Abstract base class for balance providers.

    A provider fetches balances from exactly one class of source and normalizes
    them into BalanceRecord objects. ``fetch`` must not raise because one
    wallet, account, or call failed: such failures are logged and the provider
    continues with the remaining units.

    Attributes
    ----------
    name : str
        Unique provider identifier (must be set in subclass)
    description : str
        Human-readable description of the source class
    source_kind : SourceKind
        Kind stamped on every record this provider emits

    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    source_kind: ClassVar[SourceKind] = SourceKind.WALLET

    def __init__(self, wallet_addresses: list[str] | None = None, *, debug: bool = False) -> None:
        """
        Initialize the provider.

        Parameters
        ----------
        wallet_addresses : list[str] | None
            Full configured wallet list; each provider selects its own addresses
        debug : bool
            Enable debug output

        """
        if not self.name:
            msg = f"{self.__class__.__name__} must define 'name' attribute"
            raise ValueError(msg)
        self.wallet_addresses = list(wallet_addresses or [])
        self.debug = debug

    @classmethod
    def accepts_address(cls, address: str) -> bool:
        """
        Check if a wallet address belongs to this provider's chain family.

        Default implementation accepts nothing (account-based providers).

        Parameters
        ----------
        address : str
            Wallet address string

        Returns
        -------
        bool
            True if this provider should query the address

        """
        return False

    def select_wallets(self) -> list[str]:
        """Return the configured wallet addresses this provider should query."""
        wallets = [address for address in self.wallet_addresses if self.accepts_address(address)]
        if self.debug:
            logger.debug("%s: selected %d of %d wallet addresses", self.name, len(wallets), len(self.wallet_addresses))
        return wallets

    def validate(self) -> None:
        """
        Check provider configuration before any fetch begins.

        Raises
        ------
        ProviderConfigError
            If the provider cannot run at all

        """

    @abstractmethod
    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Fetch balance records for the configured token definitions.

        Must be implemented by subclasses.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        list[BalanceRecord]
            Records in emission order

        """
        ...

    def _record(self, symbol: str, amount: Decimal, source_label: str, chain: str | None) -> BalanceRecord:
        return BalanceRecord(
            symbol=symbol,
            amount=amount,
            source_kind=self.source_kind,
            source_label=source_label,
            chain=chain,
        )

    def close(self) -> None:
        """Release network resources held by the provider."""
