"""Bitcoin wallet balances through an Esplora-style explorer."""

import logging
from typing import Protocol

from wallet_accumulator.core.models import BalanceRecord, TokenDefinition
from wallet_accumulator.core.registry import ProviderRegistry
from wallet_accumulator.providers.addresses import is_bitcoin_address
from wallet_accumulator.providers.base import BaseBalanceProvider, to_human_amount
from wallet_accumulator.rpc.bitcoin import DEFAULT_BITCOIN_API_URL, MempoolClient
from wallet_accumulator.rpc.pacing import RequestPacer

logger = logging.getLogger(__name__)

BITCOIN_CHAIN = "bitcoin"
SATOSHI_DECIMALS = 8
PACING_INTERVAL = 0.2


class BitcoinClient(Protocol):
    """Explorer call used by the provider."""

    def get_confirmed_balance(self, address: str) -> int: ...


@ProviderRegistry.register
class BitcoinProvider(BaseBalanceProvider):
    """
    Fetches confirmed BTC balances for Bitcoin wallets.

    Parameters
    ----------
    wallet_addresses : list[str]
        Full configured wallet list
    client : BitcoinClient | None
        Explorer client. Defaults to MempoolClient on ``api_url``.
    api_url : str
        Explorer base URL used when no client is given
    pacer : RequestPacer | None
        Pacing between wallets (0.2s by default)
    debug : bool
        Enable debug output

    """

    name = "bitcoin"
    description = "Bitcoin wallets (confirmed balance via mempool.space)"

    def __init__(
        self,
        wallet_addresses: list[str] | None = None,
        client: BitcoinClient | None = None,
        api_url: str = DEFAULT_BITCOIN_API_URL,
        pacer: RequestPacer | None = None,
        *,
        debug: bool = False,
    ) -> None:
        super().__init__(wallet_addresses, debug=debug)
        self.client = client or MempoolClient(api_url)
        self.pacer = pacer or RequestPacer(PACING_INTERVAL)

    @classmethod
    def accepts_address(cls, address: str) -> bool:
        """Bech32 ``bc1`` addresses and legacy ``1``/``3`` addresses."""
        return is_bitcoin_address(address)

    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Fetch balances for all Bitcoin wallets.

        Only runs when a configured token is native on the ``bitcoin`` chain.

        """
        wallets = self.select_wallets()
        if not wallets:
            return []

        btc_tokens = [token for token in tokens if token.is_native_on(BITCOIN_CHAIN)]
        if not btc_tokens:
            return []

        logger.info("Fetching Bitcoin balances for %d wallets...", len(wallets))
        records: list[BalanceRecord] = []

        for wallet in wallets:
            self.pacer.wait()
            try:
                satoshis = self.client.get_confirmed_balance(wallet)
            except Exception as e:
                logger.warning("Failed to fetch Bitcoin balance for %s: %s", wallet, e)
                continue

            amount = to_human_amount(satoshis, SATOSHI_DECIMALS)
            if amount > 0:
                for token in btc_tokens:
                    records.append(self._record(token.symbol, amount, wallet, BITCOIN_CHAIN))

        return records

    def close(self) -> None:
        """Close the explorer client if it supports closing."""
        close = getattr(self.client, "close", None)
        if close:
            close()
