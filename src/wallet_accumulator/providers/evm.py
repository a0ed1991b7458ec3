"""EVM wallet balances (native assets and ERC-20 tokens) across several chains."""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol

from wallet_accumulator.core.models import BalanceRecord, TokenDefinition
from wallet_accumulator.core.registry import ProviderRegistry
from wallet_accumulator.providers.addresses import is_evm_address
from wallet_accumulator.providers.base import BaseBalanceProvider, to_human_amount
from wallet_accumulator.rpc.cache import DecimalsCache
from wallet_accumulator.rpc.pacing import RequestPacer

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18
DEFAULT_TOKEN_DECIMALS = 18
PACING_INTERVAL = 0.2


class EvmClient(Protocol):
    """Per-chain client used by the EVM provider."""

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def get_native_balance(self, address: str) -> int: ...

    def call_contract(self, contract_address: str, method: str, *args: Any) -> Any: ...


@ProviderRegistry.register
class EvmProvider(BaseBalanceProvider):
    """
    Fetches native and ERC-20 balances for 0x wallets on every configured chain.

    For each chain the provider queries every (token, wallet) pair where the
    token is native on that chain or has a contract address there. Contract
    decimals come from the contract itself and fall back to the configured
    decimals only when that read fails.

    Parameters
    ----------
    wallet_addresses : list[str]
        Full configured wallet list
    clients : Mapping[str, EvmClient] | None
        Chain name to client. Defaults to one Ape client per supported chain.
    pacer : RequestPacer | None
        Pacing for balance calls (0.2s by default)
    decimals_cache : DecimalsCache | None
        Cache of contract decimals
    debug : bool
        Enable debug output

    """

    name = "evm"
    description = "EVM wallets (native + ERC-20) on Ethereum, BSC, Polygon, Astar, Base, Arbitrum, Optimism"

    def __init__(
        self,
        wallet_addresses: list[str] | None = None,
        clients: Mapping[str, EvmClient] | None = None,
        pacer: RequestPacer | None = None,
        decimals_cache: DecimalsCache | None = None,
        *,
        debug: bool = False,
    ) -> None:
        super().__init__(wallet_addresses, debug=debug)
        self.clients = dict(clients) if clients is not None else self._default_clients(debug)
        self.pacer = pacer or RequestPacer(PACING_INTERVAL)
        self.decimals_cache = decimals_cache or DecimalsCache()

    @staticmethod
    def _default_clients(debug: bool) -> dict[str, EvmClient]:
        # Ape is only loaded when real chain clients are needed
        from wallet_accumulator.rpc.evm import EVM_NETWORK_CHOICES, EvmChainClient

        return {chain: EvmChainClient(chain, debug=debug) for chain in EVM_NETWORK_CHOICES}

    @classmethod
    def accepts_address(cls, address: str) -> bool:
        """EVM wallets are 0x-prefixed 20-byte hex strings."""
        return is_evm_address(address)

    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Fetch balances for all EVM wallets.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        list[BalanceRecord]
            One record per (chain, token, wallet) with a strictly positive balance

        """
        wallets = self.select_wallets()
        if not wallets:
            return []

        logger.info("Fetching EVM balances for %d wallets...", len(wallets))
        records: list[BalanceRecord] = []

        for chain, client in self.clients.items():
            targets = [token for token in tokens if token.is_native_on(chain) or token.contract_on(chain)]
            if not targets:
                continue

            try:
                client.connect()
            except Exception as e:
                logger.warning("Skipping %s: %s", chain, e)
                continue

            try:
                records.extend(self._fetch_chain(chain, client, targets, wallets))
            finally:
                client.disconnect()

        return records

    def _fetch_chain(
        self,
        chain: str,
        client: EvmClient,
        tokens: list[TokenDefinition],
        wallets: list[str],
    ) -> list[BalanceRecord]:
        records = []
        for token in tokens:
            for wallet in wallets:
                self.pacer.wait()
                try:
                    amount = self._fetch_amount(chain, client, token, wallet)
                except Exception as e:
                    logger.warning("Failed to fetch %s on %s for %s: %s", token.symbol, chain, wallet, e)
                    continue

                if amount > 0:
                    records.append(self._record(token.symbol, amount, wallet, chain))
        return records

    def _fetch_amount(self, chain: str, client: EvmClient, token: TokenDefinition, wallet: str) -> Decimal:
        if token.is_native_on(chain):
            raw = client.get_native_balance(wallet)
            return to_human_amount(raw, NATIVE_DECIMALS)

        contract = token.contract_on(chain)
        raw = client.call_contract(contract, "balanceOf", wallet)
        decimals = self._token_decimals(chain, client, token, contract)
        return to_human_amount(raw, decimals)

    def _token_decimals(self, chain: str, client: EvmClient, token: TokenDefinition, contract: str) -> int:
        """
        Resolve decimals for an ERC-20 contract, preferring the contract's own value.

        Parameters
        ----------
        chain : str
            Chain name
        client : EvmClient
            Connected chain client
        token : TokenDefinition
            Token being fetched
        contract : str
            Token contract address

        Returns
        -------
        int
            Contract decimals, or the configured fallback

        """
        cached = self.decimals_cache.get(chain, contract)
        if cached is not None:
            return cached

        fallback = token.decimals if token.decimals is not None else DEFAULT_TOKEN_DECIMALS
        try:
            decimals = int(client.call_contract(contract, "decimals"))
        except Exception as e:
            if self.debug:
                logger.debug(
                    "ERC20 decimals lookup failed: %s %s %s (fallback=%d): %s", token.symbol, chain, contract, fallback, e
                )
            return fallback

        self.decimals_cache.set(chain, contract, decimals)
        if self.debug:
            logger.debug("ERC20 decimals: %s %s %s => %d", token.symbol, chain, contract, decimals)
        return decimals
