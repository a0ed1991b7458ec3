"""Solana wallet balances: native SOL and SPL token accounts."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from wallet_accumulator.core.models import BalanceRecord, TokenDefinition
from wallet_accumulator.core.registry import ProviderRegistry
from wallet_accumulator.providers.addresses import is_solana_address
from wallet_accumulator.providers.base import BaseBalanceProvider, to_human_amount
from wallet_accumulator.rpc.pacing import RequestPacer
from wallet_accumulator.rpc.solana import DEFAULT_SOLANA_RPC_URL, SPL_TOKEN_PROGRAM_ID, SolanaRPCClient

logger = logging.getLogger(__name__)

SOLANA_CHAIN = "solana"
LAMPORTS_DECIMALS = 9
PACING_INTERVAL = 0.5


class SolanaClient(Protocol):
    """Subset of the Solana RPC used by the provider."""

    def get_balance(self, owner: str) -> int: ...

    def get_token_accounts_by_owner(self, owner: str, program_id: str = ...) -> list[dict[str, Any]]: ...


def parse_token_account(account: dict[str, Any]) -> tuple[str, Decimal] | None:
    """
    Extract (mint, ui amount) from a jsonParsed token account entry.

    Parameters
    ----------
    account : dict[str, Any]
        One ``value`` entry of getTokenAccountsByOwner

    Returns
    -------
    tuple[str, Decimal] | None
        Mint address and human-readable amount, or None if the entry is malformed

    """
    try:
        info = account["account"]["data"]["parsed"]["info"]
        mint = info["mint"]
        token_amount = info["tokenAmount"]
    except (KeyError, TypeError):
        return None

    raw_ui = token_amount.get("uiAmountString")
    try:
        if raw_ui is not None:
            return mint, Decimal(raw_ui)
        return mint, to_human_amount(int(token_amount["amount"]), int(token_amount["decimals"]))
    except (KeyError, ValueError, TypeError, InvalidOperation):
        return None


@ProviderRegistry.register
class SolanaProvider(BaseBalanceProvider):
    """
    Fetches native SOL and SPL token balances for Solana wallets.

    Each wallet costs two RPC calls at most: one ``getBalance`` when a token is
    native on Solana, and one ``getTokenAccountsByOwner`` for the SPL program.
    Mint addresses are matched against ``contract_addresses['solana']``.

    Parameters
    ----------
    wallet_addresses : list[str]
        Full configured wallet list
    client : SolanaClient | None
        RPC client. Defaults to a SolanaRPCClient on ``rpc_url``.
    rpc_url : str
        RPC endpoint used when no client is given
    pacer : RequestPacer | None
        Pacing per wallet (0.5s by default)
    debug : bool
        Enable debug output

    """

    name = "solana"
    description = "Solana wallets (native SOL + SPL tokens)"

    def __init__(
        self,
        wallet_addresses: list[str] | None = None,
        client: SolanaClient | None = None,
        rpc_url: str = DEFAULT_SOLANA_RPC_URL,
        pacer: RequestPacer | None = None,
        *,
        debug: bool = False,
    ) -> None:
        super().__init__(wallet_addresses, debug=debug)
        self.client = client or SolanaRPCClient(rpc_url)
        self.pacer = pacer or RequestPacer(PACING_INTERVAL)
        if debug:
            logger.debug("Solana RPC: %s", "custom URL" if rpc_url != DEFAULT_SOLANA_RPC_URL else "public URL")

    @classmethod
    def accepts_address(cls, address: str) -> bool:
        """Base58 public keys of 32 bytes."""
        return is_solana_address(address)

    def fetch(self, tokens: list[TokenDefinition]) -> list[BalanceRecord]:
        """
        Fetch balances for all Solana wallets.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        list[BalanceRecord]
            Native and SPL records with strictly positive amounts

        """
        wallets = self.select_wallets()
        if not wallets:
            return []

        native_tokens = [token for token in tokens if token.is_native_on(SOLANA_CHAIN)]
        by_mint: dict[str, TokenDefinition] = {}
        for token in tokens:
            mint = token.contract_on(SOLANA_CHAIN)
            if mint:
                by_mint.setdefault(mint, token)

        logger.info("Fetching Solana balances for %d wallets...", len(wallets))
        records: list[BalanceRecord] = []

        for wallet in wallets:
            self.pacer.wait()
            try:
                records.extend(self._fetch_wallet(wallet, native_tokens, by_mint))
            except Exception as e:
                logger.warning("Failed to fetch Solana balances for %s: %s", wallet, e)

        return records

    def _fetch_wallet(
        self,
        wallet: str,
        native_tokens: list[TokenDefinition],
        by_mint: dict[str, TokenDefinition],
    ) -> list[BalanceRecord]:
        # Records are only returned once every call for the wallet succeeded
        records = []

        if native_tokens:
            lamports = self.client.get_balance(wallet)
            amount = to_human_amount(lamports, LAMPORTS_DECIMALS)
            if amount > 0:
                for token in native_tokens:
                    records.append(self._record(token.symbol, amount, wallet, SOLANA_CHAIN))

        if by_mint:
            accounts = self.client.get_token_accounts_by_owner(wallet, SPL_TOKEN_PROGRAM_ID)
            for account in accounts:
                parsed = parse_token_account(account)
                if parsed is None:
                    continue
                mint, amount = parsed
                token = by_mint.get(mint)
                if token is None or amount <= 0:
                    continue
                records.append(self._record(token.symbol, amount, wallet, SOLANA_CHAIN))

        if self.debug:
            logger.debug("Solana %s: %d records", wallet, len(records))
        return records

    def close(self) -> None:
        """Close the RPC client if it supports closing."""
        close = getattr(self.client, "close", None)
        if close:
            close()
