"""Minimal Solana JSON-RPC client."""

import itertools
from typing import Any

import httpx

from wallet_accumulator.errors import AccumulatorError, RateLimitError
from wallet_accumulator.rpc.retry import RATE_LIMIT_PATTERN, RetryConfig, call_with_retry

SPL_TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
DEFAULT_SOLANA_RPC_URL = "https://api.mainnet-beta.solana.com"


class SolanaRPCError(AccumulatorError):
    """Exception raised for Solana RPC errors."""


class SolanaRPCClient:
    """
    Client for the Solana JSON-RPC API.

    Every call is retried with exponential backoff when the node answers with
    HTTP 429 or a JSON-RPC rate-limit error.

    Parameters
    ----------
    rpc_url : str
        RPC endpoint URL
    timeout : float
        Request timeout in seconds
    retry_config : RetryConfig | None
        Retry configuration for rate-limited calls
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_SOLANA_RPC_URL,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.retry_config = retry_config or RetryConfig()
        self.client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

        def send() -> Any:
            try:
                response = self.client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    raise
                msg = f"HTTP error {e.response.status_code}: {e}"
                raise SolanaRPCError(msg) from e
            except httpx.HTTPError as e:
                msg = f"Solana RPC request failed: {e}"
                raise SolanaRPCError(msg) from e
            except ValueError as e:
                msg = f"Solana RPC returned invalid JSON: {e}"
                raise SolanaRPCError(msg) from e

            error = body.get("error")
            if error:
                code = error.get("code")
                message = error.get("message", "")
                if code == 429 or RATE_LIMIT_PATTERN.search(str(message)):
                    raise RateLimitError(f"Solana RPC {method}: {message}")
                msg = f"Solana RPC {method} error {code}: {message}"
                raise SolanaRPCError(msg)
            return body.get("result")

        return call_with_retry(send, self.retry_config, label=f"solana {method}")

    def get_balance(self, owner: str) -> int:
        """
        Get native SOL balance in lamports.

        Parameters
        ----------
        owner : str
            Wallet public key (base58)

        Returns
        -------
        int
            Balance in lamports

        """
        result = self._request("getBalance", [owner, {"commitment": "confirmed"}])
        return int(result["value"])

    def get_token_accounts_by_owner(
        self,
        owner: str,
        program_id: str = SPL_TOKEN_PROGRAM_ID,
    ) -> list[dict[str, Any]]:
        """
        Enumerate parsed token accounts owned by a wallet for one token program.

        Parameters
        ----------
        owner : str
            Wallet public key (base58)
        program_id : str
            Token program id

        Returns
        -------
        list[dict[str, Any]]
            Raw ``value`` entries from the RPC response

        """
        result = self._request(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        return list(result.get("value", []))

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "SolanaRPCClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
