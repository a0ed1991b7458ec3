"""Bitcoin explorer client (mempool.space / Esplora compatible REST API)."""

import httpx

from wallet_accumulator.errors import AccumulatorError
from wallet_accumulator.rpc.retry import RetryConfig, call_with_retry

DEFAULT_BITCOIN_API_URL = "https://mempool.space/api"


class BitcoinAPIError(AccumulatorError):
    """Exception raised for Bitcoin explorer API errors."""


class MempoolClient:
    """
    Client for an Esplora-style Bitcoin explorer.

    Parameters
    ----------
    base_url : str
        API base URL
    timeout : float
        Request timeout in seconds
    retry_config : RetryConfig | None
        Retry configuration for rate-limited calls
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    def __init__(
        self,
        base_url: str = DEFAULT_BITCOIN_API_URL,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config or RetryConfig()
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def get_confirmed_balance(self, address: str) -> int:
        """
        Get the confirmed balance of an address in satoshis.

        Parameters
        ----------
        address : str
            Bitcoin address

        Returns
        -------
        int
            funded_txo_sum - spent_txo_sum from confirmed chain stats

        Raises
        ------
        BitcoinAPIError
            If the request fails for a reason other than rate limiting

        """

        def send() -> dict:
            try:
                response = self.client.get(f"{self.base_url}/address/{address}")
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    raise
                msg = f"HTTP error {e.response.status_code}: {e}"
                raise BitcoinAPIError(msg) from e
            except httpx.HTTPError as e:
                msg = f"HTTP request failed: {e}"
                raise BitcoinAPIError(msg) from e

        data = call_with_retry(send, self.retry_config, label=f"bitcoin {address}")
        stats = data.get("chain_stats") or {}
        return int(stats.get("funded_txo_sum", 0)) - int(stats.get("spent_txo_sum", 0))

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "MempoolClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
