"""CoinGecko pricing client for batched token price lookups."""

from decimal import Decimal, InvalidOperation

import httpx

from wallet_accumulator.errors import PriceServiceError
from wallet_accumulator.rpc.retry import RetryConfig, call_with_retry

DEFAULT_COINGECKO_API_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoClient:
    """
    Fetches token prices from the CoinGecko ``simple/price`` endpoint.

    Parameters
    ----------
    base_url : str
        CoinGecko API base URL
    api_key : str | None
        Optional demo API key, sent as ``x-cg-demo-api-key``
    timeout : float
        Request timeout in seconds
    retry_config : RetryConfig | None
        Retry configuration for rate-limited calls
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    def __init__(
        self,
        base_url: str = DEFAULT_COINGECKO_API_URL,
        api_key: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config or RetryConfig(max_retries=3)
        headers = {"x-cg-demo-api-key": api_key} if api_key else {}
        self.client = httpx.Client(timeout=timeout, headers=headers, transport=transport)

    def get_prices(self, ids: list[str], vs_currency: str) -> dict[str, Decimal]:
        """
        Fetch prices for several CoinGecko ids in one request.

        Parameters
        ----------
        ids : list[str]
            CoinGecko coin ids (e.g. 'bitcoin', 'ethereum')
        vs_currency : str
            Valuation currency code (e.g. 'JPY')

        Returns
        -------
        dict[str, Decimal]
            Mapping of coin id to price. Ids missing from the response are absent.

        Raises
        ------
        PriceServiceError
            If the request fails or the payload is not a JSON object

        Examples
        --------
        >>> client = CoinGeckoClient()
        >>> client.get_prices(["bitcoin", "ethereum"], "JPY")

        """
        if not ids:
            return {}

        currency = vs_currency.lower()
        params = {"ids": ",".join(ids), "vs_currencies": currency}

        def send() -> dict:
            try:
                response = self.client.get(f"{self.base_url}/simple/price", params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    raise
                msg = f"HTTP error {e.response.status_code}: {e}"
                raise PriceServiceError(msg) from e
            except httpx.HTTPError as e:
                msg = f"HTTP request failed: {e}"
                raise PriceServiceError(msg) from e
            except ValueError as e:
                msg = f"Invalid JSON from price service: {e}"
                raise PriceServiceError(msg) from e

        try:
            data = call_with_retry(send, self.retry_config, label="coingecko simple/price")
        except httpx.HTTPStatusError as e:
            msg = f"Price service still rate limited: {e}"
            raise PriceServiceError(msg) from e

        if not isinstance(data, dict):
            msg = f"Unexpected price payload type: {type(data).__name__}"
            raise PriceServiceError(msg)

        prices = {}
        for coin_id in ids:
            entry = data.get(coin_id)
            if not isinstance(entry, dict) or entry.get(currency) is None:
                continue
            try:
                prices[coin_id] = Decimal(str(entry[currency]))
            except InvalidOperation:
                continue
        return prices

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "CoinGeckoClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
