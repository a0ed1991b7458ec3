"""EVM chain client using Ape's network management."""

import logging
from typing import Any

from ape import Contract, networks

from wallet_accumulator.rpc.retry import RetryConfig, call_with_retry

logger = logging.getLogger(__name__)

# Chain name -> Ape "ecosystem:network" choice
EVM_NETWORK_CHOICES = {
    "ethereum": "ethereum:mainnet",
    "bsc": "bsc:mainnet",
    "polygon": "polygon:mainnet",
    "astar": "astar:mainnet",
    "base": "base:mainnet",
    "arbitrum": "arbitrum:mainnet",
    "optimism": "optimism:mainnet",
}

ERC20_ABI = [
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


class EvmChainClient:
    """
    Per-chain client using Ape's network management system.

    Ape picks the configured provider for the network (e.g. Infura when
    ``WEB3_INFURA_PROJECT_ID`` is set). Only one chain should be connected at a
    time because Ape's active network is process-wide.

    Parameters
    ----------
    chain : str
        Chain name (e.g., 'ethereum', 'base')
    network_choice : str | None
        Ape network choice. Defaults to the mainnet entry in EVM_NETWORK_CHOICES.
    retry_config : RetryConfig | None
        Retry configuration for rate-limited calls

    """

    def __init__(
        self,
        chain: str,
        network_choice: str | None = None,
        retry_config: RetryConfig | None = None,
        *,
        debug: bool = False,
    ) -> None:
        self.chain = chain
        self.network_choice = network_choice or EVM_NETWORK_CHOICES.get(chain, f"{chain}:mainnet")
        self.retry_config = retry_config or RetryConfig()
        self.debug = debug
        self._network_context = None
        self._provider = None

    def connect(self) -> None:
        """Connect to the network using Ape's network management."""
        try:
            self._network_context = networks.parse_network_choice(self.network_choice)
            self._network_context.__enter__()
            self._provider = networks.provider
        except Exception as e:
            self._network_context = None
            error_msg = f"Failed to connect to {self.network_choice}: {e}"
            raise RuntimeError(error_msg) from e

    def disconnect(self) -> None:
        """Disconnect from the network."""
        if self._network_context:
            try:
                self._network_context.__exit__(None, None, None)
            except Exception as e:
                logger.debug("Error during network context cleanup: %s", e)
            self._network_context = None
        self._provider = None

    def _require_provider(self) -> Any:
        if not self._provider:
            error_msg = "Provider not connected. Call connect() first."
            raise RuntimeError(error_msg)
        return self._provider

    def get_native_balance(self, address: str) -> int:
        """
        Get the native balance of an address in wei.

        Parameters
        ----------
        address : str
            Wallet address

        Returns
        -------
        int
            Balance in the chain's smallest unit

        """
        provider = self._require_provider()
        return int(
            call_with_retry(
                lambda: provider.get_balance(address),
                self.retry_config,
                label=f"{self.chain} getBalance",
            )
        )

    def call_contract(self, contract_address: str, method: str, *args: Any) -> Any:
        """
        Call a read-only ERC-20 method.

        Parameters
        ----------
        contract_address : str
            Token contract address
        method : str
            Method name ('balanceOf' or 'decimals')
        *args : Any
            Method arguments

        Returns
        -------
        Any
            Decoded call result

        """
        self._require_provider()
        contract = Contract(contract_address, abi=ERC20_ABI)
        return call_with_retry(
            lambda: getattr(contract, method)(*args),
            self.retry_config,
            label=f"{self.chain} {method}",
        )

    def __enter__(self) -> "EvmChainClient":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.disconnect()
