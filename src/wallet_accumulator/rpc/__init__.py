"""Remote access layer: retry, pacing, caching, and per-source clients.

The Ape-backed ``EvmChainClient`` lives in ``wallet_accumulator.rpc.evm`` and is
not re-exported here so that importing the rest of the layer does not load Ape.
"""

from wallet_accumulator.rpc.bitcoin import BitcoinAPIError, MempoolClient
from wallet_accumulator.rpc.cache import CacheEntry, DecimalsCache
from wallet_accumulator.rpc.pacing import RequestPacer
from wallet_accumulator.rpc.retry import RetryConfig, call_with_retry, is_rate_limited, with_retry
from wallet_accumulator.rpc.solana import SolanaRPCClient, SolanaRPCError

__all__ = [
    "BitcoinAPIError",
    "CacheEntry",
    "DecimalsCache",
    "MempoolClient",
    "RequestPacer",
    "RetryConfig",
    "SolanaRPCClient",
    "SolanaRPCError",
    "call_with_retry",
    "is_rate_limited",
    "with_retry",
]
