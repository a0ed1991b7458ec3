"""TTL-capable cache for token decimals read from chain contracts."""

import threading
import time


class CacheEntry:
    """
    Cache entry with optional TTL support.

    Parameters
    ----------
    value : int
        Cached decimals
    ttl : float | None
        Time-to-live in seconds. None means the entry never expires.
    created_at : float | None
        Creation timestamp. Uses current time if None.

    """

    def __init__(self, value: int, ttl: float | None, created_at: float | None = None) -> None:
        self.value = value
        self.ttl = ttl
        self.created_at = created_at or time.time()

    def is_expired(self) -> bool:
        """Check if cache entry has expired."""
        if self.ttl is None:
            return False
        return (time.time() - self.created_at) > self.ttl


class DecimalsCache:
    """
    Read-mostly cache of ERC-20 / SPL decimals keyed by chain and contract address.

    Safe to populate redundantly from several threads: decimals are idempotent,
    so the last write wins.

    Parameters
    ----------
    default_ttl : float | None
        Default time-to-live in seconds, or None for no expiry

    """

    def __init__(self, default_ttl: float | None = None) -> None:
        self.default_ttl = default_ttl
        self._cache: dict[tuple[str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _make_key(chain: str, address: str) -> tuple[str, str]:
        # Contract addresses are compared case-insensitively (EIP-55 checksums vary)
        return chain, address.lower()

    def get(self, chain: str, address: str) -> int | None:
        """
        Get cached decimals if present and not expired.

        Parameters
        ----------
        chain : str
            Chain name
        address : str
            Contract address

        Returns
        -------
        int | None
            Cached decimals, or None on a miss

        """
        key = self._make_key(chain, address)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._cache[key]
                return None
            return entry.value

    def set(self, chain: str, address: str, decimals: int, ttl: float | None = None) -> None:
        """Store decimals for a contract."""
        key = self._make_key(chain, address)
        with self._lock:
            self._cache[key] = CacheEntry(decimals, ttl if ttl is not None else self.default_ttl)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
