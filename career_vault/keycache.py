"""
Key Derivation Cache — memoized scrypt keys, bounded by size and TTL.

Every encryption draws a fresh salt, so the write path always misses.
The cache pays off on reads, where the same stored envelope (and salt)
is decrypted again and again.

Expiry is strict: a hit does not refresh the entry timestamp, so no key
stays in memory longer than ``ttl`` seconds after it was derived.

Security Note:
    Never log salts or derived keys. Only counts are logged.
"""
import time
import base64
import logging
import threading
from typing import Callable, NamedTuple, Optional

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .config import CryptoConfig
from .envelope import SALT_SIZE
from .exceptions import ConfigurationError

logger = logging.getLogger("career_vault")

KEY_LENGTH = 32  # AES-256

# cleanup runs once the cache is this full
_CLEANUP_RATIO = 0.9


class _CacheEntry(NamedTuple):
    key: bytes
    timestamp: float


class KeyCache:
    """Per-salt cache of keys derived from the process secret.

    Args:
        secret: Process secret used as scrypt input.
        max_size: Maximum number of cached keys.
        ttl: Seconds a derived key may be served from the cache.
        n, r, p: scrypt cost parameters.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        secret: bytes,
        max_size: int = 100,
        ttl: float = 300.0,
        n: int = 16384,
        r: int = 8,
        p: int = 1,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._secret = secret
        self._max_size = max_size
        self._ttl = ttl
        self._n = n
        self._r = r
        self._p = p
        self._clock = clock or time.monotonic
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    @classmethod
    def from_config(
        cls,
        config: CryptoConfig,
        clock: Optional[Callable[[], float]] = None,
    ) -> "KeyCache":
        return cls(
            secret=config.secret_bytes,
            max_size=config.cache_max_size,
            ttl=config.cache_ttl,
            n=config.scrypt_n,
            r=config.scrypt_r,
            p=config.scrypt_p,
            clock=clock,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def stats(self) -> dict:
        """Copy of the hit/miss/eviction counters."""
        with self._lock:
            return dict(self._stats)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _derive(self, salt: bytes) -> bytes:
        kdf = Scrypt(
            salt=salt,
            length=KEY_LENGTH,
            n=self._n,
            r=self._r,
            p=self._p,
        )
        return kdf.derive(self._secret)

    def get_or_derive_key(self, salt: bytes) -> bytes:
        """Return the key for ``salt``, deriving it on a cache miss.

        Args:
            salt: Exactly 32 bytes, as stored in the envelope.

        Returns:
            32-byte AES key.

        Raises:
            ConfigurationError: If the secret is empty.
            ValueError: If salt has the wrong length.
        """
        if not self._secret:
            raise ConfigurationError("Encryption secret is not configured")
        if len(salt) != SALT_SIZE:
            raise ValueError(
                f"salt must be exactly {SALT_SIZE} bytes, got {len(salt)}"
            )
        cache_key = base64.b64encode(salt).decode("ascii")

        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is not None and self._clock() - entry.timestamp < self._ttl:
                self._stats["hits"] += 1
                return entry.key
            self._stats["misses"] += 1

        # Slow path runs unlocked; two threads racing on one salt both derive.
        key = self._derive(salt)

        with self._lock:
            self._entries[cache_key] = _CacheEntry(key, self._clock())
            if len(self._entries) > self._max_size * _CLEANUP_RATIO:
                self._cleanup()
        return key

    def _cleanup(self) -> None:
        """Drop expired entries, then the oldest ones until within max_size.

        Caller must hold the lock.
        """
        now = self._clock()
        before = len(self._entries)
        expired = [
            k for k, entry in self._entries.items()
            if now - entry.timestamp >= self._ttl
        ]
        for k in expired:
            del self._entries[k]

        overflow = len(self._entries) - self._max_size
        if overflow > 0:
            oldest = sorted(
                self._entries.items(), key=lambda item: item[1].timestamp
            )[:overflow]
            for k, _ in oldest:
                del self._entries[k]

        removed = before - len(self._entries)
        if removed:
            self._stats["evictions"] += removed
            logger.debug(
                "Key cache cleanup removed %d entr(ies), %d remaining",
                removed, len(self._entries),
            )
