"""
Proxy-side resolution cache.

Maps domain names to their last resolved target for a configurable TTL.
One lock guards the whole map. The lock is not held during resolution,
so concurrent misses for the same domain each resolve and the last
writer wins.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from .audit_logger import AuditLogger
from .enums import LogLevel
from .models import CachedLookup


ResolveTarget = Callable[[str], Awaitable[str]]


class ResolutionCache:
    """
    TTL cache in front of a target resolver.

    A TTL of 0 disables caching: every lookup resolves fresh and nothing
    is stored.
    """

    COMPONENT = "cache"

    def __init__(
        self,
        resolve: ResolveTarget,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the cache.

        Args:
            resolve: Coroutine resolving a domain to its target (raises on failure)
            ttl_seconds: Lifetime of an entry; 0 disables caching
            clock: Monotonic time source in seconds
            logger: Optional audit logger
        """
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self._resolve = resolve
        self._ttl = ttl_seconds
        self._clock = clock
        self._logger = logger
        self._entries: dict[str, CachedLookup] = {}
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _log_debug(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.DEBUG, self.COMPONENT, message, data)

    async def get(self, domain: str) -> Optional[CachedLookup]:
        """Return the entry for ``domain`` if present and fresh."""
        if not self.enabled:
            return None
        async with self._lock:
            entry = self._entries.get(domain)
            if entry is not None and self._clock() - entry.timestamp < self._ttl:
                return entry
        return None

    async def lookup(self, domain: str) -> str:
        """
        Return the target for ``domain``, resolving on a miss.

        Resolution errors propagate and leave any existing entry untouched.
        """
        cached = await self.get(domain)
        if cached is not None:
            self._log_debug("Cache hit", {"domain": domain})
            return cached.target

        target = await self._resolve(domain)

        if self.enabled:
            async with self._lock:
                self._entries[domain] = CachedLookup(target=target, timestamp=self._clock())
            self._log_debug("Cache updated", {"domain": domain})

        return target

    async def size(self) -> int:
        async with self._lock:
            return len(self._entries)
