"""
Storage façade over the content-addressed network.

The naming protocol only needs immutable chunks, append-only registers
and a small key-value vault. ``NetworkStorage`` names exactly those
operations; ``MemoryNetwork`` and ``GatewayClient`` implement them.
Every failure is raised as ``StorageError`` with a ``StorageErrorKind``.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from .identity import RegisterIdentity


class RegisterHistory(ABC):
    """
    Pull-based, restartable, finite sequence of register entries.

    Each call to ``next`` yields the next raw entry value (a chunk address)
    in append order, or None when the sequence is exhausted.
    """

    @abstractmethod
    async def next(self) -> Optional[str]:
        ...

    @abstractmethod
    def restart(self) -> None:
        """Begin a fresh pass from the oldest entry."""

    def __aiter__(self) -> "RegisterHistory":
        return self

    async def __anext__(self) -> str:
        value = await self.next()
        if value is None:
            raise StopAsyncIteration
        return value


class PagedRegisterHistory(RegisterHistory):
    """
    History that fetches entries lazily in pages.

    ``fetch_page(offset, limit)`` returns the entries starting at ``offset``;
    a page shorter than ``limit`` marks the end of the sequence.
    """

    def __init__(
        self,
        fetch_page: Callable[[int, int], Awaitable[list[str]]],
        page_size: int = 100,
    ) -> None:
        self._fetch_page = fetch_page
        self._page_size = page_size
        self.restart()

    def restart(self) -> None:
        self._buffer: list[str] = []
        self._offset = 0
        self._exhausted = False

    async def next(self) -> Optional[str]:
        if not self._buffer and not self._exhausted:
            page = await self._fetch_page(self._offset, self._page_size)
            self._offset += len(page)
            if len(page) < self._page_size:
                self._exhausted = True
            self._buffer = list(page)
        if not self._buffer:
            return None
        return self._buffer.pop(0)


class NetworkStorage(ABC):
    """Operations the naming protocol needs from the network."""

    @abstractmethod
    async def put_chunk(self, data: bytes) -> str:
        """Store an immutable chunk and return its content address."""

    @abstractmethod
    async def get_chunk(self, address: str) -> bytes:
        """Download a chunk by address."""

    @abstractmethod
    async def create_register(self, identity: RegisterIdentity, value: str) -> str:
        """Create the register owned by ``identity`` with a first entry."""

    @abstractmethod
    async def append_register(self, identity: RegisterIdentity, value: str) -> None:
        """Append an entry to the register owned by ``identity``."""

    @abstractmethod
    async def get_register(self, address: str) -> str:
        """Read the current head value of a register."""

    @abstractmethod
    def register_history(self, address: str) -> RegisterHistory:
        """
        Return the history of a register.

        A register that does not exist yields an empty history.
        """

    @abstractmethod
    async def put_vault(self, key: str, content_type: str, data: bytes) -> None:
        """Store (or overwrite) a vault entry."""

    @abstractmethod
    async def get_vault(self, key: str) -> bytes:
        """Read a vault entry."""

    async def close(self) -> None:
        """Release network resources."""

    async def __aenter__(self) -> "NetworkStorage":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
