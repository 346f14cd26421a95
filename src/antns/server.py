"""
Runs the DNS responder and HTTP proxy together.

Both listeners share one ``asyncio.Event``; setting it (SIGINT/SIGTERM do
so when signal handlers are installed) closes both and returns.
"""

import asyncio
import signal
from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .cache import ResolutionCache
from .config import SystemConfig
from .dns_server import DnsServer
from .enums import LogLevel
from .http_proxy import HttpProxyServer, ProxyService
from .identity import IdentityDeriver
from .resolver import DomainResolver
from .storage import NetworkStorage


def install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Set ``stop_event`` on SIGINT and SIGTERM where the platform allows it."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            pass  # e.g. Windows event loops


async def probe_port(host: str, port: int, timeout: float = 1.0) -> bool:
    """Return True if something accepts TCP connections on ``host:port``."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    return True


class NamingServer:
    """DNS responder plus HTTP proxy sharing one resolver and cache."""

    COMPONENT = "server"

    def __init__(
        self,
        config: SystemConfig,
        storage: NetworkStorage,
        logger: Optional[AuditLogger] = None,
        upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the server.

        Args:
            config: System configuration
            storage: Network storage used for resolution
            logger: Optional audit logger
            upstream_transport: Optional httpx transport for upstream requests

        Raises:
            InvalidConfigurationError: If the shared register key is malformed
        """
        self._config = config
        self._logger = logger
        self._resolver = DomainResolver(
            storage,
            IdentityDeriver(config.identity.register_key_hex),
            logger,
        )
        self.cache = ResolutionCache(
            self._resolve_target,
            config.server.cache_ttl_seconds,
            logger=logger,
        )
        self._upstream = httpx.AsyncClient(
            timeout=httpx.Timeout(config.network.timeout_seconds),
            transport=upstream_transport,
        )
        self.dns = DnsServer(config.server, logger)
        self.proxy = HttpProxyServer(
            config.server,
            ProxyService(config.server, self.cache, self._upstream, logger),
            logger,
        )

    async def _resolve_target(self, domain: str) -> str:
        resolution = await self._resolver.lookup(domain)
        return resolution.target

    async def start(self) -> None:
        await self.dns.start()
        try:
            await self.proxy.start()
        except OSError:
            await self.dns.stop()
            raise

    async def stop(self) -> None:
        await self.proxy.stop()
        await self.dns.stop()
        await self._upstream.aclose()

    async def run(self, stop_event: asyncio.Event) -> None:
        """Serve until ``stop_event`` is set."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            if self._logger:
                self._logger.log(LogLevel.INFO, self.COMPONENT, "Shutting down servers")
            await self.stop()
