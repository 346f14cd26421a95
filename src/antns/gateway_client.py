"""
HTTP gateway client for the storage network.

Talks to a REST gateway in front of the content-addressed network:

- ``POST /v1/chunks``                         store a chunk, returns ``{"address"}``
- ``GET  /v1/chunks/{address}``               download a chunk
- ``POST /v1/registers``                      create a register
- ``POST /v1/registers/{address}/entries``    append to a register
- ``GET  /v1/registers/{address}``            current head value
- ``GET  /v1/registers/{address}/history``    entries, paged by offset/limit
- ``PUT|GET /v1/vault/{key}``                 key-value vault

HTTP status codes and transport exceptions are mapped onto
``StorageErrorKind``; idempotent operations are retried on transient kinds.
"""

import re
from typing import Any, Awaitable, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx

from .audit_logger import AuditLogger
from .config import NetworkConfig, RetryConfig
from .enums import LogLevel, StorageErrorKind
from .exceptions import StorageError
from .identity import RegisterIdentity
from .retry_manager import RetryManager
from .storage import NetworkStorage, PagedRegisterHistory, RegisterHistory

T = TypeVar("T")

# Chunk and register addresses are hex; register entries are untrusted input
ADDRESS_PATTERN = re.compile(r"[0-9a-fA-F]{1,512}")


def _checked_address(address: str) -> str:
    """
    Return ``address`` if it is usable as a URL path segment.

    Raises:
        StorageError: PROTOCOL_ERROR if the address is not hex
    """
    if not isinstance(address, str) or not ADDRESS_PATTERN.fullmatch(address):
        raise StorageError(
            StorageErrorKind.PROTOCOL_ERROR,
            "Invalid network address",
            {"address": repr(address)[:80]},
        )
    return address


def _kind_for_status(status_code: int) -> StorageErrorKind:
    if status_code == 404:
        return StorageErrorKind.NOT_FOUND
    if status_code == 409:
        return StorageErrorKind.ALREADY_EXISTS
    if status_code == 402:
        return StorageErrorKind.PAYMENT_REQUIRED
    if status_code in (408, 504):
        return StorageErrorKind.TIMEOUT
    if status_code >= 500 or status_code == 429:
        return StorageErrorKind.SERVER_ERROR
    return StorageErrorKind.PROTOCOL_ERROR


class GatewayClient(NetworkStorage):
    """
    Async storage client backed by ``httpx.AsyncClient``.

    Register writes carry the identity's signature over the entry value so
    the gateway can authorise them without ever seeing a private key.
    """

    COMPONENT = "gateway_client"

    def __init__(
        self,
        config: NetworkConfig,
        retry_config: Optional[RetryConfig] = None,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_manager: Optional[RetryManager] = None,
    ) -> None:
        """
        Initialize the gateway client.

        Args:
            config: Gateway URL, timeout and history page size
            retry_config: Backoff settings for transient failures
            logger: Optional audit logger
            transport: Optional httpx transport (used by tests)
            retry_manager: Optional pre-built retry manager
        """
        self._config = config
        self._logger = logger
        self._retry = retry_manager or RetryManager(retry_config or RetryConfig())
        self._client = httpx.AsyncClient(
            base_url=config.gateway_url.rstrip("/"),
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request and translate failures into StorageError."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise StorageError(
                StorageErrorKind.TIMEOUT,
                f"Gateway request timed out after {self._config.timeout_seconds}s",
                {"url": url, "error": str(e)},
            )
        except httpx.TransportError as e:
            raise StorageError(
                StorageErrorKind.UNREACHABLE,
                f"Gateway unreachable: {e}",
                {"url": url},
            )
        except httpx.InvalidURL as e:
            raise StorageError(
                StorageErrorKind.PROTOCOL_ERROR,
                f"Invalid gateway URL: {e}",
                {"url": url[:80]},
            )

        if response.is_success:
            return response

        kind = _kind_for_status(response.status_code)
        raise StorageError(
            kind,
            f"Gateway returned HTTP {response.status_code} for {method} {url}",
            {"url": url, "status_code": response.status_code},
        )

    async def _call(
        self,
        operation: Callable[[], Awaitable[T]],
        idempotent: bool = True,
    ) -> T:
        if not idempotent:
            return await operation()
        outcome = await self._retry.execute_with_retry(operation)
        if outcome.success:
            return outcome.result  # type: ignore[return-value]
        if outcome.last_error is None:
            raise RuntimeError("Retry finished without a result or an error")
        if outcome.attempts > 1:
            self._log(
                LogLevel.WARN,
                "Gateway operation failed after retries",
                {"attempts": outcome.attempts, "error": str(outcome.last_error)},
            )
        raise outcome.last_error

    @staticmethod
    def _json_field(response: httpx.Response, key: str) -> Any:
        try:
            body = response.json()
        except ValueError as e:
            raise StorageError(
                StorageErrorKind.PROTOCOL_ERROR,
                f"Gateway returned invalid JSON: {e}",
            )
        if not isinstance(body, dict) or key not in body:
            raise StorageError(
                StorageErrorKind.PROTOCOL_ERROR,
                f"Gateway response lacks '{key}'",
            )
        return body[key]

    # Chunks

    async def put_chunk(self, data: bytes) -> str:
        async def op() -> str:
            response = await self._send(
                "POST",
                "/v1/chunks",
                content=data,
                headers={"Content-Type": "application/octet-stream"},
            )
            return str(self._json_field(response, "address"))

        address = await self._call(op)
        self._log(LogLevel.DEBUG, "Chunk stored", {"address": address, "size": len(data)})
        return address

    async def get_chunk(self, address: str) -> bytes:
        url = f"/v1/chunks/{_checked_address(address)}"

        async def op() -> bytes:
            response = await self._send("GET", url)
            return response.content

        return await self._call(op)

    # Registers

    async def create_register(self, identity: RegisterIdentity, value: str) -> str:
        payload = {
            "owner": identity.address,
            "value": value,
            "signature": identity.sign(value.encode("utf-8")),
        }

        async def op() -> str:
            response = await self._send("POST", "/v1/registers", json=payload)
            return str(self._json_field(response, "address"))

        address = await self._call(op, idempotent=False)
        self._log(LogLevel.INFO, "Register created", {"domain": identity.domain, "address": address})
        return address

    async def append_register(self, identity: RegisterIdentity, value: str) -> None:
        payload = {
            "value": value,
            "signature": identity.sign(value.encode("utf-8")),
        }

        async def op() -> None:
            await self._send("POST", f"/v1/registers/{identity.address}/entries", json=payload)

        await self._call(op, idempotent=False)
        self._log(LogLevel.INFO, "Register entry appended", {"domain": identity.domain})

    async def get_register(self, address: str) -> str:
        url = f"/v1/registers/{_checked_address(address)}"

        async def op() -> str:
            response = await self._send("GET", url)
            return str(self._json_field(response, "value"))

        return await self._call(op)

    def register_history(self, address: str) -> RegisterHistory:
        url = f"/v1/registers/{_checked_address(address)}/history"

        async def fetch_page(offset: int, limit: int) -> list[str]:
            async def op() -> list[str]:
                try:
                    response = await self._send(
                        "GET",
                        url,
                        params={"offset": offset, "limit": limit},
                    )
                except StorageError as e:
                    if e.kind == StorageErrorKind.NOT_FOUND:
                        return []
                    raise
                entries = self._json_field(response, "entries")
                if not isinstance(entries, list):
                    raise StorageError(
                        StorageErrorKind.PROTOCOL_ERROR,
                        "Gateway history 'entries' must be a list",
                    )
                return [str(e) for e in entries]

            return await self._call(op)

        return PagedRegisterHistory(fetch_page, self._config.history_page_size)

    # Vault

    async def put_vault(self, key: str, content_type: str, data: bytes) -> None:
        async def op() -> None:
            await self._send(
                "PUT",
                f"/v1/vault/{quote(key, safe='')}",
                content=data,
                headers={"Content-Type": "application/octet-stream", "X-Content-Kind": content_type},
            )

        await self._call(op)

    async def get_vault(self, key: str) -> bytes:
        async def op() -> bytes:
            response = await self._send("GET", f"/v1/vault/{quote(key, safe='')}")
            return response.content

        return await self._call(op)

    async def ping(self) -> bool:
        """Return True if the gateway answers its health endpoint."""
        try:
            await self._send("GET", "/v1/health")
        except StorageError:
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()
