"""
HTTP proxy for naming-system hosts.

Requests arrive with a ``Host`` such as ``alice.ant``. The host is resolved
(through the resolution cache) to its target address, substituted into the
upstream URL template, and the request is forwarded. The upstream answer
is relayed unchanged apart from hop-by-hop headers, plus three diagnostic
headers naming the domain, target and upstream URL.

Status mapping: host without a known suffix → 400, resolution failure →
404, unusable upstream URL → 500, upstream connection failure → 502.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import httpx
from aiohttp import web

from .audit_logger import AuditLogger
from .cache import ResolutionCache
from .config import ADDRESS_PLACEHOLDER, ServerConfig
from .domain_validator import DomainValidator, strip_port
from .enums import LogLevel
from .exceptions import AntnsError


HEADER_DOMAIN = "X-AntNS-Domain"
HEADER_TARGET = "X-AntNS-Target"
HEADER_UPSTREAM = "X-AntNS-Upstream"

HOP_BY_HOP_HEADERS = frozenset({
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization",
    "te", "trailer", "transfer-encoding", "upgrade",
})


@dataclass
class ProxyResponse:
    """A response ready to be written back to the client."""

    status: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""


def _filter_headers(headers: Iterable[tuple[str, str]], drop: Iterable[str]) -> list[tuple[str, str]]:
    dropped = HOP_BY_HOP_HEADERS | {d.lower() for d in drop}
    return [(k, v) for k, v in headers if k.lower() not in dropped]


def build_upstream_url(template: str, target: str, path_qs: str) -> str:
    """Substitute the target into the template and append the request path."""
    return template.replace(ADDRESS_PLACEHOLDER, target) + path_qs


def _text(status: int, message: str) -> ProxyResponse:
    return ProxyResponse(
        status=status,
        headers=[("Content-Type", "text/plain; charset=utf-8")],
        body=message.encode("utf-8"),
    )


class ProxyService:
    """Resolves hosts and forwards requests; independent of the HTTP server."""

    COMPONENT = "http_proxy"

    def __init__(
        self,
        config: ServerConfig,
        cache: ResolutionCache,
        client: httpx.AsyncClient,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the proxy service.

        Args:
            config: Server configuration (suffixes, upstream template)
            cache: Resolution cache used to look up targets
            client: HTTP client used for upstream requests
            logger: Optional audit logger
        """
        self._config = config
        self._cache = cache
        self._client = client
        self._validator = DomainValidator(config.domain_suffixes)
        self._logger = logger

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    async def forward(
        self,
        method: str,
        host_header: str,
        path_qs: str,
        headers: Iterable[tuple[str, str]],
        body: bytes,
    ) -> ProxyResponse:
        """
        Handle one proxied request.

        Args:
            method: HTTP method of the original request
            host_header: Value of the ``Host`` header
            path_qs: Path plus query string, starting with '/'
            headers: Original request headers
            body: Original request body

        Returns:
            The response to send to the client
        """
        domain = strip_port(host_header).lower().rstrip(".")
        if not domain or not self._validator.has_known_suffix(domain):
            return _text(400, f"Invalid host: {host_header!r} is not a naming-system domain\n")

        try:
            target = await self._cache.lookup(domain)
        except AntnsError as e:
            self._log(LogLevel.WARN, "Resolution failed", {"domain": domain, "error_code": e.code})
            return _text(404, f"Domain {domain} could not be resolved: {e.message}\n")

        upstream = build_upstream_url(self._config.upstream_template, target, path_qs)
        try:
            url = httpx.URL(upstream)
        except httpx.InvalidURL as e:
            return _text(500, f"Invalid upstream URL {upstream}: {e}\n")
        if url.scheme not in ("http", "https") or not url.host:
            return _text(500, f"Invalid upstream URL {upstream}\n")

        request = self._client.build_request(
            method,
            url,
            headers=_filter_headers(headers, drop=("host", "content-length")),
            content=body or None,
        )
        try:
            upstream_response = await self._client.send(request, stream=True)
            try:
                content = b"".join([chunk async for chunk in upstream_response.aiter_raw()])
            finally:
                await upstream_response.aclose()
        except httpx.TransportError as e:
            self._log(LogLevel.WARN, "Upstream unreachable", {"upstream": upstream, "error": str(e)})
            return _text(502, f"Upstream {upstream} unreachable: {e}\n")

        response_headers = _filter_headers(
            upstream_response.headers.multi_items(), drop=("content-length",)
        )
        response_headers.extend([
            (HEADER_DOMAIN, domain),
            (HEADER_TARGET, target),
            (HEADER_UPSTREAM, upstream),
        ])
        self._log(
            LogLevel.DEBUG,
            "Request proxied",
            {"domain": domain, "upstream": upstream, "status": upstream_response.status_code},
        )
        return ProxyResponse(
            status=upstream_response.status_code,
            headers=response_headers,
            body=content,
        )


class HttpProxyServer:
    """aiohttp server exposing a ``ProxyService`` on every path."""

    COMPONENT = "http_proxy"

    def __init__(
        self,
        config: ServerConfig,
        service: ProxyService,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config
        self._service = service
        self._logger = logger
        self._runner: Optional[web.AppRunner] = None

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.read()
        result = await self._service.forward(
            request.method,
            request.headers.get("Host", ""),
            request.path_qs,
            request.headers.items(),
            body,
        )
        response = web.Response(status=result.status, body=result.body)
        # Relay the upstream content type instead of aiohttp's default
        response.headers.popall("Content-Type", None)
        for name, value in result.headers:
            response.headers.add(name, value)
        return response

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self.handle)
        return app

    async def start(self) -> None:
        """Bind the proxy listener."""
        self._runner = web.AppRunner(self.create_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.proxy_host, self._config.proxy_port)
        await site.start()
        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                self.COMPONENT,
                "HTTP proxy listening",
                {
                    "host": self._config.proxy_host,
                    "port": self._config.proxy_port,
                    "upstream": self._config.upstream_template,
                },
            )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
