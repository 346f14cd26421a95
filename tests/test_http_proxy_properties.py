"""
Property-based tests for the HTTP proxy.

The upstream is an ``httpx.MockTransport``; resolution goes through a
real ResolutionCache in front of a fake resolver.
"""

import asyncio

import httpx
from aiohttp.test_utils import TestClient, TestServer
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.cache import ResolutionCache
from antns.config import ServerConfig
from antns.exceptions import NoTargetRecordError, RegisterNotFoundError
from antns.http_proxy import (
    HEADER_DOMAIN,
    HEADER_TARGET,
    HEADER_UPSTREAM,
    HttpProxyServer,
    ProxyService,
    build_upstream_url,
)


TARGETS = {"alice.ant": "deadbeef", "bob.autonomi": "cafe01"}


async def fake_resolve(domain: str) -> str:
    if domain in TARGETS:
        return TARGETS[domain]
    if domain == "empty.ant":
        raise NoTargetRecordError(code="no_target_record", message="no root ANT record")
    raise RegisterNotFoundError(code="register_not_found", message=f"{domain} is not registered")


class Upstream:
    """Records forwarded requests and answers with a fixed response."""

    def __init__(self, fail: bool = False) -> None:
        self.requests: list[httpx.Request] = []
        self.fail = fail

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(
            201,
            headers={
                "Content-Type": "text/html",
                "X-Upstream-Header": "kept",
                "Connection": "close",
                "Keep-Alive": "timeout=5",
            },
            content=b"<h1>hello</h1>",
        )


def make_service(upstream: Upstream, template: str = "http://localhost:18888/$ADDRESS", ttl: int = 60):
    config = ServerConfig(upstream_template=template, cache_ttl_seconds=ttl)
    cache = ResolutionCache(fake_resolve, ttl)
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return ProxyService(config, cache, client), client


async def forward(upstream: Upstream, host: str, path_qs: str = "/", template: str = "http://localhost:18888/$ADDRESS", **kwargs):
    service, client = make_service(upstream, template)
    try:
        return await service.forward(
            kwargs.get("method", "GET"),
            host,
            path_qs,
            kwargs.get("headers", []),
            kwargs.get("body", b""),
        )
    finally:
        await client.aclose()


def header(response, name: str):
    for key, value in response.headers:
        if key.lower() == name.lower():
            return value
    return None


# Strategies for generating test data

path_strategy = st.lists(
    st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789-_"), min_size=1, max_size=10),
    max_size=4,
).map(lambda parts: "/" + "/".join(parts))


class TestForwardingProperty:
    """Property-based tests for upstream URL construction and relaying."""

    @given(path=path_strategy, query=st.sampled_from(["", "?a=1", "?q=x&y=2"]))
    @settings(max_examples=50, deadline=None)
    def test_upstream_url_is_template_plus_path(self, path: str, query: str) -> None:
        """
        *For any* request path, the upstream URL SHALL be the template with
        the target substituted, followed by the original path and query.
        """
        upstream = Upstream()
        response = asyncio.run(forward(upstream, "alice.ant", path + query))

        expected = f"http://localhost:18888/deadbeef{path}{query}"
        assert response.status == 201
        assert str(upstream.requests[0].url) == expected
        assert header(response, HEADER_UPSTREAM) == expected

    def test_response_is_relayed_with_diagnostic_headers(self) -> None:
        upstream = Upstream()
        response = asyncio.run(forward(upstream, "Alice.ANT:80", "/index.html"))

        assert response.status == 201
        assert response.body == b"<h1>hello</h1>"
        assert header(response, "Content-Type") == "text/html"
        assert header(response, "X-Upstream-Header") == "kept"
        assert header(response, "Connection") is None
        assert header(response, "Keep-Alive") is None
        assert header(response, HEADER_DOMAIN) == "alice.ant"
        assert header(response, HEADER_TARGET) == "deadbeef"

    def test_request_method_body_and_headers_are_forwarded(self) -> None:
        upstream = Upstream()
        asyncio.run(forward(
            upstream,
            "bob.autonomi",
            "/submit",
            method="POST",
            body=b"payload",
            headers=[
                ("Host", "bob.autonomi"),
                ("X-Client", "yes"),
                ("Proxy-Authorization", "secret"),
                ("Content-Length", "7"),
            ],
        ))

        request = upstream.requests[0]
        assert request.method == "POST"
        assert request.content == b"payload"
        assert request.headers["X-Client"] == "yes"
        assert "Proxy-Authorization" not in request.headers
        assert request.headers["Host"] == "localhost:18888"

    def test_build_upstream_url_replaces_every_placeholder(self) -> None:
        url = build_upstream_url("http://$ADDRESS.local/$ADDRESS", "abc", "/x")
        assert url == "http://abc.local/abc/x"


class TestProxyStatusMapping:
    """Failures map onto distinct HTTP statuses."""

    def test_unknown_suffix_is_bad_request(self) -> None:
        upstream = Upstream()
        response = asyncio.run(forward(upstream, "example.com"))
        assert response.status == 400
        assert upstream.requests == []

    def test_missing_host_is_bad_request(self) -> None:
        assert asyncio.run(forward(Upstream(), "")).status == 400

    def test_unresolvable_domain_is_not_found(self) -> None:
        upstream = Upstream()
        for host in ("nobody.ant", "empty.ant"):
            response = asyncio.run(forward(upstream, host))
            assert response.status == 404
        assert upstream.requests == []

    def test_invalid_upstream_template_is_server_error(self) -> None:
        for template in ("ftp://files/$ADDRESS", "$ADDRESS"):
            response = asyncio.run(forward(Upstream(), "alice.ant", "/", template=template))
            assert response.status == 500

    def test_unreachable_upstream_is_bad_gateway(self) -> None:
        response = asyncio.run(forward(Upstream(fail=True), "alice.ant"))
        assert response.status == 502


class TestProxyServer:
    """The aiohttp front end relays ProxyService results."""

    def test_served_request(self) -> None:
        async def scenario():
            upstream = Upstream()
            service, client = make_service(upstream)
            proxy = HttpProxyServer(ServerConfig(), service)
            async with TestClient(TestServer(proxy.create_app())) as http:
                ok = await http.get("/page?x=1", headers={"Host": "alice.ant"})
                ok_body = await ok.read()
                bad = await http.get("/", headers={"Host": "example.com"})
                result = (ok.status, ok.headers.get("Content-Type"), ok.headers.get(HEADER_TARGET), ok_body, bad.status)
            await client.aclose()
            return result, upstream.requests

        (status, content_type, target, body, bad_status), requests = asyncio.run(scenario())
        assert status == 201
        assert content_type == "text/html"
        assert target == "deadbeef"
        assert body == b"<h1>hello</h1>"
        assert bad_status == 400
        assert str(requests[0].url) == "http://localhost:18888/deadbeef/page?x=1"
