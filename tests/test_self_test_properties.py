"""
Tests for the startup self-test.
"""

import asyncio

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.config import ServerConfig, SystemConfig
from antns.self_test import SelfTest


def config_with(**server_kwargs) -> SystemConfig:
    return SystemConfig(server=ServerConfig(**server_kwargs))


class TestConfigValidationProperty:
    """Property-based tests for configuration validation."""

    @given(
        dns_port=st.integers(min_value=1, max_value=65535),
        proxy_port=st.integers(min_value=1, max_value=65535),
        ttl=st.integers(min_value=1, max_value=86400),
    )
    @settings(max_examples=100)
    def test_valid_settings_pass(self, dns_port: int, proxy_port: int, ttl: int) -> None:
        """*For any* in-range ports and positive TTL, validation SHALL pass without warnings."""
        result = SelfTest(config_with(dns_port=dns_port, proxy_port=proxy_port, cache_ttl_seconds=ttl)).validate_config()
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    @given(port=st.one_of(st.integers(max_value=0), st.integers(min_value=65536)))
    @settings(max_examples=100)
    def test_out_of_range_port_fails(self, port: int) -> None:
        """*For any* port outside 1-65535, validation SHALL fail."""
        result = SelfTest(config_with(dns_port=port)).validate_config()
        assert not result.valid
        assert any("dns_port" in error for error in result.errors)

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda c: setattr(c.identity, "register_key_hex", "00" * 32),
            lambda c: setattr(c.identity, "register_key_hex", "not-hex"),
            lambda c: setattr(c.server, "upstream_template", "http://localhost:18888/"),
            lambda c: setattr(c.server, "cache_ttl_seconds", -5),
            lambda c: setattr(c.server, "domain_suffixes", []),
            lambda c: setattr(c, "language", "fr"),
            lambda c: setattr(c.logging, "output_format", "xml"),
            lambda c: setattr(c.logging, "level", "loud"),
        ],
    )
    def test_invalid_settings(self, mutate) -> None:
        config = SystemConfig()
        mutate(config)
        result = SelfTest(config).validate_config()
        assert not result.valid
        assert len(result.errors) == 1

    def test_disabled_cache_is_a_warning(self) -> None:
        result = SelfTest(config_with(cache_ttl_seconds=0)).validate_config()
        assert result.valid
        assert result.warnings


class TestSelfTestRun:
    """Gateway connectivity."""

    def test_simulation_skips_gateway(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise AssertionError("gateway must not be contacted")

        config = SystemConfig(simulation_mode=True)
        result = asyncio.run(SelfTest(config, transport=httpx.MockTransport(fail)).run())

        assert result.success
        assert result.endpoint_results == []

    @pytest.mark.parametrize("status, success", [(200, True), (404, True), (503, False)])
    def test_gateway_health(self, status: int, success: bool) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(status)

        result = asyncio.run(SelfTest(SystemConfig(), transport=httpx.MockTransport(handler)).run())

        assert result.success is success
        assert seen == ["http://localhost:8080/v1/health"]
        assert result.endpoint_results[0].http_status_code == status

    def test_unreachable_gateway(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        result = asyncio.run(SelfTest(SystemConfig(), transport=httpx.MockTransport(refuse)).run())

        assert not result.success
        assert "Connection error" in result.endpoint_results[0].error

    def test_invalid_config_stops_before_network(self) -> None:
        config = SystemConfig()
        config.server.domain_suffixes = []
        result = asyncio.run(SelfTest(config, transport=httpx.MockTransport(lambda r: httpx.Response(200))).run())

        assert not result.success
        assert result.endpoint_results == []

    def test_print_results(self, capsys) -> None:
        config = SystemConfig(simulation_mode=True)
        self_test = SelfTest(config)
        self_test.print_results(asyncio.run(self_test.run()), "de")
        assert "Selbsttest erfolgreich" in capsys.readouterr().out
