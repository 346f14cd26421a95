"""
Property-based tests for configuration loading, saving and overrides.
"""

import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.cli import (
    DEFAULT_SIMULATION_STATE,
    apply_environment,
    create_default_config,
    create_parser,
    load_config_from_file,
    save_config_to_file,
)
from antns.config import (
    IdentityConfig,
    KeyStoreConfig,
    LoggingConfig,
    NetworkConfig,
    RetryConfig,
    ServerConfig,
    SystemConfig,
)
from antns.identity import DEFAULT_REGISTER_KEY_HEX


# Strategies for generating valid configuration objects

path_segment = st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_-"), min_size=1, max_size=12)


@st.composite
def network_config_strategy(draw) -> NetworkConfig:
    return NetworkConfig(
        gateway_url=draw(st.sampled_from(["http://localhost:8080", "https://gateway.example"])),
        timeout_seconds=draw(st.floats(min_value=0.5, max_value=120.0)),
        history_page_size=draw(st.integers(min_value=1, max_value=1000)),
        simulation_state_file=Path("/tmp") / draw(path_segment) / "simulation.json",
    )


@st.composite
def server_config_strategy(draw) -> ServerConfig:
    return ServerConfig(
        dns_host=draw(st.sampled_from(["127.0.0.1", "0.0.0.0"])),
        dns_port=draw(st.integers(min_value=1, max_value=65535)),
        proxy_host=draw(st.sampled_from(["127.0.0.1", "localhost"])),
        proxy_port=draw(st.integers(min_value=1, max_value=65535)),
        upstream_template=draw(st.sampled_from([
            "http://localhost:18888/$ADDRESS",
            "https://$ADDRESS.gateway.example/",
        ])),
        cache_ttl_seconds=draw(st.integers(min_value=0, max_value=86400)),
        domain_suffixes=draw(st.lists(st.sampled_from([".ant", ".autonomi", ".test"]), min_size=1, max_size=3, unique=True)),
        answer_address=draw(st.sampled_from(["127.0.0.1", "10.0.0.1"])),
        answer_ttl=draw(st.integers(min_value=0, max_value=86400)),
    )


@st.composite
def retry_config_strategy(draw) -> RetryConfig:
    return RetryConfig(
        max_retries=draw(st.integers(min_value=0, max_value=10)),
        base_delay_seconds=draw(st.floats(min_value=0.1, max_value=10.0)),
        max_delay_seconds=draw(st.floats(min_value=10.0, max_value=300.0)),
        retryable_errors=draw(st.lists(
            st.sampled_from(["timeout", "unreachable", "server_error"]),
            min_size=1,
            max_size=3,
            unique=True,
        )),
    )


@st.composite
def system_config_strategy(draw) -> SystemConfig:
    """Generate valid SystemConfig objects."""
    return SystemConfig(
        network=draw(network_config_strategy()),
        identity=IdentityConfig(register_key_hex=draw(st.sampled_from([DEFAULT_REGISTER_KEY_HEX, "11" * 32]))),
        server=draw(server_config_strategy()),
        keystore=KeyStoreConfig(keys_dir=Path("/tmp") / draw(path_segment) / "keys"),
        retry=draw(retry_config_strategy()),
        logging=LoggingConfig(
            level=draw(st.sampled_from(["debug", "info", "warn", "error"])),
            output_format=draw(st.sampled_from(["json", "text", "both"])),
        ),
        language=draw(st.sampled_from(["en", "de"])),
        simulation_mode=draw(st.booleans()),
        startup_self_test=draw(st.booleans()),
    )


class TestConfigurationRoundTripProperty:
    """Property-based tests for configuration file round-trips."""

    @given(config=system_config_strategy())
    @settings(max_examples=100, deadline=None)
    def test_config_round_trip_preserves_data(self, config: SystemConfig) -> None:
        """
        *For any* valid SystemConfig, saving it to a file and loading it back
        SHALL produce an equal configuration.
        """
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            assert save_config_to_file(config, config_path)
            raw = json.loads(config_path.read_text(encoding="utf-8"))
            loaded = load_config_from_file(config_path)

        assert loaded == config
        assert set(raw) == {
            "network", "identity", "server", "keystore", "retry", "logging",
            "language", "simulation_mode", "startup_self_test",
        }


class TestConfigLoading:
    """Defaults and failures when loading configuration files."""

    def test_partial_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(json.dumps({"server": {"proxy_port": 8080}, "language": "de"}), encoding="utf-8")
            config = load_config_from_file(config_path)

        assert config.server.proxy_port == 8080
        assert config.server.dns_port == ServerConfig().dns_port
        assert config.language == "de"
        assert config.identity.register_key_hex == DEFAULT_REGISTER_KEY_HEX
        assert config.network.simulation_state_file == DEFAULT_SIMULATION_STATE
        assert config.retry == RetryConfig()

    def test_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            assert load_config_from_file(Path(tmp) / "absent.json") is None

    @pytest.mark.parametrize("content", ["{broken", '{"server": {"dns_port": "many"}}', "[]"])
    def test_malformed_file_returns_none(self, content: str) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(content, encoding="utf-8")
            assert load_config_from_file(config_path) is None

    def test_default_config(self) -> None:
        config = create_default_config(simulation_mode=True, language="de", keys_dir=Path("/tmp/k"))
        assert config.simulation_mode
        assert config.language == "de"
        assert config.keystore.keys_dir == Path("/tmp/k")
        assert not config.startup_self_test
        assert config.server.cache_ttl_seconds == 3600
        assert config.server.upstream_template == "http://localhost:18888/$ADDRESS"


class TestEnvironmentOverrides:
    """ANTNS_* variables overlay the configuration."""

    def test_all_variables_apply(self) -> None:
        config = apply_environment(create_default_config(), {
            "ANTNS_GATEWAY_URL": "https://gw.example",
            "ANTNS_REGISTER_KEY": " " + "22" * 32 + "\n",
            "ANTNS_KEYS_DIR": "/tmp/antns-keys",
            "ANTNS_LANG": "DE",
            "ANTNS_CACHE_TTL": "0",
        })

        assert config.network.gateway_url == "https://gw.example"
        assert config.identity.register_key_hex == "22" * 32
        assert config.keystore.keys_dir == Path("/tmp/antns-keys")
        assert config.language == "de"
        assert config.server.cache_ttl_seconds == 0

    def test_invalid_values_are_ignored(self) -> None:
        config = apply_environment(create_default_config(), {
            "ANTNS_LANG": "fr",
            "ANTNS_CACHE_TTL": "soon",
            "ANTNS_GATEWAY_URL": "",
        })

        assert config.language == "en"
        assert config.server.cache_ttl_seconds == 3600
        assert config.network.gateway_url == NetworkConfig().gateway_url


class TestArgumentParser:
    """Command-line parsing."""

    def test_records_add(self) -> None:
        args = create_parser().parse_args(
            ["records", "add", "alice.ant", "TEXT", "www", "hello", "--dry-run", "-l", "de"]
        )
        assert args.command == "records"
        assert args.action == "add"
        assert (args.domain, args.record_type, args.name, args.value) == ("alice.ant", "TEXT", "www", "hello")
        assert args.dry_run
        assert args.language == "de"

    def test_records_delete_index_is_int(self) -> None:
        args = create_parser().parse_args(["records", "delete", "alice.ant", "2"])
        assert args.index == 2

    def test_names_lookup_quick(self) -> None:
        args = create_parser().parse_args(["names", "lookup", "alice.ant", "--quick"])
        assert args.quick
        assert args.language is None

    def test_server_overrides(self) -> None:
        args = create_parser().parse_args(
            ["server", "start", "--dns-port", "5300", "--proxy-port", "8080", "--cache-ttl", "0"]
        )
        assert (args.dns_port, args.proxy_port, args.cache_ttl) == (5300, 8080, 0)
        assert args.upstream is None

    def test_names_requires_action(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["names"])

    def test_unknown_language_rejected(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["names", "list", "--language", "fr"])
