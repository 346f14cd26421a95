"""
Configuration dataclasses for the AntNS naming system.

This module defines all configuration structures used throughout the system,
including network access, identity derivation, the local DNS and proxy
servers, key storage, retry logic, and logging configuration.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .identity import DEFAULT_REGISTER_KEY_HEX


ADDRESS_PLACEHOLDER = "$ADDRESS"


@dataclass
class NetworkConfig:
    """Access to the storage network gateway."""

    gateway_url: str = "http://localhost:8080"
    timeout_seconds: float = 30.0
    history_page_size: int = 100
    simulation_state_file: Optional[Path] = None


@dataclass
class IdentityConfig:
    """Network-wide identity derivation settings."""

    register_key_hex: str = DEFAULT_REGISTER_KEY_HEX


@dataclass
class ServerConfig:
    """Local DNS responder and HTTP proxy settings."""

    dns_host: str = "127.0.0.1"
    dns_port: int = 5354
    proxy_host: str = "127.0.0.1"
    proxy_port: int = 80
    upstream_template: str = f"http://localhost:18888/{ADDRESS_PLACEHOLDER}"
    cache_ttl_seconds: int = 3600
    domain_suffixes: list[str] = field(default_factory=lambda: [".ant", ".autonomi"])
    answer_address: str = "127.0.0.1"
    answer_ttl: int = 300


@dataclass
class KeyStoreConfig:
    """Local key file storage."""

    keys_dir: Path = field(default_factory=lambda: Path.home() / ".antns" / "keys")


@dataclass
class RetryConfig:
    """Retry behavior configuration."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0
    retryable_errors: list[str] = field(
        default_factory=lambda: ["timeout", "unreachable", "server_error"]
    )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    keystore: KeyStoreConfig = field(default_factory=KeyStoreConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'de'
    simulation_mode: bool = False
    startup_self_test: bool = True
