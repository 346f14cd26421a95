"""
Command-line interface for the AntNS naming system.

This module provides the main CLI entry point with commands for:
- names: Register, look up and audit domains; manage local owner keys
- records: Edit a domain's record set
- server: Run the local DNS responder and HTTP proxy
- keys: Back up and restore owner keys through the network vault
- config: Configuration management
- self-test: Validate configuration and gateway connectivity
"""

import argparse
import asyncio
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    IdentityConfig,
    KeyStoreConfig,
    LoggingConfig,
    NetworkConfig,
    RetryConfig,
    ServerConfig,
    SystemConfig,
)
from .domain_validator import DomainValidator
from .enums import EntryStatus, StorageErrorKind
from .exceptions import (
    AntnsError,
    CorruptRegistrationError,
    DomainAlreadyRegisteredError,
    IndexOutOfRangeError,
    NoTargetRecordError,
    NoValidRecordsError,
    NotDomainOwnerError,
    PersistenceError,
    RegisterNotFoundError,
    StorageError,
    ValidationError,
    VaultError,
)
from .gateway_client import GatewayClient
from .i18n import SUPPORTED_LANGUAGES, get_message
from .identity import IdentityDeriver
from .keystore import KeyStore
from .memory_network import MemoryNetwork
from .models import DnsRecord, OwnerEntry
from .mutator import RecordMutator
from .registrar import Registrar
from .resolver import DomainResolver, calculate_history_stats, find_target
from .self_test import SelfTest, run_self_test
from .server import NamingServer, install_signal_handlers, probe_port
from .storage import NetworkStorage
from .vault import KeyVault


DEFAULT_HOME = Path.home() / ".antns"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"
DEFAULT_SIMULATION_STATE = DEFAULT_HOME / "simulation.json"

# Outcomes that answer the question "what does this domain resolve to"
# rather than signal a failure of the command itself.
INFORMATIONAL_ERRORS = (
    RegisterNotFoundError,
    CorruptRegistrationError,
    NoValidRecordsError,
    NoTargetRecordError,
)


def create_default_config(
    simulation_mode: bool = False,
    language: str = "en",
    keys_dir: Optional[Path] = None,
) -> SystemConfig:
    """
    Create a default system configuration.

    Args:
        simulation_mode: Use a local simulated network instead of the gateway
        language: Output language ('en' or 'de')
        keys_dir: Directory for local owner keys

    Returns:
        SystemConfig with default settings
    """
    return SystemConfig(
        network=NetworkConfig(simulation_state_file=DEFAULT_SIMULATION_STATE),
        keystore=KeyStoreConfig(keys_dir=keys_dir or DEFAULT_HOME / "keys"),
        language=language,
        simulation_mode=simulation_mode,
        startup_self_test=False,
    )


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Missing sections and keys fall back to their defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        network_defaults = NetworkConfig()
        network_data = data.get("network", {})
        state_file = network_data.get("simulation_state_file")
        network = NetworkConfig(
            gateway_url=network_data.get("gateway_url", network_defaults.gateway_url),
            timeout_seconds=float(network_data.get("timeout_seconds", network_defaults.timeout_seconds)),
            history_page_size=int(network_data.get("history_page_size", network_defaults.history_page_size)),
            simulation_state_file=Path(state_file) if state_file else DEFAULT_SIMULATION_STATE,
        )

        identity_data = data.get("identity", {})
        identity = IdentityConfig()
        if "register_key_hex" in identity_data:
            identity = IdentityConfig(register_key_hex=identity_data["register_key_hex"])

        server_defaults = ServerConfig()
        server_data = data.get("server", {})
        server = ServerConfig(
            dns_host=server_data.get("dns_host", server_defaults.dns_host),
            dns_port=int(server_data.get("dns_port", server_defaults.dns_port)),
            proxy_host=server_data.get("proxy_host", server_defaults.proxy_host),
            proxy_port=int(server_data.get("proxy_port", server_defaults.proxy_port)),
            upstream_template=server_data.get("upstream_template", server_defaults.upstream_template),
            cache_ttl_seconds=int(server_data.get("cache_ttl_seconds", server_defaults.cache_ttl_seconds)),
            domain_suffixes=list(server_data.get("domain_suffixes", server_defaults.domain_suffixes)),
            answer_address=server_data.get("answer_address", server_defaults.answer_address),
            answer_ttl=int(server_data.get("answer_ttl", server_defaults.answer_ttl)),
        )

        keystore_data = data.get("keystore", {})
        keys_dir = keystore_data.get("keys_dir")
        keystore = KeyStoreConfig(keys_dir=Path(keys_dir)) if keys_dir else KeyStoreConfig()

        retry_defaults = RetryConfig()
        retry_data = data.get("retry", {})
        retry = RetryConfig(
            max_retries=int(retry_data.get("max_retries", retry_defaults.max_retries)),
            base_delay_seconds=float(retry_data.get("base_delay_seconds", retry_defaults.base_delay_seconds)),
            max_delay_seconds=float(retry_data.get("max_delay_seconds", retry_defaults.max_delay_seconds)),
            retryable_errors=list(retry_data.get("retryable_errors", retry_defaults.retryable_errors)),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return SystemConfig(
            network=network,
            identity=identity,
            server=server,
            keystore=keystore,
            retry=retry,
            logging=logging_config,
            language=data.get("language", "en"),
            simulation_mode=bool(data.get("simulation_mode", False)),
            startup_self_test=bool(data.get("startup_self_test", False)),
        )

    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: SystemConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        state_file = config.network.simulation_state_file
        data = {
            "network": {
                "gateway_url": config.network.gateway_url,
                "timeout_seconds": config.network.timeout_seconds,
                "history_page_size": config.network.history_page_size,
                "simulation_state_file": str(state_file) if state_file else None,
            },
            "identity": {
                "register_key_hex": config.identity.register_key_hex,
            },
            "server": {
                "dns_host": config.server.dns_host,
                "dns_port": config.server.dns_port,
                "proxy_host": config.server.proxy_host,
                "proxy_port": config.server.proxy_port,
                "upstream_template": config.server.upstream_template,
                "cache_ttl_seconds": config.server.cache_ttl_seconds,
                "domain_suffixes": list(config.server.domain_suffixes),
                "answer_address": config.server.answer_address,
                "answer_ttl": config.server.answer_ttl,
            },
            "keystore": {
                "keys_dir": str(config.keystore.keys_dir),
            },
            "retry": {
                "max_retries": config.retry.max_retries,
                "base_delay_seconds": config.retry.base_delay_seconds,
                "max_delay_seconds": config.retry.max_delay_seconds,
                "retryable_errors": list(config.retry.retryable_errors),
            },
            "logging": {
                "level": config.logging.level,
                "output_format": config.logging.output_format,
            },
            "language": config.language,
            "simulation_mode": config.simulation_mode,
            "startup_self_test": config.startup_self_test,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def apply_environment(config: SystemConfig, environ: Mapping[str, str]) -> SystemConfig:
    """
    Overlay ``ANTNS_*`` environment variables onto a configuration.

    Recognized: ANTNS_GATEWAY_URL, ANTNS_REGISTER_KEY, ANTNS_KEYS_DIR,
    ANTNS_LANG, ANTNS_CACHE_TTL. Unparseable values are ignored.
    """
    if environ.get("ANTNS_GATEWAY_URL"):
        config.network.gateway_url = environ["ANTNS_GATEWAY_URL"]
    if environ.get("ANTNS_REGISTER_KEY"):
        config.identity.register_key_hex = environ["ANTNS_REGISTER_KEY"].strip()
    if environ.get("ANTNS_KEYS_DIR"):
        config.keystore.keys_dir = Path(environ["ANTNS_KEYS_DIR"]).expanduser()

    language = (environ.get("ANTNS_LANG") or "").lower()
    if language in SUPPORTED_LANGUAGES:
        config.language = language

    ttl = environ.get("ANTNS_CACHE_TTL")
    if ttl:
        try:
            config.server.cache_ttl_seconds = int(ttl)
        except ValueError:
            pass
    return config


def create_logger(config: SystemConfig, verbose: bool = False) -> AuditLogger:
    """Warnings always reach stderr; ``--verbose`` lowers the level to debug."""
    level = "debug" if verbose else "warn"
    return AuditLogger.from_level_name(level, config.logging.output_format)


def create_storage(config: SystemConfig, logger: Optional[AuditLogger] = None) -> NetworkStorage:
    """
    Create the storage façade for the configured mode.

    Simulation mode uses a local ``MemoryNetwork`` persisted to the
    simulation state file; otherwise the REST gateway is used.
    """
    if config.simulation_mode:
        return MemoryNetwork(state_file=config.network.simulation_state_file)
    return GatewayClient(config.network, retry_config=config.retry, logger=logger)


@dataclass
class CommandContext:
    """Everything a command needs, built once per invocation."""

    config: SystemConfig
    storage: NetworkStorage
    logger: AuditLogger
    validator: DomainValidator
    deriver: IdentityDeriver
    keystore: KeyStore

    @property
    def language(self) -> str:
        return self.config.language

    def message(self, key: str, **kwargs) -> str:
        return get_message(key, self.language, **kwargs)

    def domain(self, raw: str) -> str:
        return self.validator.canonicalize(raw)

    def resolver(self) -> DomainResolver:
        return DomainResolver(self.storage, self.deriver, self.logger)

    def mutator(self) -> RecordMutator:
        return RecordMutator(self.storage, self.resolver(), self.deriver, self.logger)

    def registrar(self) -> Registrar:
        return Registrar(self.storage, self.deriver, self.validator, self.keystore, self.logger)


def resolve_config(args: argparse.Namespace) -> Optional[SystemConfig]:
    """Load the configuration for a command and apply overrides."""
    config_path = getattr(args, "config", None)
    if config_path:
        config = load_config_from_file(Path(config_path))
        if config is None:
            print(
                get_message("config.load_failed", args.language or "en", path=config_path),
                file=sys.stderr,
            )
            return None
    else:
        config = create_default_config()

    config = apply_environment(config, os.environ)
    if getattr(args, "dry_run", False):
        config.simulation_mode = True
    if getattr(args, "language", None):
        config.language = args.language
    return config


def report_error(error: AntnsError, language: str, domain: str = "", informational: bool = False) -> int:
    """
    Print a user-facing message for an error and pick the exit code.

    Resolution outcomes (not registered, corrupt, no records, no target)
    exit with 0 for read commands since they answer the query.
    """
    if isinstance(error, RegisterNotFoundError):
        key = "lookup.not_registered"
    elif isinstance(error, CorruptRegistrationError):
        key = "lookup.corrupt_registration"
    elif isinstance(error, NoValidRecordsError):
        key = "lookup.no_records"
    elif isinstance(error, NoTargetRecordError):
        key = "lookup.no_target"
    else:
        key = None

    if key is not None:
        print(get_message(key, language, domain=domain))
        return 0 if informational else 1

    if isinstance(error, StorageError):
        message = get_message("lookup.network_error", language, kind=error.kind.value, message=error.message)
    elif isinstance(error, ValidationError):
        message = get_message("validation.invalid", language, message=error.message)
    elif isinstance(error, IndexOutOfRangeError):
        message = get_message("records.index_out_of_range", language, message=error.message)
    elif isinstance(error, NotDomainOwnerError):
        message = get_message("records.not_owner", language, domain=domain)
    elif isinstance(error, DomainAlreadyRegisteredError):
        message = get_message("names.already_registered", language, domain=domain)
    elif isinstance(error, PersistenceError) and error.code == "key_not_found":
        message = get_message("records.no_key", language, domain=domain)
    elif isinstance(error, VaultError) and error.code == "missing_secret":
        message = get_message("keys.secret_missing", language)
    elif isinstance(error, VaultError):
        message = get_message("keys.invalid_backup", language, message=error.message)
    else:
        message = f"✗ {error.message}"
    print(message, file=sys.stderr)
    return 1


Handler = Callable[[CommandContext, argparse.Namespace], Awaitable[int]]


async def _execute(config: SystemConfig, args: argparse.Namespace, handler: Handler, informational: bool) -> int:
    logger = create_logger(config, getattr(args, "verbose", False))

    if config.startup_self_test:
        result = await run_self_test(config, print_output=args.verbose, language=config.language)
        if not result.success:
            print(get_message("selftest.failed", config.language), file=sys.stderr)
            return 1

    if config.simulation_mode:
        print(get_message("simulation.enabled", config.language))

    domain = getattr(args, "domain", "") or ""
    try:
        deriver = IdentityDeriver(config.identity.register_key_hex)
        async with create_storage(config, logger) as storage:
            context = CommandContext(
                config=config,
                storage=storage,
                logger=logger,
                validator=DomainValidator(config.server.domain_suffixes),
                deriver=deriver,
                keystore=KeyStore(config.keystore.keys_dir),
            )
            if domain:
                try:
                    domain = context.domain(domain)
                    args.domain = domain
                except ValidationError as e:
                    return report_error(e, config.language, domain)
            return await handler(context, args)
    except AntnsError as e:
        return report_error(e, config.language, domain, informational)


def run_command(args: argparse.Namespace, handler: Handler, informational: bool = False) -> int:
    """Build the configuration and run an async command handler."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(_execute(config, args, handler, informational))


# names


async def names_register(ctx: CommandContext, args: argparse.Namespace) -> int:
    print(ctx.message("names.registering", domain=args.domain))
    registration = await ctx.registrar().register(args.domain)
    print(ctx.message("names.registered"))
    print(ctx.message("names.register_address", address=registration.register_address))
    print(ctx.message("names.owner", public_key=registration.public_key_hex))
    print(ctx.message("names.key_saved", path=ctx.keystore.key_path(registration.domain)))
    return 0


def _print_records(records: list[DnsRecord]) -> None:
    for index, record in enumerate(records):
        print(f"  [{index}] {record.record_type} {record.name} {record.value}")


async def names_lookup(ctx: CommandContext, args: argparse.Namespace) -> int:
    resolver = ctx.resolver()
    print(ctx.message("names.looking_up", domain=args.domain))

    if args.quick:
        target = await resolver.quick_lookup(args.domain)
        print(ctx.message("names.quick_warning"))
        print(ctx.message("names.target", target=target))
        return 0

    resolved = await resolver.lookup_records(args.domain)
    print(ctx.message("names.owner", public_key=resolved.owner_public_key))
    print(ctx.message("names.records_header", domain=args.domain))
    _print_records(list(resolved.records))

    target = find_target(resolved.records)
    if target is None:
        print(ctx.message("lookup.no_target", domain=args.domain))
    else:
        print(ctx.message("names.target", target=target))
    return 0


async def names_history(ctx: CommandContext, args: argparse.Namespace) -> int:
    history = await ctx.resolver().get_history(args.domain)
    print(ctx.message("names.history_header", domain=args.domain))

    for number, entry in enumerate(history, start=1):
        print()
        if isinstance(entry, OwnerEntry):
            print(ctx.message("names.history_owner", number=number))
            print(f"  Public Key: {entry.public_key}")
            print(f"  Chunk: {entry.chunk_address}")
            continue

        status = ctx.message(f"status.{entry.status.value}")
        print(ctx.message("names.history_entry", number=number, status=status))
        print(f"  Chunk: {entry.chunk_address}")
        if entry.records is not None:
            _print_records(list(entry.records))
        if entry.status == EntryStatus.SPAM:
            print(ctx.message("names.history_spam_reason"))
        elif entry.status == EntryStatus.CORRUPTED:
            print(ctx.message("names.history_corrupt_reason"))

    stats = calculate_history_stats(history)
    print()
    print(ctx.message(
        "names.stats",
        total=stats.total,
        valid=stats.valid,
        spam=stats.spam,
        corrupted=stats.corrupted,
    ))
    return 0


async def names_list(ctx: CommandContext, args: argparse.Namespace) -> int:
    domains = ctx.keystore.list_domains()
    if not domains:
        print(ctx.message("names.list_empty"))
        return 0
    print(ctx.message("names.list_header"))
    for metadata in domains:
        print(f"  {metadata.domain}  {metadata.public_key}  ({metadata.created})")
    return 0


async def names_export(ctx: CommandContext, args: argparse.Namespace) -> int:
    keypair = ctx.keystore.require_key(args.domain)
    print(ctx.message("names.export_warning"))
    print(keypair.private_key_hex)
    return 0


async def names_import(ctx: CommandContext, args: argparse.Namespace) -> int:
    metadata = ctx.keystore.import_key(args.domain, args.private_key)
    print(ctx.message("names.imported", domain=metadata.domain, public_key=metadata.public_key))
    return 0


# records


async def records_list(ctx: CommandContext, args: argparse.Namespace) -> int:
    resolved = await ctx.resolver().lookup_records(args.domain)
    if not resolved.records:
        print(ctx.message("records.empty", domain=args.domain))
        return 0
    print(ctx.message("names.records_header", domain=args.domain))
    _print_records(list(resolved.records))
    return 0


async def _publish(ctx: CommandContext, args: argparse.Namespace, edit) -> int:
    keypair = ctx.keystore.require_key(args.domain)
    print(ctx.message("records.publishing", domain=args.domain))
    chunk = await edit(ctx.mutator(), keypair)
    print(ctx.message("records.published", chunk=chunk))
    return 0


async def records_add(ctx: CommandContext, args: argparse.Namespace) -> int:
    record = DnsRecord(record_type=args.record_type, name=args.name, value=args.value)
    return await _publish(
        ctx, args, lambda mutator, keypair: mutator.add_record(args.domain, record, keypair)
    )


async def records_delete(ctx: CommandContext, args: argparse.Namespace) -> int:
    return await _publish(
        ctx, args, lambda mutator, keypair: mutator.delete_record(args.domain, args.index, keypair)
    )


async def records_update(ctx: CommandContext, args: argparse.Namespace) -> int:
    record = DnsRecord(record_type=args.record_type, name=args.name, value=args.value)
    return await _publish(
        ctx,
        args,
        lambda mutator, keypair: mutator.update_record(args.domain, args.index, record, keypair),
    )


async def records_set_target(ctx: CommandContext, args: argparse.Namespace) -> int:
    return await _publish(
        ctx, args, lambda mutator, keypair: mutator.set_target(args.domain, args.target, keypair)
    )


# keys


def _vault(ctx: CommandContext) -> KeyVault:
    return KeyVault(ctx.storage, ctx.keystore, os.environ.get("SECRET_KEY", ""), ctx.logger, ctx.validator)


async def keys_backup(ctx: CommandContext, args: argparse.Namespace) -> int:
    backup = await _vault(ctx).backup()
    print(ctx.message("keys.backed_up", count=len(backup.keys)))
    return 0


async def keys_restore(ctx: CommandContext, args: argparse.Namespace) -> int:
    restored = await _vault(ctx).restore()
    print(ctx.message("keys.restored", count=len(restored), domains=", ".join(restored)))
    return 0


async def keys_status(ctx: CommandContext, args: argparse.Namespace) -> int:
    try:
        backup = await _vault(ctx).fetch()
    except StorageError as e:
        if e.kind != StorageErrorKind.NOT_FOUND:
            raise
        print(ctx.message("keys.no_backup"))
        return 0
    print(ctx.message(
        "keys.status",
        created_at=backup.created_at,
        version=backup.version,
        count=len(backup.keys),
    ))
    for domain in sorted(backup.keys):
        print(f"  {domain}")
    return 0


# server


def _apply_server_overrides(config: SystemConfig, args: argparse.Namespace) -> None:
    if args.dns_port is not None:
        config.server.dns_port = args.dns_port
    if args.proxy_port is not None:
        config.server.proxy_port = args.proxy_port
    if args.upstream:
        config.server.upstream_template = args.upstream
    if args.cache_ttl is not None:
        config.server.cache_ttl_seconds = args.cache_ttl


async def server_start(ctx: CommandContext, args: argparse.Namespace) -> int:
    server_config = ctx.config.server
    print(ctx.message("server.starting"))
    print(ctx.message("server.dns_port", host=server_config.dns_host, port=server_config.dns_port))
    print(ctx.message("server.proxy_port", host=server_config.proxy_host, port=server_config.proxy_port))
    print(ctx.message("server.upstream", upstream=server_config.upstream_template))
    if server_config.cache_ttl_seconds > 0:
        print(ctx.message("server.cache_ttl", minutes=server_config.cache_ttl_seconds // 60))
    else:
        print(ctx.message("server.cache_disabled"))

    server = NamingServer(ctx.config, ctx.storage, ctx.logger)
    stop_event = asyncio.Event()
    install_signal_handlers(stop_event)
    try:
        await server.run(stop_event)
    except OSError as e:
        print(ctx.message("server.start_failed", error=e), file=sys.stderr)
        return 1
    print(ctx.message("server.stopped"))
    return 0


async def server_status(config: SystemConfig) -> int:
    server_config = config.server
    checks = (
        ("DNS", server_config.dns_host, server_config.dns_port),
        ("HTTP proxy", server_config.proxy_host, server_config.proxy_port),
    )
    running = 0
    for name, host, port in checks:
        if await probe_port(host, port):
            running += 1
            print(get_message("server.running", config.language, name=name, host=host, port=port))
        else:
            print(get_message("server.not_running", config.language, name=name, host=host, port=port))
    return 0 if running == len(checks) else 1


# Command dispatch


NAMES_HANDLERS = {
    "register": (names_register, False),
    "lookup": (names_lookup, True),
    "history": (names_history, True),
    "list": (names_list, True),
    "export": (names_export, False),
    "import": (names_import, False),
}

RECORDS_HANDLERS = {
    "list": (records_list, True),
    "add": (records_add, False),
    "delete": (records_delete, False),
    "update": (records_update, False),
    "set-target": (records_set_target, False),
}

KEYS_HANDLERS = {
    "backup": keys_backup,
    "restore": keys_restore,
    "status": keys_status,
}


def cmd_names(args: argparse.Namespace) -> int:
    """Handle the 'names' command group."""
    handler, informational = NAMES_HANDLERS[args.action]
    return run_command(args, handler, informational)


def cmd_records(args: argparse.Namespace) -> int:
    """Handle the 'records' command group."""
    handler, informational = RECORDS_HANDLERS[args.action]
    return run_command(args, handler, informational)


def cmd_keys(args: argparse.Namespace) -> int:
    """Handle the 'keys' command group."""
    return run_command(args, KEYS_HANDLERS[args.action])


def cmd_server(args: argparse.Namespace) -> int:
    """Handle the 'server' command group."""
    config = resolve_config(args)
    if config is None:
        return 1
    _apply_server_overrides(config, args)

    if args.action == "status":
        return asyncio.run(server_status(config))
    return asyncio.run(_execute(config, args, server_start, informational=False))


def cmd_self_test(args: argparse.Namespace) -> int:
    """Handle the 'self-test' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    result = asyncio.run(run_self_test(
        config=config,
        print_output=True,
        language=config.language,
    ))

    return 0 if result.success else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH
    language = args.language or "en"

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Language: {config.language}")
        print(f"  Simulation mode: {config.simulation_mode}")
        print(f"  Gateway: {config.network.gateway_url}")
        print(f"  Keys directory: {config.keystore.keys_dir}")
        print(f"  DNS: {config.server.dns_host}:{config.server.dns_port}")
        print(f"  Proxy: {config.server.proxy_host}:{config.server.proxy_port}")
        print(f"  Upstream: {config.server.upstream_template}")
        print(f"  Cache TTL: {config.server.cache_ttl_seconds}s")
        print(f"  Suffixes: {', '.join(config.server.domain_suffixes)}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(get_message("config.exists", language, path=config_path))
            return 1

        config = create_default_config(language=language)
        if save_config_to_file(config, config_path):
            print(get_message("config.created", language, path=config_path))
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(get_message("config.load_failed", language, path=config_path), file=sys.stderr)
            return 1

        validation = SelfTest(config).validate_config()
        for warning in validation.warnings:
            print(f"  - {warning}")
        if not validation.valid:
            for error in validation.errors:
                print(f"  ✗ {error}", file=sys.stderr)
            return 1

        print(get_message("config.valid", language, path=config_path))
        return 0

    return 1


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help="Output language (default: en)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - use a local simulated network",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )


def _add_record_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("record_type", help="Record type (TEXT or ANT)")
    parser.add_argument("name", help="Record name ('.' for the root)")
    parser.add_argument("value", help="Record value")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="antns",
        description="Decentralized naming system with signed, auditable record history",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'names' command group
    names_parser = subparsers.add_parser("names", help="Register, look up and audit domains")
    names_sub = names_parser.add_subparsers(dest="action", required=True)

    register_parser = names_sub.add_parser("register", help="Register a new domain")
    register_parser.add_argument("domain", help="Domain to register (e.g., alice.ant)")

    lookup_parser = names_sub.add_parser("lookup", help="Resolve a domain")
    lookup_parser.add_argument("domain", help="Domain to resolve")
    lookup_parser.add_argument(
        "--quick",
        action="store_true",
        help="Read only the register head (UNVERIFIED)",
    )

    history_parser = names_sub.add_parser("history", help="Show the full audited history")
    history_parser.add_argument("domain", help="Domain to audit")

    names_sub.add_parser("list", help="List locally owned domains")

    export_parser = names_sub.add_parser("export", help="Print a domain's private key")
    export_parser.add_argument("domain", help="Owned domain")

    import_parser = names_sub.add_parser("import", help="Import a domain's private key")
    import_parser.add_argument("domain", help="Domain the key belongs to")
    import_parser.add_argument("private_key", help="Hex-encoded private key")

    for sub in names_sub.choices.values():
        _add_common_options(sub)
    names_parser.set_defaults(func=cmd_names)

    # 'records' command group
    records_parser = subparsers.add_parser("records", help="Edit a domain's records")
    records_sub = records_parser.add_subparsers(dest="action", required=True)

    records_list_parser = records_sub.add_parser("list", help="List current records")
    records_list_parser.add_argument("domain", help="Domain")

    add_parser = records_sub.add_parser("add", help="Append a record")
    add_parser.add_argument("domain", help="Owned domain")
    _add_record_arguments(add_parser)

    delete_parser = records_sub.add_parser("delete", help="Delete the record at an index")
    delete_parser.add_argument("domain", help="Owned domain")
    delete_parser.add_argument("index", type=int, help="Zero-based record index")

    update_parser = records_sub.add_parser("update", help="Replace the record at an index")
    update_parser.add_argument("domain", help="Owned domain")
    update_parser.add_argument("index", type=int, help="Zero-based record index")
    _add_record_arguments(update_parser)

    target_parser = records_sub.add_parser("set-target", help="Point the root at a target")
    target_parser.add_argument("domain", help="Owned domain")
    target_parser.add_argument("target", help="Target address")

    for sub in records_sub.choices.values():
        _add_common_options(sub)
    records_parser.set_defaults(func=cmd_records)

    # 'server' command group
    server_parser = subparsers.add_parser("server", help="Local DNS responder and HTTP proxy")
    server_parser.add_argument("action", choices=["start", "status"], help="Server action")
    server_parser.add_argument("--dns-port", type=int, default=None, help="DNS listen port")
    server_parser.add_argument("--proxy-port", type=int, default=None, help="HTTP proxy listen port")
    server_parser.add_argument("--upstream", default=None, help="Upstream URL template with $ADDRESS")
    server_parser.add_argument("--cache-ttl", type=int, default=None, help="Cache TTL in seconds (0 disables)")
    _add_common_options(server_parser)
    server_parser.set_defaults(func=cmd_server)

    # 'keys' command group
    keys_parser = subparsers.add_parser("keys", help="Vault backup of owner keys (needs SECRET_KEY)")
    keys_parser.add_argument("action", choices=sorted(KEYS_HANDLERS), help="Vault action")
    _add_common_options(keys_parser)
    keys_parser.set_defaults(func=cmd_keys)

    # 'config' command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    # 'self-test' command
    self_test_parser = subparsers.add_parser(
        "self-test",
        help="Validate configuration and gateway connectivity",
    )
    _add_common_options(self_test_parser)
    self_test_parser.set_defaults(func=cmd_self_test)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
