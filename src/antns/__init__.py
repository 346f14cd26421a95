"""
AntNS - Decentralized naming system on content-addressed storage.

Domain names map to target addresses through an append-only register of
signed record sets. Anyone can replay a domain's history and verify which
entries are authentic; the last authentic record set wins.
"""

__version__ = "0.1.0"
__author__ = "AntNS Team"

from antns.exceptions import (
    AntnsError,
    ValidationError,
    InvalidConfigurationError,
    StorageError,
    RegisterNotFoundError,
    CorruptRegistrationError,
    MalformedDocumentError,
    SignatureInvalidError,
    NoValidRecordsError,
    NoTargetRecordError,
    IndexOutOfRangeError,
    DomainAlreadyRegisteredError,
    NotDomainOwnerError,
    PersistenceError,
    VaultError,
)
from antns.enums import (
    RecordType,
    EntryStatus,
    StorageErrorKind,
    LogLevel,
    DomainValidationErrorCode,
)
from antns.models import (
    DnsRecord,
    DomainOwnerDocument,
    DomainRecordsDocument,
    OwnerEntry,
    RecordsEntry,
    HistoryEntry,
    HistoryStats,
    ResolvedRecords,
    DomainResolution,
    CachedLookup,
    DomainRegistration,
    KeyMetadata,
    KeysBackup,
)
from antns.config import (
    NetworkConfig,
    IdentityConfig,
    ServerConfig,
    KeyStoreConfig,
    RetryConfig,
    LoggingConfig,
    SystemConfig,
)
from antns.codec import (
    canonical_records,
    encode_owner,
    encode_records,
    decode_owner,
    decode_records,
)
from antns.signing import (
    DomainKeypair,
    load_verifying_key,
    sign_records,
    verify_records,
)
from antns.identity import (
    IdentityDeriver,
    RegisterIdentity,
    DEFAULT_REGISTER_KEY_HEX,
)
from antns.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from antns.storage import (
    NetworkStorage,
    RegisterHistory,
    PagedRegisterHistory,
)
from antns.memory_network import MemoryNetwork
from antns.gateway_client import GatewayClient
from antns.retry_manager import (
    RetryManager,
    RetryResult,
)
from antns.audit_logger import (
    AuditLogger,
    LogEntry,
)
from antns.resolver import (
    DomainResolver,
    calculate_history_stats,
    extract_target,
)
from antns.mutator import RecordMutator
from antns.registrar import Registrar
from antns.keystore import KeyStore
from antns.vault import KeyVault
from antns.cache import ResolutionCache
from antns.dns_server import DnsResponder, DnsServer
from antns.http_proxy import HttpProxyServer, ProxyService
from antns.server import NamingServer
from antns.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from antns.self_test import (
    SelfTest,
    SelfTestResult,
    EndpointTestResult,
    ConfigValidationResult,
    run_self_test,
)
from antns.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Exceptions
    "AntnsError",
    "ValidationError",
    "InvalidConfigurationError",
    "StorageError",
    "RegisterNotFoundError",
    "CorruptRegistrationError",
    "MalformedDocumentError",
    "SignatureInvalidError",
    "NoValidRecordsError",
    "NoTargetRecordError",
    "IndexOutOfRangeError",
    "DomainAlreadyRegisteredError",
    "NotDomainOwnerError",
    "PersistenceError",
    "VaultError",
    # Enums
    "RecordType",
    "EntryStatus",
    "StorageErrorKind",
    "LogLevel",
    "DomainValidationErrorCode",
    # Models
    "DnsRecord",
    "DomainOwnerDocument",
    "DomainRecordsDocument",
    "OwnerEntry",
    "RecordsEntry",
    "HistoryEntry",
    "HistoryStats",
    "ResolvedRecords",
    "DomainResolution",
    "CachedLookup",
    "DomainRegistration",
    "KeyMetadata",
    "KeysBackup",
    # Configuration
    "NetworkConfig",
    "IdentityConfig",
    "ServerConfig",
    "KeyStoreConfig",
    "RetryConfig",
    "LoggingConfig",
    "SystemConfig",
    # Codec and signatures
    "canonical_records",
    "encode_owner",
    "encode_records",
    "decode_owner",
    "decode_records",
    "DomainKeypair",
    "load_verifying_key",
    "sign_records",
    "verify_records",
    # Identity
    "IdentityDeriver",
    "RegisterIdentity",
    "DEFAULT_REGISTER_KEY_HEX",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Storage
    "NetworkStorage",
    "RegisterHistory",
    "PagedRegisterHistory",
    "MemoryNetwork",
    "GatewayClient",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Resolution and mutation
    "DomainResolver",
    "calculate_history_stats",
    "extract_target",
    "RecordMutator",
    "Registrar",
    "KeyStore",
    "KeyVault",
    "ResolutionCache",
    # Servers
    "DnsResponder",
    "DnsServer",
    "HttpProxyServer",
    "ProxyService",
    "NamingServer",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "EndpointTestResult",
    "ConfigValidationResult",
    "run_self_test",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
]
