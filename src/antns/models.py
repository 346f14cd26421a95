"""
Data models for the AntNS naming system.

This module defines the documents exchanged over the network, the
classified register history, resolution results, and local key metadata.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import EntryStatus


@dataclass(frozen=True)
class DnsRecord:
    """A single typed record in a domain's record set."""

    record_type: str  # 'TEXT' or 'ANT', case-insensitive
    name: str  # '.' denotes the root
    value: str


@dataclass(frozen=True)
class DomainOwnerDocument:
    """Owner document, always the first entry of a domain register."""

    public_key: str  # hex-encoded Ed25519 verifying key


@dataclass(frozen=True)
class DomainRecordsDocument:
    """A signed, complete record set."""

    records: tuple[DnsRecord, ...]
    signature: str  # hex


@dataclass(frozen=True)
class OwnerEntry:
    """History entry #1: the owner document."""

    public_key: str
    chunk_address: str

    @property
    def status(self) -> EntryStatus:
        return EntryStatus.VALID


@dataclass(frozen=True)
class RecordsEntry:
    """A subsequent history entry with its verification outcome."""

    chunk_address: str
    records: Optional[tuple[DnsRecord, ...]]
    signature: Optional[str]
    is_valid: bool

    @property
    def status(self) -> EntryStatus:
        if self.is_valid:
            return EntryStatus.VALID
        if self.records is not None:
            return EntryStatus.SPAM
        return EntryStatus.CORRUPTED


HistoryEntry = Union[OwnerEntry, RecordsEntry]


@dataclass(frozen=True)
class HistoryStats:
    """Counts over a classified history (owner entry counts as valid)."""

    total: int
    valid: int
    spam: int
    corrupted: int


@dataclass(frozen=True)
class ResolvedRecords:
    """The authoritative record set of a domain and where it came from."""

    domain: str
    owner_public_key: str
    records: tuple[DnsRecord, ...]
    chunk_address: str


@dataclass(frozen=True)
class DomainResolution:
    """The resolved state of a domain."""

    domain: str
    target: str
    owner_public_key: str


@dataclass
class CachedLookup:
    """A memoised resolution held by the proxy cache."""

    target: str
    timestamp: float


@dataclass(frozen=True)
class DomainRegistration:
    """Result of registering a new domain."""

    domain: str
    register_address: str
    owner_chunk_address: str
    private_key_hex: str
    public_key_hex: str


@dataclass
class KeyMetadata:
    """Companion metadata stored next to a domain's private key."""

    domain: str
    public_key: str
    created: str  # ISO-8601


@dataclass
class KeysBackup:
    """Backup payload stored in the key vault."""

    keys: dict[str, str] = field(default_factory=dict)
    created_at: str = ""
    version: int = 1
