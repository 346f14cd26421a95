"""
Enumeration types for the AntNS naming system.

These enums provide type-safe constants for record types, history
classification, storage failure categories, and logging levels.
"""

from enum import Enum


class RecordType(Enum):
    """Supported DNS record types (matched case-insensitively)."""

    TEXT = "TEXT"
    ANT = "ANT"

    @classmethod
    def parse(cls, value: str) -> "RecordType":
        """Return the record type for ``value`` regardless of case."""
        return cls(value.upper())


class EntryStatus(Enum):
    """Classification of a register history entry."""

    VALID = "valid"
    SPAM = "spam"  # parsed, but signature invalid
    CORRUPTED = "corrupted"  # failed to download or parse


class StorageErrorKind(Enum):
    """Failure categories surfaced by the storage façade."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    SERVER_ERROR = "server_error"
    PAYMENT_REQUIRED = "payment_required"
    PROTOCOL_ERROR = "protocol_error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    FORBIDDEN_CHARS = "forbidden_chars"
    INVALID_SUFFIX = "invalid_suffix"
    IDNA_ERROR = "idna_error"
    EMPTY_INPUT = "empty_input"
    EMPTY_LABEL = "empty_label"
