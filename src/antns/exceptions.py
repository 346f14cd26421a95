"""
Exception classes for the AntNS naming system.

All exceptions inherit from AntnsError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional

from .enums import StorageErrorKind


class AntnsError(Exception):
    """Base exception for all AntNS errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AntnsError):
    """Raised when a domain name or record fails validation."""

    pass


class InvalidConfigurationError(AntnsError):
    """Raised at startup when configuration values are unusable."""

    pass


class StorageError(AntnsError):
    """
    Raised by the storage façade when a network operation fails.

    The ``kind`` attribute carries the structured failure category so
    callers never have to inspect message text.
    """

    def __init__(
        self,
        kind: StorageErrorKind,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.kind = kind
        super().__init__(code=kind.value, message=message, details=details)

    @property
    def is_transient(self) -> bool:
        """True if retrying the same operation may succeed."""
        return self.kind in (
            StorageErrorKind.TIMEOUT,
            StorageErrorKind.UNREACHABLE,
            StorageErrorKind.SERVER_ERROR,
        )


class RegisterNotFoundError(AntnsError):
    """Raised when a domain's register has no history (never registered)."""

    pass


class CorruptRegistrationError(AntnsError):
    """Raised when the first register entry is not a valid owner document."""

    pass


class MalformedDocumentError(AntnsError):
    """Raised when a chunk cannot be decoded as the expected document."""

    pass


class SignatureInvalidError(AntnsError):
    """
    A records document that does not verify against the owner key.

    History replay never raises this: such entries are classified as spam
    and skipped. The class completes the error taxonomy for callers that
    turn an entry classification into an error.
    """

    pass


class NoValidRecordsError(AntnsError):
    """Raised when no authentic records document exists in a register."""

    pass


class NoTargetRecordError(AntnsError):
    """Raised when the authoritative record set has no root ANT record."""

    pass


class IndexOutOfRangeError(AntnsError):
    """Raised when a mutation addresses a record index that does not exist."""

    pass


class DomainAlreadyRegisteredError(AntnsError):
    """Raised when registering a domain whose register already exists."""

    pass


class NotDomainOwnerError(AntnsError):
    """Raised when the local signing key does not own the domain."""

    pass


class PersistenceError(AntnsError):
    """Raised when local key files cannot be read or written."""

    pass


class VaultError(AntnsError):
    """Raised when a key backup payload is missing or malformed."""

    pass
