"""
Domain validation and normalization module.

Converts user input and HTTP/DNS host names into the canonical form used
for identity derivation (lowercase, IDNA-encoded) and checks them against
the recognized naming suffixes.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from antns.enums import DomainValidationErrorCode
from antns.exceptions import ValidationError


# Valid domain characters: a-z, A-Z, 0-9, hyphen (-), dot (.), and non-ASCII for IDN
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'           # Control characters
    r'\s'                        # Whitespace
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'  # Special symbols not allowed
)

DEFAULT_SUFFIXES = (".ant", ".autonomi")


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


def strip_port(host: str) -> str:
    """
    Remove a trailing ``:port`` from an HTTP Host value.

    Bracketed IPv6 literals keep their brackets; a bare colon-less host is
    returned unchanged.
    """
    host = host.strip()
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    if host.count(":") == 1:
        name, _, port = host.partition(":")
        if port.isdigit() or port == "":
            return name
    return host


class DomainValidator:
    """
    Validates and normalizes naming-system domains.

    Handles:
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters and empty labels
    - Suffix validation against the recognized suffix list
    """

    def __init__(self, suffixes: Optional[list[str]] = None) -> None:
        """
        Initialize validator with recognized suffixes.

        Args:
            suffixes: Recognized suffixes including the leading dot (e.g. ['.ant'])
        """
        raw = suffixes if suffixes is not None else list(DEFAULT_SUFFIXES)
        self._suffixes = tuple(
            s.lower() if s.startswith(".") else f".{s.lower()}" for s in raw
        )

    @property
    def suffixes(self) -> tuple[str, ...]:
        return self._suffixes

    def has_known_suffix(self, name: str) -> bool:
        """True if ``name`` ends in a recognized suffix (case-insensitive)."""
        lowered = name.lower().rstrip(".")
        return any(lowered.endswith(suffix) for suffix in self._suffixes)

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.EMPTY_INPUT,
                    message="Domain input is empty",
                    details={"raw_input": raw_domain},
                ),
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.FORBIDDEN_CHARS,
                    message="Domain contains forbidden characters",
                    details={
                        "raw_input": raw_domain,
                        "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                    },
                ),
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR,
                    message=str(e.message),
                    details=e.details,
                ),
            )

        if not self.has_known_suffix(canonical):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.INVALID_SUFFIX,
                    message=f"Domain must end in one of {', '.join(self._suffixes)}",
                    details={"raw_input": raw_domain, "suffixes": list(self._suffixes)},
                ),
            )

        labels = canonical.split(".")
        if any(not label for label in labels) or len(labels) < 2:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.EMPTY_LABEL,
                    message="Domain contains an empty label",
                    details={"raw_input": raw_domain, "canonical": canonical},
                ),
            )

        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def canonicalize(self, raw_domain: str) -> str:
        """
        Validate a domain and return its canonical form.

        Raises:
            ValidationError: If the domain is not valid
        """
        result = self.validate(raw_domain)
        if not result.valid or result.canonical_domain is None:
            assert result.error is not None
            raise ValidationError(
                code=result.error.code.value,
                message=result.error.message,
                details=result.error.details,
            )
        return result.canonical_domain

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Args:
            domain: Domain string to normalize

        Returns:
            Canonical form of the domain (lowercase, IDNA if needed)

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower().rstrip(".")

        if any(ord(c) > 127 for c in domain_lower):
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )

        return domain_lower
