"""
Register identity derivation.

Every participant derives the same register key for a domain from one
network-wide shared key, so resolution needs no directory service.
"""

import hashlib
import hmac
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ed25519

from .exceptions import InvalidConfigurationError
from .signing import KEY_LENGTH, DomainKeypair


# Publicly known key shared by all participants of the network.
DEFAULT_REGISTER_KEY_HEX = "3c2ad130b7863b34b17cf11b474fff302522f427e8818a3543d105d91cdb384c"


@dataclass(frozen=True)
class RegisterIdentity:
    """The derived register key of one domain."""

    domain: str
    keypair: DomainKeypair

    @property
    def address(self) -> str:
        """Register address (hex public key of the derived identity)."""
        return self.keypair.public_key_hex

    def sign(self, message: bytes) -> str:
        return self.keypair.sign(message).hex()


def parse_shared_key(shared_key_hex: str) -> bytes:
    """
    Validate and decode the shared register key.

    Raises:
        InvalidConfigurationError: If the key is not 32 bytes of hex or is all zero
    """
    try:
        raw = bytes.fromhex(shared_key_hex.strip())
    except (ValueError, AttributeError) as e:
        raise InvalidConfigurationError(
            code="invalid_register_key",
            message=f"Shared register key is not valid hex: {e}",
            details={"length": len(shared_key_hex or "")},
        )
    if len(raw) != KEY_LENGTH:
        raise InvalidConfigurationError(
            code="invalid_register_key",
            message=f"Shared register key must be {KEY_LENGTH} bytes, got {len(raw)}",
            details={"length": len(raw)},
        )
    if not any(raw):
        raise InvalidConfigurationError(
            code="invalid_register_key",
            message="Shared register key must not be all zero",
            details={},
        )
    return raw


class IdentityDeriver:
    """
    Maps domain names to deterministic register identities.

    The shared key is injected once at construction and validated eagerly,
    so a malformed key fails at startup rather than on the first lookup.
    """

    def __init__(self, shared_key_hex: str = DEFAULT_REGISTER_KEY_HEX) -> None:
        """
        Initialize the deriver.

        Args:
            shared_key_hex: Hex-encoded 32-byte network-wide key

        Raises:
            InvalidConfigurationError: If the key is malformed
        """
        self._shared_key = parse_shared_key(shared_key_hex)

    def derive(self, domain: str) -> RegisterIdentity:
        """
        Derive the register identity for an already canonical domain.

        Args:
            domain: Canonical domain name (e.g. 'alice.ant')

        Returns:
            RegisterIdentity whose address any participant can recompute
        """
        seed = hmac.new(self._shared_key, domain.encode("utf-8"), hashlib.sha256).digest()
        keypair = DomainKeypair(ed25519.Ed25519PrivateKey.from_private_bytes(seed))
        return RegisterIdentity(domain=domain, keypair=keypair)

    def register_address(self, domain: str) -> str:
        return self.derive(domain).address
