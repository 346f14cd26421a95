"""
Ed25519 signing and verification of record sets.

Signatures cover the canonical serialization produced by
``codec.canonical_records``. Verification is total: malformed hex, wrong
lengths and bad keys all yield False rather than an exception, so it can
be applied to attacker-controlled register entries directly.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from .codec import canonical_records
from .models import DnsRecord


SIGNATURE_LENGTH = 64
KEY_LENGTH = 32


def _public_hex(public_key: ed25519.Ed25519PublicKey) -> str:
    return public_key.public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw
    ).hex()


@dataclass(frozen=True)
class DomainKeypair:
    """An Ed25519 keypair owning a domain."""

    private_key: ed25519.Ed25519PrivateKey

    @classmethod
    def generate(cls) -> "DomainKeypair":
        return cls(ed25519.Ed25519PrivateKey.generate())

    @classmethod
    def from_private_hex(cls, private_key_hex: str) -> "DomainKeypair":
        """
        Load a keypair from a hex-encoded 32-byte seed.

        Raises:
            ValueError: If the hex string is not a valid 32-byte key
        """
        raw = bytes.fromhex(private_key_hex.strip())
        if len(raw) != KEY_LENGTH:
            raise ValueError(f"private key must be {KEY_LENGTH} bytes, got {len(raw)}")
        return cls(ed25519.Ed25519PrivateKey.from_private_bytes(raw))

    @property
    def public_key(self) -> ed25519.Ed25519PublicKey:
        return self.private_key.public_key()

    @property
    def public_key_hex(self) -> str:
        return _public_hex(self.public_key)

    @property
    def private_key_hex(self) -> str:
        return self.private_key.private_bytes(
            serialization.Encoding.Raw,
            serialization.PrivateFormat.Raw,
            serialization.NoEncryption(),
        ).hex()

    def sign(self, message: bytes) -> bytes:
        return self.private_key.sign(message)


def load_verifying_key(public_key_hex: str) -> Optional[ed25519.Ed25519PublicKey]:
    """
    Parse a hex-encoded verifying key.

    Returns:
        The public key, or None if the input is not valid key material
    """
    try:
        raw = bytes.fromhex(public_key_hex)
    except (ValueError, TypeError):
        return None
    if len(raw) != KEY_LENGTH:
        return None
    try:
        return ed25519.Ed25519PublicKey.from_public_bytes(raw)
    except ValueError:
        return None


def sign_records(records: Sequence[DnsRecord], keypair: DomainKeypair) -> str:
    """
    Sign a record list.

    Args:
        records: Ordered record list
        keypair: The domain owner's keypair

    Returns:
        Hex-encoded 64-byte signature
    """
    return keypair.sign(canonical_records(records)).hex()


def verify_records(
    records: Sequence[DnsRecord],
    signature_hex: str,
    verifying_key: ed25519.Ed25519PublicKey,
) -> bool:
    """
    Check a signature over a record list.

    Args:
        records: Ordered record list as decoded from the document
        signature_hex: Hex-encoded signature
        verifying_key: The owner's public key

    Returns:
        True if the signature is authentic, False for any failure
    """
    try:
        signature = bytes.fromhex(signature_hex)
    except (ValueError, TypeError):
        return False
    if len(signature) != SIGNATURE_LENGTH:
        return False

    try:
        verifying_key.verify(signature, canonical_records(records))
        return True
    except InvalidSignature:
        return False
    except (ValueError, TypeError, AttributeError):
        return False
