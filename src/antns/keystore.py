"""
Key Store module for locally owned domains.

Each owned domain has two files in the key directory:

- ``domain-key-<domain>.txt``  hex-encoded private signing key
- ``domain-meta-<domain>.json`` ``{"domain", "publicKey", "created"}``

The metadata file is what ``list_domains`` reads, so listing works without
loading any private key.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError
from .models import KeyMetadata
from .signing import DomainKeypair


KEY_PREFIX = "domain-key-"
META_PREFIX = "domain-meta-"


class KeyStore:
    """
    File-backed storage of domain owner keys.

    Saving an existing domain overwrites both files, which makes key
    import and backup restore idempotent per domain.
    """

    def __init__(self, keys_dir: Path) -> None:
        """
        Initialize the key store.

        Args:
            keys_dir: Directory holding key and metadata files
        """
        self._keys_dir = keys_dir

    @property
    def keys_dir(self) -> Path:
        """Get the key directory."""
        return self._keys_dir

    def key_path(self, domain: str) -> Path:
        return self._keys_dir / f"{KEY_PREFIX}{domain}.txt"

    def meta_path(self, domain: str) -> Path:
        return self._keys_dir / f"{META_PREFIX}{domain}.json"

    def save_key(self, domain: str, keypair: DomainKeypair) -> KeyMetadata:
        """
        Persist a domain's private key and metadata.

        Raises:
            PersistenceError: If the files cannot be written
        """
        metadata = KeyMetadata(
            domain=domain,
            public_key=keypair.public_key_hex,
            created=datetime.now(timezone.utc).isoformat(),
        )

        self._keys_dir.mkdir(parents=True, exist_ok=True)
        key_path = self.key_path(domain)
        try:
            key_path.write_text(keypair.private_key_hex, encoding="utf-8")
            try:
                os.chmod(key_path, 0o600)
            except OSError:
                pass  # not supported on every filesystem
            with open(self.meta_path(domain), "w", encoding="utf-8") as f:
                json.dump(
                    {
                        "domain": metadata.domain,
                        "publicKey": metadata.public_key,
                        "created": metadata.created,
                    },
                    f,
                    indent=2,
                )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write key files: {e}",
                details={"domain": domain, "keys_dir": str(self._keys_dir)},
            )

        return metadata

    def import_key(self, domain: str, private_key_hex: str) -> KeyMetadata:
        """
        Store a key given as hex, overwriting any existing key.

        Raises:
            PersistenceError: If the key is not valid Ed25519 key material
        """
        try:
            keypair = DomainKeypair.from_private_hex(private_key_hex)
        except ValueError as e:
            raise PersistenceError(
                code="invalid_key",
                message=f"Invalid private key for {domain}: {e}",
                details={"domain": domain},
            )
        return self.save_key(domain, keypair)

    def load_key(self, domain: str) -> Optional[DomainKeypair]:
        """
        Load a domain's keypair.

        Returns:
            The keypair, or None if no key file exists

        Raises:
            PersistenceError: If the key file is unreadable or malformed
        """
        key_path = self.key_path(domain)
        if not key_path.exists():
            return None

        try:
            raw = key_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read key file: {e}",
                details={"file_path": str(key_path)},
            )

        try:
            return DomainKeypair.from_private_hex(raw)
        except ValueError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Key file is corrupt: {e}",
                details={"file_path": str(key_path)},
            )

    def require_key(self, domain: str) -> DomainKeypair:
        """
        Load a domain's keypair or fail.

        Raises:
            PersistenceError: If no key is stored for the domain
        """
        keypair = self.load_key(domain)
        if keypair is None:
            raise PersistenceError(
                code="key_not_found",
                message=f"No local key for {domain}",
                details={"domain": domain, "keys_dir": str(self._keys_dir)},
            )
        return keypair

    def load_metadata(self, domain: str) -> Optional[KeyMetadata]:
        meta_path = self.meta_path(domain)
        if not meta_path.exists():
            return None
        try:
            with open(meta_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return KeyMetadata(
                domain=raw["domain"],
                public_key=raw["publicKey"],
                created=raw["created"],
            )
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to read key metadata: {e}",
                details={"file_path": str(meta_path)},
            )

    def list_domains(self) -> list[KeyMetadata]:
        """
        List locally owned domains, sorted by name.

        Unreadable metadata files are skipped.
        """
        if not self._keys_dir.is_dir():
            return []

        result = []
        for path in sorted(self._keys_dir.glob(f"{META_PREFIX}*.json")):
            domain = path.name[len(META_PREFIX):-len(".json")]
            try:
                metadata = self.load_metadata(domain)
            except PersistenceError:
                continue
            if metadata is not None:
                result.append(metadata)
        return result

    def export_keys(self) -> dict[str, str]:
        """Return ``{domain: private_key_hex}`` for every stored key."""
        keys = {}
        for metadata in self.list_domains():
            keypair = self.load_key(metadata.domain)
            if keypair is not None:
                keys[metadata.domain] = keypair.private_key_hex
        return keys
