"""
Backup and restore of domain keys through the network vault.

The backup payload is ``{"keys": {domain: private_key_hex},
"created_at": ISO-8601, "version": 1}``, stored under a vault key derived
from the wallet secret.
"""

import hashlib
import hmac
import json
from datetime import datetime, timezone
from typing import Optional

from .audit_logger import AuditLogger
from .domain_validator import DomainValidator
from .enums import LogLevel
from .exceptions import PersistenceError, ValidationError, VaultError
from .keystore import KeyStore
from .models import KeysBackup
from .storage import NetworkStorage


CONTENT_TYPE = "antns_keys"
BACKUP_VERSION = 1


def derive_vault_key(wallet_secret: str) -> str:
    """
    Derive the vault key for a wallet secret.

    Raises:
        VaultError: If the secret is empty
    """
    if not wallet_secret:
        raise VaultError(
            code="missing_secret",
            message="A wallet secret (SECRET_KEY) is required for vault access",
            details={},
        )
    return hmac.new(
        wallet_secret.encode("utf-8"),
        CONTENT_TYPE.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def encode_backup(backup: KeysBackup) -> bytes:
    return json.dumps(
        {"keys": backup.keys, "created_at": backup.created_at, "version": backup.version},
        ensure_ascii=False,
    ).encode("utf-8")


def decode_backup(data: bytes) -> KeysBackup:
    """
    Parse a backup payload.

    Raises:
        VaultError: If the payload is not UTF-8 or does not match the schema
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise VaultError(code="invalid_utf8", message=f"Backup is not valid UTF-8: {e}")
    except json.JSONDecodeError as e:
        raise VaultError(code="invalid_json", message=f"Backup is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise VaultError(code="schema_mismatch", message="Backup must be a JSON object")

    keys = raw.get("keys")
    created_at = raw.get("created_at")
    version = raw.get("version")
    if (
        not isinstance(keys, dict)
        or not all(isinstance(k, str) and isinstance(v, str) for k, v in keys.items())
        or not isinstance(created_at, str)
        or not isinstance(version, int)
        or isinstance(version, bool)
    ):
        raise VaultError(
            code="schema_mismatch",
            message="Backup does not match {keys, created_at, version}",
            details={"fields": sorted(raw.keys())},
        )

    return KeysBackup(keys=dict(keys), created_at=created_at, version=version)


class KeyVault:
    """Moves the local key store to and from the network vault."""

    COMPONENT = "vault"

    def __init__(
        self,
        storage: NetworkStorage,
        keystore: KeyStore,
        wallet_secret: str,
        logger: Optional[AuditLogger] = None,
        validator: Optional[DomainValidator] = None,
    ) -> None:
        self._storage = storage
        self._keystore = keystore
        self._validator = validator or DomainValidator()
        self._vault_key = derive_vault_key(wallet_secret)
        self._logger = logger

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, self.COMPONENT, message, data)

    async def backup(self) -> KeysBackup:
        """Upload every local key, replacing the previous backup."""
        backup = KeysBackup(
            keys=self._keystore.export_keys(),
            created_at=datetime.now(timezone.utc).isoformat(),
            version=BACKUP_VERSION,
        )
        await self._storage.put_vault(self._vault_key, CONTENT_TYPE, encode_backup(backup))
        self._log_info("Keys backed up", {"domains": sorted(backup.keys)})
        return backup

    async def fetch(self) -> KeysBackup:
        """Download and parse the current backup."""
        return decode_backup(await self._storage.get_vault(self._vault_key))

    async def restore(self) -> list[str]:
        """
        Write every key of the backup into the local key store.

        Existing local keys for the same domains are overwritten. Domain
        names are canonicalised, and nothing is written if any name is invalid.

        Returns:
            The restored canonical domain names, sorted

        Raises:
            VaultError: If the backup payload is malformed or holds an invalid
                domain name or key
        """
        backup = await self.fetch()
        keys: dict[str, str] = {}
        for name in sorted(backup.keys):
            try:
                keys[self._validator.canonicalize(name)] = backup.keys[name]
            except ValidationError as e:
                raise VaultError(
                    code="invalid_backup_domain",
                    message=f"Backup holds an invalid domain name: {e.message}",
                    details={"domain": name},
                )

        restored = []
        for domain in sorted(keys):
            try:
                self._keystore.import_key(domain, keys[domain])
            except PersistenceError as e:
                raise VaultError(
                    code="invalid_backup_key",
                    message=f"Backup entry for {domain} is unusable: {e.message}",
                    details={"domain": domain},
                )
            restored.append(domain)
        self._log_info("Keys restored", {"domains": restored})
        return restored
