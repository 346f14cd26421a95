"""
In-memory implementation of the storage façade.

Used by the test suite and by the CLI's simulation mode. When a state
file is given, chunks, registers and vault entries survive between
process runs so simulated domains can be registered and edited across
separate commands.
"""

import hashlib
import json
from pathlib import Path
from typing import Optional

from .enums import StorageErrorKind
from .exceptions import StorageError
from .identity import RegisterIdentity
from .signing import load_verifying_key
from .storage import NetworkStorage, PagedRegisterHistory, RegisterHistory


class MemoryNetwork(NetworkStorage):
    """
    Content-addressed chunks and append-only registers held in dicts.

    Writes to a register must be signed by its identity, mirroring the
    network's own authorisation rule. Failures can be injected per
    operation or per chunk address for testing.
    """

    def __init__(self, state_file: Optional[Path] = None) -> None:
        """
        Initialize the network.

        Args:
            state_file: Optional JSON file used to persist the simulated network
        """
        self._state_file = state_file
        self._chunks: dict[str, bytes] = {}
        self._registers: dict[str, list[str]] = {}
        self._vault: dict[str, tuple[str, bytes]] = {}
        self._injected: dict[str, list[StorageError]] = {}
        self._failing_chunks: dict[str, StorageErrorKind] = {}
        self.write_count = 0
        self.read_count = 0

        if state_file is not None and state_file.exists():
            self._load()

    # Failure injection

    def inject_failure(self, operation: str, kind: StorageErrorKind, times: int = 1) -> None:
        """Make the next ``times`` calls of ``operation`` fail with ``kind``."""
        errors = self._injected.setdefault(operation, [])
        for _ in range(times):
            errors.append(StorageError(kind, f"injected {kind.value} on {operation}"))

    def fail_chunk(self, address: str, kind: StorageErrorKind = StorageErrorKind.TIMEOUT) -> None:
        """Make every download of ``address`` fail with ``kind``."""
        self._failing_chunks[address] = kind

    def _maybe_fail(self, operation: str) -> None:
        errors = self._injected.get(operation)
        if errors:
            raise errors.pop(0)

    # Chunks

    async def put_chunk(self, data: bytes) -> str:
        self._maybe_fail("put_chunk")
        self.write_count += 1
        address = hashlib.sha256(data).hexdigest()
        self._chunks[address] = bytes(data)
        self._save()
        return address

    async def get_chunk(self, address: str) -> bytes:
        self._maybe_fail("get_chunk")
        self.read_count += 1
        if address in self._failing_chunks:
            kind = self._failing_chunks[address]
            raise StorageError(kind, f"chunk {address} unavailable", {"address": address})
        try:
            return self._chunks[address]
        except KeyError:
            raise StorageError(
                StorageErrorKind.NOT_FOUND,
                f"chunk {address} not found",
                {"address": address},
            )

    # Registers

    def _authorise(self, identity: RegisterIdentity, value: str) -> str:
        address = identity.address
        key = load_verifying_key(address)
        signature = bytes.fromhex(identity.sign(value.encode("utf-8")))
        if key is None:
            raise StorageError(StorageErrorKind.PROTOCOL_ERROR, "invalid register owner key")
        key.verify(signature, value.encode("utf-8"))
        return address

    async def create_register(self, identity: RegisterIdentity, value: str) -> str:
        self._maybe_fail("create_register")
        address = self._authorise(identity, value)
        if address in self._registers:
            raise StorageError(
                StorageErrorKind.ALREADY_EXISTS,
                f"register {address} already exists",
                {"address": address},
            )
        self.write_count += 1
        self._registers[address] = [value]
        self._save()
        return address

    async def append_register(self, identity: RegisterIdentity, value: str) -> None:
        self._maybe_fail("append_register")
        address = self._authorise(identity, value)
        if address not in self._registers:
            raise StorageError(
                StorageErrorKind.NOT_FOUND,
                f"register {address} not found",
                {"address": address},
            )
        self.write_count += 1
        self._registers[address].append(value)
        self._save()

    async def get_register(self, address: str) -> str:
        self._maybe_fail("get_register")
        self.read_count += 1
        entries = self._registers.get(address)
        if not entries:
            raise StorageError(
                StorageErrorKind.NOT_FOUND,
                f"register {address} not found",
                {"address": address},
            )
        return entries[-1]

    def register_history(self, address: str) -> RegisterHistory:
        async def fetch_page(offset: int, limit: int) -> list[str]:
            self._maybe_fail("register_history")
            self.read_count += 1
            return list(self._registers.get(address, [])[offset:offset + limit])

        return PagedRegisterHistory(fetch_page)

    def register_entries(self, address: str) -> list[str]:
        """Snapshot of a register's entries (for inspection)."""
        return list(self._registers.get(address, []))

    # Vault

    async def put_vault(self, key: str, content_type: str, data: bytes) -> None:
        self._maybe_fail("put_vault")
        self.write_count += 1
        self._vault[key] = (content_type, bytes(data))
        self._save()

    async def get_vault(self, key: str) -> bytes:
        self._maybe_fail("get_vault")
        self.read_count += 1
        try:
            return self._vault[key][1]
        except KeyError:
            raise StorageError(
                StorageErrorKind.NOT_FOUND,
                "vault entry not found",
                {"key": key},
            )

    # Persistence

    def _load(self) -> None:
        assert self._state_file is not None
        try:
            with open(self._state_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                StorageErrorKind.PROTOCOL_ERROR,
                f"Failed to load simulated network state: {e}",
                {"file_path": str(self._state_file)},
            )
        self._chunks = {k: bytes.fromhex(v) for k, v in raw.get("chunks", {}).items()}
        self._registers = {k: list(v) for k, v in raw.get("registers", {}).items()}
        self._vault = {
            k: (v["content_type"], bytes.fromhex(v["data"]))
            for k, v in raw.get("vault", {}).items()
        }

    def _save(self) -> None:
        if self._state_file is None:
            return
        data = {
            "chunks": {k: v.hex() for k, v in self._chunks.items()},
            "registers": self._registers,
            "vault": {
                k: {"content_type": ct, "data": v.hex()}
                for k, (ct, v) in self._vault.items()
            },
        }
        self._state_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._state_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
