"""
History replay and domain resolution.

A domain's register is an append-only list of chunk addresses. Entry #1
holds the owner document; every later entry should hold a records document
signed by that owner. Replay classifies each entry, never aborting on a
bad one, and the last authentic records document wins.
"""

from typing import Iterable, Optional, Sequence

from .audit_logger import AuditLogger
from .codec import decode_owner, decode_records
from .enums import EntryStatus, LogLevel, RecordType, StorageErrorKind
from .exceptions import (
    CorruptRegistrationError,
    MalformedDocumentError,
    NoTargetRecordError,
    NoValidRecordsError,
    RegisterNotFoundError,
    StorageError,
)
from .identity import IdentityDeriver
from .models import (
    DnsRecord,
    DomainResolution,
    HistoryEntry,
    HistoryStats,
    OwnerEntry,
    RecordsEntry,
    ResolvedRecords,
)
from .signing import load_verifying_key, verify_records
from .storage import NetworkStorage


ROOT_NAME = "."


def find_target(records: Iterable[DnsRecord]) -> Optional[str]:
    """
    Return the active address of a record set.

    The active address is the value of the first record of type ANT
    (any case) whose name is exactly the root ``.``.
    """
    for record in records:
        if record.record_type.upper() == RecordType.ANT.value and record.name == ROOT_NAME:
            return record.value
    return None


def extract_target(domain: str, records: Sequence[DnsRecord]) -> str:
    """
    Like ``find_target`` but raise when no root ANT record exists.

    Raises:
        NoTargetRecordError: If the record set has no root ANT record
    """
    target = find_target(records)
    if target is None:
        raise NoTargetRecordError(
            code="no_target_record",
            message=f"Domain {domain} has no root ANT record",
            details={"domain": domain, "record_count": len(records)},
        )
    return target


def last_valid_entry(entries: Iterable[HistoryEntry]) -> Optional[RecordsEntry]:
    """Return the most recent authentic records entry, if any."""
    candidate: Optional[RecordsEntry] = None
    for entry in entries:
        if isinstance(entry, RecordsEntry) and entry.is_valid:
            candidate = entry
    return candidate


def calculate_history_stats(entries: Sequence[HistoryEntry]) -> HistoryStats:
    """
    Fold a classified history into counts.

    The owner entry counts as valid. Spam entries parsed but failed
    verification; corrupted entries could not be downloaded or parsed.
    """
    valid = spam = corrupted = 0
    for entry in entries:
        status = entry.status
        if status == EntryStatus.VALID:
            valid += 1
        elif status == EntryStatus.SPAM:
            spam += 1
        else:
            corrupted += 1
    return HistoryStats(total=len(entries), valid=valid, spam=spam, corrupted=corrupted)


class DomainResolver:
    """
    Resolves domains by replaying their register history.

    Each call performs one fresh, strictly sequential pass over the
    history; nothing is cached between calls.
    """

    COMPONENT = "resolver"

    def __init__(
        self,
        storage: NetworkStorage,
        deriver: IdentityDeriver,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            storage: Network storage façade
            deriver: Identity deriver holding the shared register key
            logger: Optional audit logger
        """
        self._storage = storage
        self._deriver = deriver
        self._logger = logger

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    async def _read_owner(self, domain: str, chunk_address: str) -> OwnerEntry:
        try:
            data = await self._storage.get_chunk(chunk_address)
        except StorageError as e:
            if e.kind not in (StorageErrorKind.NOT_FOUND, StorageErrorKind.PROTOCOL_ERROR):
                raise
            raise CorruptRegistrationError(
                code="owner_chunk_missing",
                message=f"Owner document of {domain} cannot be found",
                details={"domain": domain, "chunk_address": chunk_address},
            )

        try:
            owner = decode_owner(data)
        except MalformedDocumentError as e:
            raise CorruptRegistrationError(
                code="owner_document_malformed",
                message=f"First entry of {domain} is not an owner document: {e.message}",
                details={"domain": domain, "chunk_address": chunk_address},
            )

        if load_verifying_key(owner.public_key) is None:
            raise CorruptRegistrationError(
                code="owner_key_invalid",
                message=f"Owner document of {domain} holds an invalid public key",
                details={"domain": domain, "chunk_address": chunk_address},
            )

        return OwnerEntry(public_key=owner.public_key, chunk_address=chunk_address)

    async def _classify(self, chunk_address: str, verifying_key) -> RecordsEntry:
        """Classify one records entry; never raises for per-entry failures."""
        try:
            data = await self._storage.get_chunk(chunk_address)
        except StorageError as e:
            self._log(
                LogLevel.WARN,
                "Register entry could not be downloaded",
                {"chunk_address": chunk_address, "kind": e.kind.value},
            )
            return RecordsEntry(chunk_address, None, None, False)

        try:
            document = decode_records(data)
        except MalformedDocumentError as e:
            self._log(
                LogLevel.WARN,
                "Register entry is not a records document",
                {"chunk_address": chunk_address, "reason": e.code},
            )
            return RecordsEntry(chunk_address, None, None, False)

        is_valid = verify_records(document.records, document.signature, verifying_key)
        if not is_valid:
            self._log(
                LogLevel.WARN,
                "Register entry has an invalid signature",
                {"chunk_address": chunk_address},
            )
        return RecordsEntry(chunk_address, document.records, document.signature, is_valid)

    async def _replay(self, domain: str) -> tuple[OwnerEntry, list[RecordsEntry]]:
        address = self._deriver.register_address(domain)
        history = self._storage.register_history(address)

        first = await history.next()
        if first is None:
            raise RegisterNotFoundError(
                code="register_not_found",
                message=f"Domain {domain} is not registered",
                details={"domain": domain, "register_address": address},
            )

        owner = await self._read_owner(domain, first)
        verifying_key = load_verifying_key(owner.public_key)

        entries: list[RecordsEntry] = []
        async for chunk_address in history:
            entries.append(await self._classify(chunk_address, verifying_key))

        return owner, entries

    async def get_history(self, domain: str) -> list[HistoryEntry]:
        """
        Return the full classified history of a domain, oldest first.

        Raises:
            RegisterNotFoundError: If the domain was never registered
            CorruptRegistrationError: If entry #1 is not a valid owner document
            StorageError: If the history itself cannot be read
        """
        owner, entries = await self._replay(domain)
        history: list[HistoryEntry] = [owner]
        history.extend(entries)
        return history

    async def lookup_records(self, domain: str) -> ResolvedRecords:
        """
        Resolve the authoritative record set of a domain.

        Raises:
            RegisterNotFoundError: If the domain was never registered
            CorruptRegistrationError: If entry #1 is not a valid owner document
            NoValidRecordsError: If no entry carries an authentic record set
        """
        owner, entries = await self._replay(domain)

        candidate = last_valid_entry(entries)
        if candidate is None or candidate.records is None:
            raise NoValidRecordsError(
                code="no_valid_records",
                message=f"Domain {domain} has no valid records",
                details={"domain": domain, "entries": len(entries)},
            )

        self._log(
            LogLevel.DEBUG,
            "Resolved record set",
            {"domain": domain, "chunk_address": candidate.chunk_address},
        )
        return ResolvedRecords(
            domain=domain,
            owner_public_key=owner.public_key,
            records=candidate.records,
            chunk_address=candidate.chunk_address,
        )

    async def lookup(self, domain: str) -> DomainResolution:
        """
        Resolve a domain to its active target address.

        Raises:
            RegisterNotFoundError, CorruptRegistrationError, NoValidRecordsError
            NoTargetRecordError: If the record set has no root ANT record
        """
        resolved = await self.lookup_records(domain)
        target = extract_target(domain, resolved.records)
        return DomainResolution(
            domain=domain,
            target=target,
            owner_public_key=resolved.owner_public_key,
        )

    async def quick_lookup(self, domain: str) -> str:
        """
        Read the target from the register head only.

        UNVERIFIED: no signature is checked, so a spam entry at the head
        is returned as if it were authentic. Use ``lookup`` wherever the
        answer matters.

        Raises:
            RegisterNotFoundError: If the register does not exist
            NoValidRecordsError: If the head is the owner document
            MalformedDocumentError: If the head chunk is neither document
            NoTargetRecordError: If the head record set has no root ANT record
        """
        address = self._deriver.register_address(domain)
        try:
            head = await self._storage.get_register(address)
        except StorageError as e:
            if e.kind != StorageErrorKind.NOT_FOUND:
                raise
            raise RegisterNotFoundError(
                code="register_not_found",
                message=f"Domain {domain} is not registered",
                details={"domain": domain, "register_address": address},
            )

        data = await self._storage.get_chunk(head)
        try:
            document = decode_records(data)
        except MalformedDocumentError:
            # Head may still be the owner document of a fresh registration
            decode_owner(data)
            raise NoValidRecordsError(
                code="no_valid_records",
                message=f"Domain {domain} has no records yet",
                details={"domain": domain},
            )

        return extract_target(domain, document.records)
