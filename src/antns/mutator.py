"""
Record mutation.

Every edit is one transaction: resolve the current authoritative record
set, edit it in memory, sign the complete result, publish it as a chunk
and append the chunk address to the domain's register. There are no
partial updates; the latest valid entry always carries the full state.
"""

from typing import Callable, Optional, Sequence

from .audit_logger import AuditLogger
from .codec import encode_records
from .enums import LogLevel, RecordType
from .exceptions import (
    IndexOutOfRangeError,
    NotDomainOwnerError,
    NoValidRecordsError,
    ValidationError,
)
from .identity import IdentityDeriver
from .models import DnsRecord, DomainRecordsDocument
from .resolver import ROOT_NAME, DomainResolver, last_valid_entry
from .signing import DomainKeypair, sign_records
from .storage import NetworkStorage


RecordEdit = Callable[[list[DnsRecord]], list[DnsRecord]]


def normalize_record(record: DnsRecord) -> DnsRecord:
    """
    Validate a record and upper-case its type.

    Raises:
        ValidationError: If the type is not TEXT or ANT or the name is empty
    """
    try:
        record_type = RecordType.parse(record.record_type)
    except ValueError:
        raise ValidationError(
            code="invalid_record_type",
            message=f"Invalid record type '{record.record_type}', expected TEXT or ANT",
            details={"record_type": record.record_type},
        )
    if not record.name:
        raise ValidationError(
            code="invalid_record_name",
            message="Record name must not be empty (use '.' for the root)",
            details={},
        )
    return DnsRecord(record_type=record_type.value, name=record.name, value=record.value)


def _check_index(index: int) -> None:
    if index < 0:
        raise IndexOutOfRangeError(
            code="index_out_of_range",
            message=f"Record index {index} is negative",
            details={"index": index},
        )


class RecordMutator:
    """Applies add/update/delete/replace edits to a domain's record set."""

    COMPONENT = "mutator"

    def __init__(
        self,
        storage: NetworkStorage,
        resolver: DomainResolver,
        deriver: IdentityDeriver,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the mutator.

        Args:
            storage: Network storage façade used to publish
            resolver: Resolver providing the current record set
            deriver: Identity deriver for the register key
            logger: Optional audit logger
        """
        self._storage = storage
        self._resolver = resolver
        self._deriver = deriver
        self._logger = logger

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, self.COMPONENT, message, data)

    async def current_records(
        self,
        domain: str,
        keypair: DomainKeypair,
        allow_empty: bool,
    ) -> list[DnsRecord]:
        """
        Resolve the current record set and check ownership.

        Raises:
            RegisterNotFoundError, CorruptRegistrationError
            NotDomainOwnerError: If ``keypair`` does not own the domain
            NoValidRecordsError: If there is no valid set and ``allow_empty`` is False
        """
        history = await self._resolver.get_history(domain)
        owner = history[0]
        if owner.public_key != keypair.public_key_hex:
            raise NotDomainOwnerError(
                code="not_owner",
                message=f"Local key does not own {domain}",
                details={"domain": domain, "owner_public_key": owner.public_key},
            )

        latest = last_valid_entry(history)
        if latest is None or latest.records is None:
            if allow_empty:
                return []
            raise NoValidRecordsError(
                code="no_valid_records",
                message=f"Domain {domain} has no valid records",
                details={"domain": domain},
            )
        return list(latest.records)

    async def _publish(
        self,
        domain: str,
        records: Sequence[DnsRecord],
        keypair: DomainKeypair,
    ) -> str:
        document = DomainRecordsDocument(
            records=tuple(records),
            signature=sign_records(records, keypair),
        )
        chunk_address = await self._storage.put_chunk(encode_records(document))
        await self._storage.append_register(self._deriver.derive(domain), chunk_address)
        self._log_info(
            "Record set published",
            {"domain": domain, "chunk_address": chunk_address, "records": len(records)},
        )
        return chunk_address

    async def _transact(
        self,
        domain: str,
        keypair: DomainKeypair,
        edit: RecordEdit,
        allow_empty: bool = False,
    ) -> str:
        records = await self.current_records(domain, keypair, allow_empty)
        return await self._publish(domain, edit(records), keypair)

    async def add_record(self, domain: str, record: DnsRecord, keypair: DomainKeypair) -> str:
        """
        Append a record to the current set.

        A registered domain without records is treated as an empty set.

        Returns:
            Address of the published records chunk
        """
        record = normalize_record(record)
        return await self._transact(
            domain, keypair, lambda records: records + [record], allow_empty=True
        )

    async def delete_record(self, domain: str, index: int, keypair: DomainKeypair) -> str:
        """
        Remove the record at ``index``.

        Raises:
            IndexOutOfRangeError: If ``index`` is not a position in the current set
        """
        _check_index(index)

        def edit(records: list[DnsRecord]) -> list[DnsRecord]:
            if index >= len(records):
                raise IndexOutOfRangeError(
                    code="index_out_of_range",
                    message=f"Record index {index} out of range (have {len(records)})",
                    details={"index": index, "length": len(records)},
                )
            return records[:index] + records[index + 1:]

        return await self._transact(domain, keypair, edit)

    async def update_record(
        self,
        domain: str,
        index: int,
        record: DnsRecord,
        keypair: DomainKeypair,
    ) -> str:
        """
        Replace the record at ``index``.

        Raises:
            IndexOutOfRangeError: If ``index`` is not a position in the current set
        """
        _check_index(index)
        record = normalize_record(record)

        def edit(records: list[DnsRecord]) -> list[DnsRecord]:
            if index >= len(records):
                raise IndexOutOfRangeError(
                    code="index_out_of_range",
                    message=f"Record index {index} out of range (have {len(records)})",
                    details={"index": index, "length": len(records)},
                )
            updated = list(records)
            updated[index] = record
            return updated

        return await self._transact(domain, keypair, edit)

    async def replace_records(
        self,
        domain: str,
        records: Sequence[DnsRecord],
        keypair: DomainKeypair,
    ) -> str:
        """Publish ``records`` as the complete new set."""
        normalized = [normalize_record(r) for r in records]
        return await self._transact(
            domain, keypair, lambda _current: normalized, allow_empty=True
        )

    async def set_target(self, domain: str, target: str, keypair: DomainKeypair) -> str:
        """Replace the set with a single root ANT record pointing at ``target``."""
        return await self.replace_records(
            domain,
            [DnsRecord(record_type=RecordType.ANT.value, name=ROOT_NAME, value=target)],
            keypair,
        )
