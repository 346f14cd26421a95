"""
Document codec for owner and records documents.

Documents are serialized as compact JSON with fields in declaration order
so that the byte form of a record list is reproducible across signers and
verifiers. Decoding is strict about shape and lenient about unknown keys.
"""

import json
from typing import Any, Sequence

from .exceptions import MalformedDocumentError
from .models import DnsRecord, DomainOwnerDocument, DomainRecordsDocument


_SEPARATORS = (",", ":")


def _record_to_dict(record: DnsRecord) -> dict:
    return {"type": record.record_type, "name": record.name, "value": record.value}


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, separators=_SEPARATORS, ensure_ascii=False).encode("utf-8")


def canonical_records(records: Sequence[DnsRecord]) -> bytes:
    """
    Serialize a record list to its canonical byte form.

    This is the exact byte string covered by a records signature.

    Args:
        records: Ordered record list

    Returns:
        UTF-8 encoded compact JSON array
    """
    return _dumps([_record_to_dict(r) for r in records])


def encode_owner(document: DomainOwnerDocument) -> bytes:
    """Encode an owner document."""
    return _dumps({"publicKey": document.public_key})


def encode_records(document: DomainRecordsDocument) -> bytes:
    """Encode a records document."""
    return _dumps(
        {
            "records": [_record_to_dict(r) for r in document.records],
            "signature": document.signature,
        }
    )


def _load_object(data: bytes, kind: str) -> dict:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedDocumentError(
            code="invalid_utf8",
            message=f"{kind} document is not valid UTF-8: {e}",
            details={"kind": kind},
        )
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(
            code="invalid_json",
            message=f"{kind} document is not valid JSON: {e}",
            details={"kind": kind},
        )
    if not isinstance(obj, dict):
        raise MalformedDocumentError(
            code="schema_mismatch",
            message=f"{kind} document must be a JSON object",
            details={"kind": kind},
        )
    return obj


def _require_str(obj: dict, key: str, kind: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise MalformedDocumentError(
            code="schema_mismatch",
            message=f"{kind} document field '{key}' must be a string",
            details={"kind": kind, "field": key},
        )
    return value


def decode_owner(data: bytes) -> DomainOwnerDocument:
    """
    Decode an owner document.

    Raises:
        MalformedDocumentError: On invalid UTF-8, invalid JSON or schema mismatch
    """
    obj = _load_object(data, "owner")
    return DomainOwnerDocument(public_key=_require_str(obj, "publicKey", "owner"))


def decode_records(data: bytes) -> DomainRecordsDocument:
    """
    Decode a records document.

    Raises:
        MalformedDocumentError: On invalid UTF-8, invalid JSON or schema mismatch
    """
    obj = _load_object(data, "records")
    raw_records = obj.get("records")
    if not isinstance(raw_records, list):
        raise MalformedDocumentError(
            code="schema_mismatch",
            message="records document field 'records' must be a list",
            details={"kind": "records", "field": "records"},
        )

    records = []
    for item in raw_records:
        if not isinstance(item, dict):
            raise MalformedDocumentError(
                code="schema_mismatch",
                message="each record must be a JSON object",
                details={"kind": "records"},
            )
        records.append(
            DnsRecord(
                record_type=_require_str(item, "type", "record"),
                name=_require_str(item, "name", "record"),
                value=_require_str(item, "value", "record"),
            )
        )

    return DomainRecordsDocument(
        records=tuple(records),
        signature=_require_str(obj, "signature", "records"),
    )
