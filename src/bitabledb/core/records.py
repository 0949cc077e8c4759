"""Record mapping between generic dicts and Bitable records.

Bitable assigns record ids itself and has no primary-key column. Tables
managed by this package carry a text field named `id` that mirrors the
record id so it is visible to people using the spreadsheet UI:

  - create: the `id` field is sent empty, and once the service returns
    the record id a second call stamps it into the field
  - update: the caller's record id is written into the `id` field
  - read: every record is returned with `"id"` set to its record id

The create-then-stamp sequence is two remote calls and is not atomic. A
record whose stamp failed keeps an empty `id` field until
`DB.repair_id_stamps` is run for its table.
"""

from __future__ import annotations

from typing import Any, Mapping

from bitabledb.core.errors import BitableDBError
from bitabledb.core.logs import get_logger
from bitabledb.core.models import ID_FIELD, Record, RemoteRecord
from bitabledb.core.store import RemoteStore

log = get_logger(__name__, component="record-mapper")


def get_string(record: Mapping[str, Any], key: str) -> str:
    """Return `record[key]` if it is a string, else an empty string."""
    value = record.get(key)
    return value if isinstance(value, str) else ""


def get_int(record: Mapping[str, Any], key: str) -> int:
    """Return `record[key]` if it is an integer, else 0."""
    value = record.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def get_id(record: Mapping[str, Any]) -> str:
    """Return a record's identifier."""
    return get_string(record, ID_FIELD)


def plain_text(value: Any) -> str:
    """
    Flatten a text cell value to a plain string.

    The service may return text cells as a list of rich-text segments
    (`[{"type": "text", "text": "..."}]`) instead of a bare string.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "".join(
            str(seg.get("text", "")) if isinstance(seg, Mapping) else str(seg)
            for seg in value
        )
    return str(value)


class RecordMapper:
    """Translate records to and from the remote representation."""

    def __init__(self, store: RemoteStore) -> None:
        self.store = store

    def has_id_field(self, container_id: str, table_id: str) -> bool:
        """
        Return True if the table defines an `id` field.

        Field metadata is only used to decide whether to stamp ids, so a
        failed lookup degrades to False instead of failing the operation.
        """
        try:
            fields = self.store.list_fields(container_id, table_id)
        except BitableDBError as e:
            log.warning(
                "field_lookup_failed",
                app_token=container_id,
                table_id=table_id,
                error=str(e),
            )
            return False
        return any(f.name == ID_FIELD for f in fields)

    def to_create(self, record: Mapping[str, Any], *, has_id_field: bool) -> Record:
        """Build a create payload; the `id` field is left as a placeholder."""
        payload = dict(record)
        if has_id_field:
            payload[ID_FIELD] = ""
        else:
            payload.pop(ID_FIELD, None)
        return payload

    def to_update(
        self, record: Mapping[str, Any], record_id: str, *, has_id_field: bool
    ) -> Record:
        """Build an update payload that keeps the `id` field equal to `record_id`."""
        payload = dict(record)
        if has_id_field:
            payload[ID_FIELD] = record_id
        else:
            payload.pop(ID_FIELD, None)
        return payload

    def stamp(self, record_id: str) -> Record:
        """Payload that only writes the record id into the `id` field."""
        return {ID_FIELD: record_id}

    def from_remote(self, remote: RemoteRecord) -> Record:
        """Return the record's fields decorated with its record id."""
        record = dict(remote.fields)
        record[ID_FIELD] = remote.record_id
        return record

    def needs_stamp(self, remote: RemoteRecord) -> bool:
        """True if the stored `id` field does not match the record id."""
        return plain_text(remote.fields.get(ID_FIELD)) != remote.record_id
