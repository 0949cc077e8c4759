"""Remote store capability interface.

The facade, the identifier cache and the schema reconciler only ever talk
to the backing service through this protocol. The production
implementation lives in `bitabledb.core.adapters.bitable`; tests provide
in-memory stand-ins.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from bitabledb.core.models import RemoteField, RemoteRecord, RemoteTable, RootFolder


class RemoteStore(Protocol):
    """Primitive operations offered by a spreadsheet-like backing service."""

    def find_or_create_root_folder(self) -> RootFolder:
        """Return the root folder that holds every database."""
        ...

    def create_container(self, name: str, parent_id: str) -> str:
        """Create a database container under `parent_id` and return its id."""
        ...

    def find_container_by_name(self, name: str, parent_id: str) -> tuple[str, bool]:
        """Return `(container_id, True)` for a matching container, else `("", False)`."""
        ...

    def list_fields(self, container_id: str, table_id: str) -> list[RemoteField]:
        """List a table's fields in remote order."""
        ...

    def create_field(
        self, container_id: str, table_id: str, name: str, type: int
    ) -> str:
        """Create a field and return its id."""
        ...

    def update_field(
        self, container_id: str, table_id: str, field_id: str, name: str, type: int
    ) -> None:
        """Replace a field's name and type, keeping its id."""
        ...

    def delete_field(self, container_id: str, table_id: str, field_id: str) -> None:
        """Delete a field."""
        ...

    def create_table(self, container_id: str, name: str) -> str:
        """Create a table and return its id."""
        ...

    def list_tables(self, container_id: str) -> list[RemoteTable]:
        """List every table in a container."""
        ...

    def delete_table(self, container_id: str, table_id: str) -> None:
        """Delete a table."""
        ...

    def create_record(
        self, container_id: str, table_id: str, fields: Mapping[str, Any]
    ) -> str:
        """Create a record and return the remote-assigned record id."""
        ...

    def list_records(
        self,
        container_id: str,
        table_id: str,
        filter_expression: str,
        page_size: int,
    ) -> list[RemoteRecord]:
        """List records matching `filter_expression` (empty means no filter)."""
        ...

    def update_record(
        self,
        container_id: str,
        table_id: str,
        record_id: str,
        fields: Mapping[str, Any],
    ) -> None:
        """Update a record's field values."""
        ...

    def delete_record(self, container_id: str, table_id: str, record_id: str) -> None:
        """Delete a record."""
        ...
