"""Schema reconciliation for Bitable tables.

Given a desired `Table`, the reconciler makes sure the database and table
exist and then converges the remote field set onto the desired one with
the fewest field calls:

  1) find or create the database (app) and the table
  2) list the remote fields
  3) make sure the table has an `id` field (renaming the default first field)
  4) update fields whose type changed, create missing fields
  5) delete leftover remote fields

Field calls are fail-forward: a failed create/update/delete is logged and
recorded in the result, and the remaining fields are still processed.
Failures that prevent finding the database or table are raised.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from bitabledb.core.cache import IdentifierCache, database_key, table_key
from bitabledb.core.errors import BitableDBError
from bitabledb.core.logs import get_logger
from bitabledb.core.models import ID_FIELD, Field, FieldType, RemoteField, Table
from bitabledb.core.store import RemoteStore

log = get_logger(__name__, component="schema-reconciler")


class ChangeKind(str, Enum):
    """Kind of field change planned by the reconciler."""

    RENAME_ID = "RENAME_ID"
    CREATE_ID = "CREATE_ID"
    UNCHANGED = "UNCHANGED"
    UPDATE = "UPDATE"
    CREATE = "CREATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class FieldChange:
    """Result for a single planned or applied field change."""

    kind: ChangeKind
    name: str
    type: int
    field_id: str | None = None
    previous_name: str | None = None
    ok: bool = True
    error: str | None = None


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling one table."""

    database_id: str
    table_id: str
    changes: tuple[FieldChange, ...] = ()

    @property
    def failures(self) -> list[FieldChange]:
        """Field changes that the remote store rejected."""
        return [c for c in self.changes if not c.ok]

    @property
    def ok(self) -> bool:
        return not self.failures


def plan_changes(
    remote_fields: Sequence[RemoteField], desired: Sequence[Field]
) -> list[FieldChange]:
    """
    Diff remote fields against desired fields.

    The returned plan lists identifier normalization first, then one entry
    per desired field in order, then the deletions.
    """
    plan: list[FieldChange] = []
    remaining = {f.name: f for f in remote_fields}

    if not remote_fields:
        plan.append(FieldChange(ChangeKind.CREATE_ID, ID_FIELD, int(FieldType.STRING)))
    elif remote_fields[0].name != ID_FIELD and ID_FIELD not in remaining:
        first = remote_fields[0]
        plan.append(
            FieldChange(
                ChangeKind.RENAME_ID,
                ID_FIELD,
                int(FieldType.STRING),
                field_id=first.id,
                previous_name=first.name,
            )
        )
        remaining.pop(first.name, None)
    remaining.pop(ID_FIELD, None)

    for f in desired:
        if f.name == ID_FIELD:
            # reserved
            continue
        current = remaining.pop(f.name, None)
        if current is None:
            plan.append(FieldChange(ChangeKind.CREATE, f.name, int(f.type)))
        elif current.type == int(f.type):
            plan.append(
                FieldChange(ChangeKind.UNCHANGED, f.name, int(f.type), field_id=current.id)
            )
        else:
            plan.append(
                FieldChange(ChangeKind.UPDATE, f.name, int(f.type), field_id=current.id)
            )

    for leftover in remaining.values():
        plan.append(
            FieldChange(ChangeKind.DELETE, leftover.name, leftover.type, field_id=leftover.id)
        )

    return plan


class SchemaReconciler:
    """Find-or-create databases and tables and converge their field sets."""

    def __init__(self, store: RemoteStore, cache: IdentifierCache) -> None:
        self.store = store
        self.cache = cache
        # held from the re-check until a created id is cached
        self._create_lock = threading.Lock()

    def ensure_database(self, database: str) -> str:
        """Return the app token for `database`, creating the app if needed."""
        container_id, found = self.cache.resolve_database(database)
        if found:
            return container_id

        with self._create_lock:
            container_id, found = self.cache.resolve_database(database)
            if found:
                return container_id
            container_id = self.store.create_container(database, self.cache.root_token)
            self.cache.store_id(database_key(database), container_id)
        log.info("database_created", database=database, app_token=container_id)
        return container_id

    def ensure_table(self, database: str, container_id: str, table: str) -> str:
        """Return the table id for `database.table`, creating the table if needed."""
        table_id, found = self.cache.resolve_table(database, table)
        if found:
            return table_id

        with self._create_lock:
            table_id, found = self.cache.resolve_table(database, table)
            if found:
                return table_id
            table_id = self.store.create_table(container_id, table)
            self.cache.store_id(table_key(database, table), table_id)
        log.info("table_created", database=database, table=table, table_id=table_id)
        return table_id

    def _apply(self, container_id: str, table_id: str, change: FieldChange) -> FieldChange:
        """Run one planned change against the store, capturing failures."""
        try:
            if change.kind in (ChangeKind.RENAME_ID, ChangeKind.UPDATE):
                self.store.update_field(
                    container_id, table_id, change.field_id, change.name, change.type
                )
            elif change.kind in (ChangeKind.CREATE_ID, ChangeKind.CREATE):
                field_id = self.store.create_field(
                    container_id, table_id, change.name, change.type
                )
                change = FieldChange(change.kind, change.name, change.type, field_id=field_id)
            elif change.kind == ChangeKind.DELETE:
                self.store.delete_field(container_id, table_id, change.field_id)
        except BitableDBError as e:
            log.warning(
                "field_change_failed",
                kind=change.kind.value,
                app_token=container_id,
                table_id=table_id,
                field=change.name,
                error=str(e),
            )
            return FieldChange(
                change.kind,
                change.name,
                change.type,
                field_id=change.field_id,
                previous_name=change.previous_name,
                ok=False,
                error=str(e),
            )
        return change

    def reconcile(self, database: str, table: Table) -> ReconcileResult:
        """
        Converge the remote table onto `table`.

        Raises:
            BitableDBError: If the database or table cannot be found or
                created, or the remote field list cannot be read.
        """
        container_id = self.ensure_database(database)
        table_id = self.ensure_table(database, container_id, table.name)

        remote_fields = self.store.list_fields(container_id, table_id)
        plan = plan_changes(remote_fields, table.fields)

        applied: list[FieldChange] = []
        for change in plan:
            if change.kind == ChangeKind.UNCHANGED:
                applied.append(change)
                continue
            applied.append(self._apply(container_id, table_id, change))

        result = ReconcileResult(
            database_id=container_id, table_id=table_id, changes=tuple(applied)
        )
        if result.failures:
            log.warning(
                "table_partially_reconciled",
                database=database,
                table=table.name,
                failed=[c.name for c in result.failures],
            )
        else:
            log.debug("table_reconciled", database=database, table=table.name)
        return result
