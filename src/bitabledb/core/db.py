"""Database facade over a Bitable remote store.

`DB` exposes databases, tables and records on top of Bitable apps,
tables and records. It composes the identifier cache, the schema
reconciler, the record mapper and the query translator, and is free of
CLI concerns so the same object serves scripts, services and tests.

Every method blocks until its remote calls are done. A `DB` instance may
be shared between threads; the identifier cache is its only shared
mutable state.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from bitabledb.core.adapters.bitable import LarkBitableAdapter
from bitabledb.core.auth import get_client, page_size_from_env
from bitabledb.core.cache import IdentifierCache
from bitabledb.core.errors import BitableDBError, NotFoundError
from bitabledb.core.logs import get_logger
from bitabledb.core.models import Database, Record, SearchCmd, Table
from bitabledb.core.query import translate
from bitabledb.core.records import RecordMapper
from bitabledb.core.schema import ReconcileResult, SchemaReconciler
from bitabledb.core.store import RemoteStore

log = get_logger(__name__, component="db")


class DB:
    """
    CRUD facade for Bitable-backed databases.

    Construction looks up the root folder once; all databases are created
    under it. A failure there is raised from the constructor.

    Args:
        store: Remote store implementation.
        page_size: Records fetched per list call. Defaults to
                   `BITABLE_PAGE_SIZE` or 100.
        cache: Optional pre-built identifier cache (mainly for tests).
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        page_size: int | None = None,
        cache: IdentifierCache | None = None,
    ) -> None:
        self.store = store
        self.root = store.find_or_create_root_folder()
        self.cache = cache if cache is not None else IdentifierCache(store, self.root.token)
        self.reconciler = SchemaReconciler(store, self.cache)
        self.mapper = RecordMapper(store)
        self.page_size = page_size or page_size_from_env()

    @classmethod
    def connect(
        cls,
        app_id: str | None = None,
        app_secret: str | None = None,
        **kwargs: Any,
    ) -> "DB":
        """Build a DB backed by the lark-oapi adapter."""
        return cls(LarkBitableAdapter(get_client(app_id, app_secret)), **kwargs)

    def _locate(self, database: str, table: str) -> tuple[str, str]:
        """Resolve `(app_token, table_id)` or raise NotFoundError."""
        container_id, found = self.cache.resolve_database(database)
        if not found:
            raise NotFoundError(database)
        table_id, found = self.cache.resolve_table(database, table)
        if not found:
            raise NotFoundError(database, table)
        return container_id, table_id

    def save_database(self, database: str) -> str:
        """Create the database if it does not exist and return its id."""
        return self.reconciler.ensure_database(database)

    def reconcile_table(self, database: str, table: Table) -> ReconcileResult:
        """Create or update a table and return the per-field change report."""
        return self.reconciler.reconcile(database, table)

    def save_table(self, database: str, table: Table) -> str:
        """Create or update a table and return its id."""
        return self.reconcile_table(database, table).table_id

    def save_schema(self, database: Database) -> dict[str, str]:
        """Save a database and every table it defines; returns table ids by name."""
        self.save_database(database.name)
        return {t.name: self.save_table(database.name, t) for t in database.tables}

    def list_tables(self, database: str) -> list[str]:
        """
        Return the table names of a database.

        An unknown database has no tables; it is not created.
        """
        container_id, found = self.cache.resolve_database(database)
        if not found:
            return []
        return [t.name for t in self.store.list_tables(container_id)]

    def drop_table(self, database: str, table: str) -> None:
        """
        Delete a table.

        Raises:
            NotFoundError: If the database or table does not exist.
        """
        container_id, table_id = self._locate(database, table)
        self.store.delete_table(container_id, table_id)
        self.cache.evict_table(database, table)
        log.info("table_dropped", database=database, table=table, table_id=table_id)

    def create(self, database: str, table: str, record: Mapping[str, Any]) -> str:
        """
        Create a record and return its id.

        When the table has an `id` field the record id is stamped into it
        by a second call. If that call fails the record is still created;
        the failure is logged and the id is returned.
        """
        container_id, table_id = self._locate(database, table)
        has_id = self.mapper.has_id_field(container_id, table_id)

        record_id = self.store.create_record(
            container_id, table_id, self.mapper.to_create(record, has_id_field=has_id)
        )

        if has_id:
            try:
                self.store.update_record(
                    container_id, table_id, record_id, self.mapper.stamp(record_id)
                )
            except BitableDBError as e:
                log.warning(
                    "id_stamp_failed",
                    database=database,
                    table=table,
                    record_id=record_id,
                    error=str(e),
                )
        return record_id

    def read(
        self,
        database: str,
        table: str,
        predicates: Iterable[SearchCmd] = (),
    ) -> list[Record]:
        """Return records matching all predicates (AND), each with an `"id"` entry."""
        container_id, table_id = self._locate(database, table)
        filter_expression = translate(predicates)
        remote = self.store.list_records(
            container_id, table_id, filter_expression, self.page_size
        )
        return [self.mapper.from_remote(r) for r in remote]

    def update(
        self,
        database: str,
        table: str,
        record_id: str,
        record: Mapping[str, Any],
    ) -> None:
        """Update a record by id."""
        container_id, table_id = self._locate(database, table)
        has_id = self.mapper.has_id_field(container_id, table_id)
        self.store.update_record(
            container_id,
            table_id,
            record_id,
            self.mapper.to_update(record, record_id, has_id_field=has_id),
        )

    def delete(self, database: str, table: str, record_id: str) -> None:
        """Delete a record by id."""
        container_id, table_id = self._locate(database, table)
        self.store.delete_record(container_id, table_id, record_id)

    def repair_id_stamps(self, database: str, table: str) -> list[str]:
        """
        Re-stamp records whose `id` field does not match their record id.

        Compensates for create calls whose stamping step failed. Returns
        the ids of the records that were repaired; records that still
        fail are logged and skipped.
        """
        container_id, table_id = self._locate(database, table)
        if not self.mapper.has_id_field(container_id, table_id):
            return []

        repaired: list[str] = []
        for remote in self.store.list_records(container_id, table_id, "", self.page_size):
            if not self.mapper.needs_stamp(remote):
                continue
            try:
                self.store.update_record(
                    container_id, table_id, remote.record_id, self.mapper.stamp(remote.record_id)
                )
            except BitableDBError as e:
                log.warning(
                    "id_stamp_repair_failed",
                    database=database,
                    table=table,
                    record_id=remote.record_id,
                    error=str(e),
                )
                continue
            repaired.append(remote.record_id)
        return repaired
