"""Identifier cache for database and table ids.

Database names resolve to Bitable app tokens and (database, table) pairs
resolve to table ids. Lookups hit memory first and fall back to the remote
store on a miss. Entries are never invalidated implicitly; only an
explicit `evict_table` removes one.

The cache is safe to share between threads. Two callers missing on the
same key may both query the remote store; the values they store name the
same remote object, so the last writer wins without changing the result.
"""

from __future__ import annotations

import threading
from typing import Hashable

from bitabledb.core.logs import get_logger
from bitabledb.core.store import RemoteStore

log = get_logger(__name__, component="identifier-cache")


def database_key(database: str) -> tuple[str, str]:
    """Cache key for a database name."""
    return ("db", database)


def table_key(database: str, table: str) -> tuple[str, str, str]:
    """Cache key for a table name within a database."""
    return ("table", database, table)


class IdentifierCache:
    """Lock-guarded name -> id mapping backed by remote lookups."""

    def __init__(self, store: RemoteStore, root_token: str) -> None:
        self.store = store
        self.root_token = root_token
        self._lock = threading.Lock()
        self._ids: dict[Hashable, str] = {}

    def get(self, key: Hashable) -> str | None:
        """Return the cached id for `key`, if any."""
        with self._lock:
            return self._ids.get(key)

    def store_id(self, key: Hashable, value: str) -> None:
        """Cache `value` under `key`."""
        with self._lock:
            self._ids[key] = value

    def evict_table(self, database: str, table: str) -> None:
        """Forget a table id, e.g. after the table was dropped."""
        with self._lock:
            self._ids.pop(table_key(database, table), None)

    def resolve_database(self, database: str) -> tuple[str, bool]:
        """
        Resolve a database name to its app token.

        Checks memory, then searches the root folder by name. Remote
        errors propagate; a clean miss returns `("", False)`.
        """
        key = database_key(database)
        cached = self.get(key)
        if cached is not None:
            return cached, True

        container_id, found = self.store.find_container_by_name(database, self.root_token)
        if not found:
            log.debug("database_not_found", database=database)
            return "", False

        self.store_id(key, container_id)
        return container_id, True

    def resolve_table(self, database: str, table: str) -> tuple[str, bool]:
        """
        Resolve a table name to its id.

        On a miss the whole table list of the database is loaded into the
        cache, so later lookups of sibling tables stay local.
        """
        key = table_key(database, table)
        cached = self.get(key)
        if cached is not None:
            return cached, True

        container_id, found = self.resolve_database(database)
        if not found:
            return "", False

        tables = self.store.list_tables(container_id)
        with self._lock:
            for t in tables:
                self._ids[table_key(database, t.name)] = t.id
            table_id = self._ids.get(key)

        if table_id is None:
            log.debug("table_not_found", database=database, table=table)
            return "", False
        return table_id, True
