from __future__ import annotations

import itertools
import logging
import sys
import threading
from pathlib import Path

import pytest
import structlog

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from bitabledb.core.errors import RemoteError  # noqa: E402
from bitabledb.core.models import (  # noqa: E402
    RemoteField,
    RemoteRecord,
    RemoteTable,
    RootFolder,
)

DEFAULT_FIELD_NAME = "Text"


class FakeStore:
    """In-memory stand-in for a Bitable account.

    New tables start with one default text field, like the real service.
    `calls` records every operation name in order; operations listed in
    `fail` raise RemoteError, and field operations on names listed in
    `fail_fields` raise as well.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail: set[str] = set()
        self.fail_fields: set[str] = set()
        self.filters: list[str] = []
        self.root = RootFolder(token="fld_root", owner_id="ou_owner")
        self.containers: dict[str, str] = {}
        self.tables: dict[str, dict[str, str]] = {}
        self.fields: dict[str, list[RemoteField]] = {}
        self.records: dict[str, dict[str, dict]] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def _next(self, prefix: str) -> str:
        return f"{prefix}{next(self._seq)}"

    def _enter(self, op: str, field_name: str | None = None) -> None:
        with self._lock:
            self.calls.append(op)
        if op in self.fail or (field_name is not None and field_name in self.fail_fields):
            raise RemoteError(op, "boom", 1254000)

    def field_names(self, table_id: str) -> list[str]:
        return [f.name for f in self.fields[table_id]]

    def find_or_create_root_folder(self) -> RootFolder:
        self._enter("find_or_create_root_folder")
        return self.root

    def create_container(self, name: str, parent_id: str) -> str:
        self._enter("create_container")
        token = self._next("app")
        self.containers[name] = token
        self.tables[token] = {}
        return token

    def find_container_by_name(self, name: str, parent_id: str) -> tuple[str, bool]:
        self._enter("find_container_by_name")
        token = self.containers.get(name)
        return (token, True) if token else ("", False)

    def list_fields(self, container_id: str, table_id: str) -> list[RemoteField]:
        self._enter("list_fields")
        return list(self.fields[table_id])

    def create_field(self, container_id: str, table_id: str, name: str, type: int) -> str:
        self._enter("create_field", name)
        field_id = self._next("fld")
        self.fields[table_id].append(RemoteField(id=field_id, name=name, type=type))
        return field_id

    def update_field(
        self, container_id: str, table_id: str, field_id: str, name: str, type: int
    ) -> None:
        self._enter("update_field", name)
        self.fields[table_id] = [
            RemoteField(id=f.id, name=name, type=type) if f.id == field_id else f
            for f in self.fields[table_id]
        ]

    def delete_field(self, container_id: str, table_id: str, field_id: str) -> None:
        name = next((f.name for f in self.fields[table_id] if f.id == field_id), None)
        self._enter("delete_field", name)
        self.fields[table_id] = [f for f in self.fields[table_id] if f.id != field_id]

    def create_table(self, container_id: str, name: str) -> str:
        self._enter("create_table")
        table_id = self._next("tbl")
        self.tables[container_id][name] = table_id
        self.fields[table_id] = [
            RemoteField(id=self._next("fld"), name=DEFAULT_FIELD_NAME, type=1)
        ]
        self.records[table_id] = {}
        return table_id

    def list_tables(self, container_id: str) -> list[RemoteTable]:
        self._enter("list_tables")
        return [RemoteTable(id=i, name=n) for n, i in self.tables[container_id].items()]

    def delete_table(self, container_id: str, table_id: str) -> None:
        self._enter("delete_table")
        self.tables[container_id] = {
            n: i for n, i in self.tables[container_id].items() if i != table_id
        }

    def create_record(self, container_id: str, table_id: str, fields) -> str:
        self._enter("create_record")
        record_id = self._next("rec")
        self.records[table_id][record_id] = dict(fields)
        return record_id

    def list_records(
        self, container_id: str, table_id: str, filter_expression: str, page_size: int
    ) -> list[RemoteRecord]:
        self._enter("list_records")
        self.filters.append(filter_expression)
        return [
            RemoteRecord(record_id=rid, fields=dict(values))
            for rid, values in self.records[table_id].items()
        ]

    def update_record(self, container_id: str, table_id: str, record_id: str, fields) -> None:
        self._enter("update_record")
        self.records[table_id][record_id].update(fields)

    def delete_record(self, container_id: str, table_id: str, record_id: str) -> None:
        self._enter("delete_record")
        del self.records[table_id][record_id]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()
