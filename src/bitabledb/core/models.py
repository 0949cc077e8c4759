"""Core domain models for Bitable-backed databases.

These models describe databases, tables, fields, records and search
predicates in a simple, immutable form. They are intentionally free of
lark-oapi SDK types and CLI concerns so they can be shared by the
adapter, the facade and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Union

ID_FIELD = "id"
CONTAINER_TYPE = "bitable"

Scalar = Union[str, int, float, bool, None, list, dict]
Record = dict[str, Any]


class FieldType(IntEnum):
    """
    Bitable field type codes.

    The enum value is the wire-level type code expected by the Bitable
    open API, so a member can be sent as-is when creating or updating a
    field. Only STRING and INT are written by schema reconciliation; the
    remaining codes exist so remote schemas using them can be listed.
    """

    STRING = 1
    INT = 2
    RADIO = 3
    MULTI_SELECT = 4
    DATE = 5
    PEOPLE = 11

    @classmethod
    def parse(cls, value: str) -> "FieldType":
        """Parse a type name such as `string` or `int` (case-insensitive)."""
        key = value.strip().upper().replace("-", "_")
        aliases = {"TEXT": "STRING", "STR": "STRING", "NUMBER": "INT", "INTEGER": "INT"}
        key = aliases.get(key, key)
        try:
            return cls[key]
        except KeyError as exc:
            raise ValueError(f"Unknown field type: '{value}'") from exc


@dataclass(frozen=True)
class Field:
    """A desired field definition: name plus type."""

    name: str
    type: FieldType = FieldType.STRING


@dataclass(frozen=True)
class Table:
    """A desired table definition with its ordered field list."""

    name: str
    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field names in table '{self.name}'.")
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class Database:
    """A database definition: a name plus the tables it should contain."""

    name: str
    tables: tuple[Table, ...] = ()


@dataclass(frozen=True)
class SearchCmd:
    """
    A single search predicate.

    Attributes:
        key: Field name the predicate applies to.
        operator: Comparison operator, e.g. `=`, `>`, `<=`.
        value: Value compared against. Strings are quoted when rendered,
               integers are rendered as decimal literals.
    """

    key: str
    operator: str
    value: Scalar


@dataclass(frozen=True)
class RootFolder:
    """Root folder under which all databases are created."""

    token: str
    owner_id: str | None = None


@dataclass(frozen=True)
class RemoteField:
    """A field as reported by the Bitable service."""

    id: str
    name: str
    type: int


@dataclass(frozen=True)
class RemoteTable:
    """A table as reported by the Bitable service."""

    id: str
    name: str


@dataclass(frozen=True)
class RemoteRecord:
    """A record as reported by the Bitable service."""

    record_id: str
    fields: Mapping[str, Any] = field(default_factory=dict)
