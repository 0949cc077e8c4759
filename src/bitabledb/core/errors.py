"""Exception taxonomy shared by the adapter, the facade and the CLI."""

from __future__ import annotations


class BitableDBError(RuntimeError):
    """Base class for all bitable-db errors."""


class NotFoundError(BitableDBError, LookupError):
    """Raised when a database or table name cannot be resolved."""

    def __init__(self, database: str, table: str | None = None) -> None:
        self.database = database
        self.table = table
        if table is None:
            message = f"database[{database}] not exists"
        else:
            message = f"table[{database}.{table}] not exists"
        super().__init__(message)


class RemoteError(BitableDBError):
    """Raised when a Bitable open API call fails."""

    def __init__(
        self,
        operation: str,
        msg: str | None = None,
        code: int | None = None,
    ) -> None:
        self.operation = operation
        self.msg = msg
        self.code = code
        detail = f"{operation} failed: {msg or 'unknown error'}"
        if code is not None:
            detail = f"{detail} (code: {code})"
        super().__init__(detail)
