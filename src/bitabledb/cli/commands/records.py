"""Commands for records inside Bitable tables."""

from __future__ import annotations

import typer

from bitabledb.cli.common.context import BitableAppContext, build_context
from bitabledb.cli.common.exits import exit_from_exc, warn_exit
from bitabledb.cli.common.options import AppIdOpt, AppSecretOpt, DataOpt, WhereOpt
from bitabledb.cli.common.output import out
from bitabledb.cli.common.parsing import parse_predicates, parse_record
from bitabledb.core.errors import BitableDBError

records_app = typer.Typer(
    help="Record operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@records_app.callback()
def _init(
    ctx: typer.Context,
    app_id: str | None = AppIdOpt,
    app_secret: str | None = AppSecretOpt,
):
    """Initialize record context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_context(app_id, app_secret)


def _parse_record_or_exit(data: str) -> dict:
    """Parse `--data` JSON and convert errors into CLI input errors."""
    try:
        return parse_record(data)
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(2) from exc


@records_app.command("read")
def records_read(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    where: list[str] = WhereOpt,
):
    """Read records, optionally filtered by predicates."""
    appctx: BitableAppContext = ctx.obj

    try:
        predicates = parse_predicates(where)
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(2) from exc

    try:
        with out.status("Loading records..."):
            records = appctx.db.read(database, table, predicates)
    except BitableDBError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if not records:
        warn_exit("No records found.", code=0)

    out.info(f"Table: {database}.{table} | Records: {len(records)}")
    out.records_table(records)


@records_app.command("create")
def records_create(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    data: str = DataOpt,
):
    """Create a record and print its id."""
    appctx: BitableAppContext = ctx.obj
    record = _parse_record_or_exit(data)

    try:
        with out.status("Creating record..."):
            record_id = appctx.db.create(database, table, record)
    except BitableDBError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    out.success(f"Created record {record_id}.")


@records_app.command("update")
def records_update(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    record_id: str = typer.Argument(..., help="Record id"),
    data: str = DataOpt,
):
    """Update a record by id."""
    appctx: BitableAppContext = ctx.obj
    record = _parse_record_or_exit(data)

    try:
        with out.status("Updating record..."):
            appctx.db.update(database, table, record_id, record)
    except BitableDBError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    out.success(f"Updated record {record_id}.")


@records_app.command("delete")
def records_delete(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    record_id: str = typer.Argument(..., help="Record id"),
):
    """Delete a record by id."""
    appctx: BitableAppContext = ctx.obj

    try:
        with out.status("Deleting record..."):
            appctx.db.delete(database, table, record_id)
    except BitableDBError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    out.success(f"Deleted record {record_id}.")


@records_app.command("repair-ids")
def records_repair_ids(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
):
    """Re-stamp records whose `id` field does not match their record id."""
    appctx: BitableAppContext = ctx.obj

    try:
        with out.status("Repairing id stamps..."):
            repaired = appctx.db.repair_id_stamps(database, table)
    except BitableDBError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if not repaired:
        out.success("All id stamps are in place.")
        return

    out.success(f"Repaired {len(repaired)} record(s).")
    out.tables_table(repaired, title="Repaired records", column="Record id")
