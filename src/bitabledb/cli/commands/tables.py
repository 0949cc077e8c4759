"""Commands for tables inside Bitable-backed databases."""

from __future__ import annotations

import typer

from bitabledb.cli.common.context import BitableAppContext, build_context
from bitabledb.cli.common.exits import exit_from_exc, warn_exit
from bitabledb.cli.common.options import AppIdOpt, AppSecretOpt, ConfirmOpt, FieldOpt
from bitabledb.cli.common.output import out
from bitabledb.cli.common.parsing import parse_fields
from bitabledb.core.errors import NotFoundError, RemoteError
from bitabledb.core.models import Table

tables_app = typer.Typer(
    help="Table operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@tables_app.callback()
def _init(
    ctx: typer.Context,
    app_id: str | None = AppIdOpt,
    app_secret: str | None = AppSecretOpt,
):
    """Initialize table context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_context(app_id, app_secret)


@tables_app.command("list")
def tables_list(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
):
    """List the tables of a database."""
    appctx: BitableAppContext = ctx.obj

    try:
        with out.status("Loading tables..."):
            names = appctx.db.list_tables(database)
    except RemoteError as exc:
        exit_from_exc(exc, message=f"Could not list tables of '{database}': {exc}", code=1)

    if not names:
        warn_exit("No tables found.", code=0)

    out.header("Tables")
    out.info(f"Database: {database} | Tables: {len(names)}")
    out.tables_table(names, title="Tables")


@tables_app.command("save")
def tables_save(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    field: list[str] = FieldOpt,
):
    """Create a table or converge its fields onto the given definition."""
    appctx: BitableAppContext = ctx.obj

    try:
        definition = Table(name=table, fields=parse_fields(field))
    except ValueError as exc:
        out.error(str(exc))
        raise typer.Exit(2) from exc

    try:
        with out.status("Reconciling table..."):
            result = appctx.db.reconcile_table(database, definition)
    except RemoteError as exc:
        exit_from_exc(exc, message=f"Could not save table '{database}.{table}': {exc}", code=1)

    out.header("Table")
    out.kv({"Database": database, "Table": table, "Id": result.table_id})
    out.field_changes_table(result.changes)

    if result.failures:
        out.error(f"{len(result.failures)} field change(s) failed.")
        raise typer.Exit(1)

    out.success("Table is up to date.")


@tables_app.command("drop")
def tables_drop(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
    table: str = typer.Argument(..., help="Table name"),
    confirm: bool = ConfirmOpt,
):
    """Drop a table and all of its records."""
    appctx: BitableAppContext = ctx.obj

    if confirm and not out.confirm(f"Drop table '{database}.{table}'?"):
        warn_exit("Cancelled.", code=0)

    try:
        with out.status("Dropping table..."):
            appctx.db.drop_table(database, table)
    except NotFoundError as exc:
        exit_from_exc(exc, message=str(exc), code=1)
    except RemoteError as exc:
        exit_from_exc(exc, message=f"Could not drop table '{database}.{table}': {exc}", code=1)

    out.success(f"Dropped table '{database}.{table}'.")
