"""Commands for Bitable-backed databases."""

import typer

from bitabledb.cli.common.context import BitableAppContext, build_context
from bitabledb.cli.common.exits import exit_from_exc
from bitabledb.cli.common.options import AppIdOpt, AppSecretOpt
from bitabledb.cli.common.output import out
from bitabledb.core.errors import RemoteError

db_app = typer.Typer(
    help="Database operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@db_app.callback()
def _init(
    ctx: typer.Context,
    app_id: str | None = AppIdOpt,
    app_secret: str | None = AppSecretOpt,
):
    """Initialize database context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_context(app_id, app_secret)


@db_app.command("save")
def save(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Database name"),
):
    """Create a database if it does not exist yet."""
    appctx: BitableAppContext = ctx.obj

    try:
        with out.status("Saving database..."):
            database_id = appctx.db.save_database(database)
    except RemoteError as exc:
        exit_from_exc(exc, message=f"Could not save database '{database}': {exc}", code=1)

    out.success(f"Database '{database}' is ready.")
    out.kv({"Database": database, "Id": database_id})
