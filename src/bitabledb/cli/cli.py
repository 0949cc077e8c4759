"""CLI application for Bitable-backed databases."""

import typer

from bitabledb.cli.commands.databases import db_app
from bitabledb.cli.commands.records import records_app
from bitabledb.cli.commands.tables import tables_app
from bitabledb.cli.common.options import JsonLogsOpt, LogLevelOpt
from bitabledb.core.logs import setup_logging

app = typer.Typer(
    help="bitable-db - databases, tables and records on Feishu/Lark Bitable",
    no_args_is_help=True,
)


@app.callback()
def _main(log_level: str = LogLevelOpt, json_logs: bool = JsonLogsOpt):
    """Configure logging for every command."""
    setup_logging(level=log_level, json_logs=json_logs)


app.add_typer(db_app, name="db")
app.add_typer(tables_app, name="tables")
app.add_typer(records_app, name="records")


if __name__ == "__main__":
    app()
