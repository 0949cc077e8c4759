"""Common CLI options for the CLI."""

import typer

AppIdOpt = typer.Option(
    None,
    "--app-id",
    envvar="BITABLE_APP_ID",
    help="Feishu/Lark app id (defaults to $BITABLE_APP_ID)",
    show_default=False,
)

AppSecretOpt = typer.Option(
    None,
    "--app-secret",
    envvar="BITABLE_APP_SECRET",
    help="Feishu/Lark app secret (defaults to $BITABLE_APP_SECRET)",
    show_default=False,
)

LogLevelOpt = typer.Option(
    "WARNING",
    "--log-level",
    help="Log level (DEBUG, INFO, WARNING, ERROR)",
)

JsonLogsOpt = typer.Option(
    False,
    "--json-logs",
    help="Emit logs as JSON lines",
)

FieldOpt = typer.Option(
    [],
    "--field",
    "-f",
    help="Field definition (name:type, type is string or int). This is reusable.",
    show_default=False,
)

WhereOpt = typer.Option(
    [],
    "--where",
    "-w",
    help="Search predicate (key=value, key>10, ...). This is reusable; predicates are ANDed.",
    show_default=False,
)

DataOpt = typer.Option(
    ...,
    "--data",
    "-d",
    help="Record as a JSON object",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before dropping",
)
