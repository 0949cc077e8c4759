"""Application context management for the CLI."""

from dataclasses import dataclass

from bitabledb.cli.common.exits import die, exit_from_exc
from bitabledb.core.adapters.bitable import LarkBitableAdapter
from bitabledb.core.auth import AuthError, get_client
from bitabledb.core.db import DB
from bitabledb.core.errors import RemoteError


@dataclass
class BitableAppContext:
    """Application context holding the Bitable adapter and the DB facade."""

    app_id: str | None
    adapter: LarkBitableAdapter
    db: DB


def build_context(app_id: str | None, app_secret: str | None) -> BitableAppContext:
    """Build and return the application context.

    Args:
        app_id: Optional app id; falls back to the environment.
        app_secret: Optional app secret; falls back to the environment.

    Returns:
        BitableAppContext: Context with a connected DB facade.
    """
    try:
        client = get_client(app_id, app_secret)
    except AuthError as exc:
        die(str(exc), code=1)
    adapter = LarkBitableAdapter(client)
    try:
        db = DB(adapter)
    except RemoteError as exc:
        exit_from_exc(exc, message=f"Could not reach Bitable: {exc}", code=1)
    return BitableAppContext(app_id=app_id, adapter=adapter, db=db)
