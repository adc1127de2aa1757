"""hostsboard CLI — admin entry-point over the JSON store.

Usage:
    hostsboard --help

Command groups:
    category  → category vocabulary
    type      → type vocabulary
    group     → host groups
    host      → host entries
    export    → hosts-file text
    serve     → run the HTTP API
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from hostsboard.config import settings
from hostsboard.logging_config import configure_logging
from hostsboard_cli.commands.hosts import export, group_app, host_app
from hostsboard_cli.commands.vocabulary import category_app, type_app

app = typer.Typer(
    name="hostsboard",
    help="Manage grouped hosts-file entries.",
    no_args_is_help=True,
)
app.add_typer(category_app, name="category")
app.add_typer(type_app, name="type")
app.add_typer(group_app, name="group")
app.add_typer(host_app, name="host")
app.command("export")(export)


@app.callback()
def main(
    db_dir: Optional[Path] = typer.Option(
        None, "--db-dir", envvar="HOSTSBOARD_DB_DIR", help="Directory holding db.json."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Configure storage location and logging for every command."""
    if db_dir is not None:
        settings.data_dir_override = db_dir
    configure_logging(settings.log_level, verbose=verbose)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    typer.echo(f"[serve] Document at {settings.db_path}")
    uvicorn.run("hostsboard.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
