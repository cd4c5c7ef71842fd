"""
CLI entry point for litepersist.

A small admin tool over the same components applications use. Every
command takes a YAML config file in component config shape:

    connection:
      database: ./data/app.db
    options:
      max_page_size: 50

Commands:
    check       Resolve the connection and open the database
    tables      List tables with row counts
    page        Print one page of rows from a table
    clear       Delete every row from a table
"""

import json
import logging
import traceback
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from litepersist import __version__
from litepersist.config import ConfigParams
from litepersist.data import PagingParams
from litepersist.errors import LitePersistError
from litepersist.persistence import SqliteConnection, SqlitePersistence
from litepersist.refer import Descriptor, References

app = typer.Typer(
    name="litepersist",
    help="Inspect and maintain SQLite databases used by litepersist components.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

CLI_CONNECTION_DESCRIPTOR = Descriptor("litepersist", "connection", "sqlite", "cli", "1.0")

ConfigArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the component config YAML file.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output results in JSON format.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", help="Log driver activity to stderr.")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Show full error tracebacks.")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]litepersist[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    litepersist - SQLite persistence components.

    Open, inspect and clear the databases configured for your components.
    """
    pass


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _output_json_error(error: Exception, include_traceback: bool = False) -> None:
    """Output an error in JSON format."""
    if isinstance(error, LitePersistError):
        output: dict[str, Any] = {"error": True, **error.to_dict()}
    else:
        output = {
            "error": True,
            "error_type": type(error).__name__,
            "message": str(error),
        }
    if include_traceback:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2, default=str))


def _fail(error: Exception, json_output: bool, debug: bool) -> NoReturn:
    if json_output:
        _output_json_error(error, debug)
    else:
        console.print(f"[red]Error: {error}[/red]")
        if debug:
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
    raise typer.Exit(code=1)


def _open_connection(config: ConfigParams) -> SqliteConnection:
    connection = SqliteConnection()
    connection.configure(config)
    connection.open(None)
    return connection


def _open_table(
    config: ConfigParams, connection: SqliteConnection, table: str
) -> SqlitePersistence[dict[str, Any]]:
    persistence: SqlitePersistence[dict[str, Any]] = SqlitePersistence(table)
    persistence.configure(config.override(ConfigParams.from_tuples("table", table)))
    persistence.set_references(References.from_tuples(CLI_CONNECTION_DESCRIPTOR, connection))
    persistence.open(None)
    return persistence


@app.command()
def check(
    config_path: ConfigArgument,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Resolve the configured connection and open the database.

    Example:
        $ litepersist check config.yaml
    """
    _configure_logging(verbose)
    try:
        config = ConfigParams.from_yaml(config_path)
        connection = _open_connection(config)
    except (LitePersistError, OSError) as e:
        _fail(e, json_output, debug)

    database = connection.get_database_name()
    connection.close(None)

    if json_output:
        print(json.dumps({"ok": True, "database": database}, indent=2))
    else:
        console.print(f"[green]✓[/green] Connected to sqlite database [bold]{database}[/bold]")


@app.command()
def tables(
    config_path: ConfigArgument,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    List tables with their row counts.

    Example:
        $ litepersist tables config.yaml
    """
    _configure_logging(verbose)
    try:
        config = ConfigParams.from_yaml(config_path)
        connection = _open_connection(config)
    except (LitePersistError, OSError) as e:
        _fail(e, json_output, debug)

    try:
        client = connection.get_connection()
        with connection.lock:
            names = [
                row["name"]
                for row in client.execute(
                    "SELECT name FROM sqlite_master"
                    " WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
                )
            ]

        counts = {}
        for name in names:
            persistence = _open_table(config, connection, name)
            counts[name] = persistence.get_count_by_filter(None, None)
            persistence.close(None)
    except LitePersistError as e:
        _fail(e, json_output, debug)
    finally:
        connection.close(None)

    if json_output:
        print(json.dumps({"tables": [{"name": n, "count": c} for n, c in counts.items()]}, indent=2))
        return

    if not counts:
        console.print("[dim]No tables found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


@app.command()
def page(
    config_path: ConfigArgument,
    table_name: Annotated[str, typer.Argument(help="Table to read from.")],
    filter: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="SQL WHERE fragment, e.g. \"name='abc'\"."),
    ] = None,
    sort: Annotated[
        Optional[str],
        typer.Option("--sort", "-s", help="SQL ORDER BY fragment, e.g. \"id DESC\"."),
    ] = None,
    skip: Annotated[Optional[int], typer.Option("--skip", help="Rows to skip.")] = None,
    take: Annotated[Optional[int], typer.Option("--take", help="Rows to return.")] = None,
    total: Annotated[bool, typer.Option("--total", help="Also count all matching rows.")] = False,
    json_output: JsonOption = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Print one page of rows from a table.

    Example:
        $ litepersist page config.yaml notes --filter "title LIKE 'a%'" --take 10 --total
    """
    _configure_logging(verbose)
    try:
        config = ConfigParams.from_yaml(config_path)
        connection = _open_connection(config)
    except (LitePersistError, OSError) as e:
        _fail(e, json_output, debug)

    try:
        persistence = _open_table(config, connection, table_name)
        result = persistence.get_page_by_filter(
            None, filter, PagingParams(skip=skip, take=take, total=total), sort, None
        )
        persistence.close(None)
    except LitePersistError as e:
        _fail(e, json_output, debug)
    finally:
        connection.close(None)

    if json_output:
        print(json.dumps(result.model_dump(), indent=2, default=str))
        return

    if not result.data:
        console.print(f"[dim]No rows in {table_name}.[/dim]")
    else:
        table = Table(show_header=True, header_style="bold")
        columns = list(result.data[0].keys())
        for column in columns:
            table.add_column(column)
        for row in result.data:
            cells = []
            for column in columns:
                value = "" if row.get(column) is None else str(row.get(column))
                if len(value) > 60:
                    value = value[:57] + "..."
                cells.append(value)
            table.add_row(*cells)
        console.print(table)

    if result.total is not None:
        console.print(f"[dim]Showing {len(result.data)} of {result.total}[/dim]")


@app.command()
def clear(
    config_path: ConfigArgument,
    table_name: Annotated[str, typer.Argument(help="Table to clear.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Delete every row from a table.

    Example:
        $ litepersist clear config.yaml notes --yes
    """
    _configure_logging(verbose)
    if not yes and not typer.confirm(f"Delete all rows from {table_name}?"):
        console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(code=1)

    try:
        config = ConfigParams.from_yaml(config_path)
        connection = _open_connection(config)
    except (LitePersistError, OSError) as e:
        _fail(e, False, debug)

    try:
        persistence = _open_table(config, connection, table_name)
        persistence.clear(None)
        persistence.close(None)
    except LitePersistError as e:
        _fail(e, False, debug)
    finally:
        connection.close(None)

    console.print(f"[green]✓[/green] Cleared [bold]{table_name}[/bold]")


if __name__ == "__main__":
    app()
