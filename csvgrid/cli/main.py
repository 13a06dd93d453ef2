#!/usr/bin/env python3
"""
csvgrid command line interface.

Commands:
    catalogs      List the catalogs of a configuration file
    catalog       Build and display the resource catalog of one catalog id
    read          Decode one file into grid buffers and print or export them
    config-show   Display the effective CLI configuration
"""

import datetime as dt
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich import box

from csvgrid.cli.config import CLIConfig, load_config_with_precedence
from csvgrid.cli.formatters import (
    catalog_table,
    frame_table,
    read_frame,
    registrations_table,
    write_frame,
)
from csvgrid.core.source import CsvDataSource
from csvgrid.core.timestamps import ensure_utc
from csvgrid.errors import CsvGridError
from csvgrid.logging_config import setup_logging

console = Console()

# Global configuration singleton
_config: Optional[CLIConfig] = None


def get_config() -> CLIConfig:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = load_config_with_precedence()
    return _config


def set_config(config: CLIConfig) -> None:
    """Set the global config instance (used by the callback and by tests)."""
    global _config
    _config = config


app = typer.Typer(
    name="csvgrid",
    help="Decode delimited time-series files into grid-aligned buffers",
    add_completion=False
)


@app.callback()
def global_options(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to the console"
    ),
    cli_config: Optional[Path] = typer.Option(
        None,
        "--cli-config",
        help="Use specific CLI config file"
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir",
        help="Override log directory"
    ),
):
    """
    Global options applied to all commands.

    These options override configuration from files and environment variables.
    """
    overrides = {}
    if verbose:
        overrides["verbose"] = True
    if log_dir is not None:
        overrides["log_dir"] = log_dir

    config = load_config_with_precedence(config_file=cli_config, **overrides)
    set_config(config)
    setup_logging(config.log_dir, verbose=config.verbose)


def _load_source(config_path: Optional[Path]) -> CsvDataSource:
    config = get_config()
    path = config_path if config_path is not None else config.config_path
    root = config.data_root if config.data_root is not None else Path(path).resolve().parent

    try:
        return CsvDataSource.from_root(root, config_file=path)
    except (FileNotFoundError, CsvGridError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)


def _parse_begin(text: str) -> dt.datetime:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(dt.datetime.fromisoformat(text))
    except ValueError:
        raise typer.BadParameter(f"not an ISO 8601 timestamp: {text!r}")


CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Catalog configuration file (JSON or YAML)")


@app.command("catalogs")
def catalogs_command(config_path: Optional[Path] = CONFIG_OPTION):
    """List the catalogs of a configuration file."""
    source = _load_source(config_path)
    console.print(registrations_table(source.get_catalog_registrations("/")))


@app.command("catalog")
def catalog_command(
    catalog_id: str = typer.Argument(..., help="Catalog id, e.g. /A/B/C"),
    config_path: Optional[Path] = CONFIG_OPTION,
):
    """Build the resource catalog of a catalog id from its sample files."""
    source = _load_source(config_path)

    try:
        catalog = source.get_catalog(catalog_id)
    except (KeyError, CsvGridError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(catalog_table(catalog))
    console.print(f"[dim]{len(catalog.resources)} resources[/dim]")


@app.command("read")
def read_command(
    catalog_id: str = typer.Argument(..., help="Catalog id"),
    file_source_id: str = typer.Argument(..., help="File source id"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to decode"),
    resources: List[str] = typer.Option(..., "--resource", "-r", help="Resource id to decode (repeatable)"),
    begin: str = typer.Option(..., "--begin", "-b", help="Grid origin of the file (ISO 8601, naive = UTC)"),
    block: int = typer.Option(..., "--block", min=0, help="Number of grid slots to fill"),
    offset: int = typer.Option(0, "--offset", min=0, help="Grid slots to skip from the start of the file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write CSV/Parquet instead of printing"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="table, csv or parquet"),
    config_path: Optional[Path] = CONFIG_OPTION,
):
    """Decode one file into grid buffers."""
    begin_dt = _parse_begin(begin)
    source = _load_source(config_path)
    fmt = fmt or get_config().output_format

    try:
        requests, result = source.read_file(
            catalog_id,
            file_source_id,
            file,
            begin=begin_dt,
            resource_ids=resources,
            file_block=block,
            file_offset=offset,
        )
        settings = source.get_settings(catalog_id, file_source_id)
    except (KeyError, CsvGridError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    df = read_frame(requests, begin_dt, settings.sample_period, file_offset=offset)

    if output is not None:
        write_frame(df, output, "parquet" if fmt == "parquet" else "csv")
        console.print(f"[green]✓[/green] Wrote {df.height} rows to {output}")
    elif fmt == "table":
        console.print(frame_table(df, title=str(file)))
    else:
        typer.echo(df.write_csv(), nl=False)

    valid = ", ".join(f"{rid}={count}" for rid, count in zip(requests, result.valid_slots))
    state = "complete" if result.complete else "incomplete"
    console.print(f"[dim]{result.lines_read} lines read, {state}; valid slots: {valid}[/dim]")


@app.command("config-show")
def show_config_command():
    """Display the effective CLI configuration."""
    config = get_config()

    table = Table(
        title="Current Configuration",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Setting", style="bold", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_column("Source", style="yellow")

    for field_name in CLIConfig.model_fields:
        table.add_row(field_name, str(getattr(config, field_name)), config.get_field_source(field_name))

    console.print(table)


def main():
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
