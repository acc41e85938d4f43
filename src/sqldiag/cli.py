"""CLI entry point for SQLDiag using Click."""

from __future__ import annotations

import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from sqldiag import DatabaseDiagnostics, __version__
from sqldiag.checks.registry import build_registry
from sqldiag.config import ConnectionConfig, DiagnosticsConfig
from sqldiag.reporting.display_names import category_display_name, check_title

console = Console()


def _build_config(params: dict[str, Any]) -> ConnectionConfig:
    """Build ConnectionConfig from Click parameters."""
    provider = params.get("provider") or "sqlserver"
    connection_string = params.get("connection_string") or ""
    if connection_string and not params.get("database"):
        return ConnectionConfig.from_connection_string(connection_string, provider)
    return ConnectionConfig(
        provider=provider,
        server=params.get("server") or "localhost",
        database=params.get("database") or "",
        username=params.get("user") or "",
        password=params.get("password") or "",
        port=params.get("port") or (1433 if provider == "sqlserver" else 5432),
        connection_string=connection_string,
        trusted_connection=params.get("trusted_connection", False),
        ssl=params.get("ssl", False),
    )


def _build_diagnostics(params: dict[str, Any]) -> DatabaseDiagnostics:
    """Build DatabaseDiagnostics from Click parameters, exiting on bad input."""
    config = _build_config(params)
    errors = config.validate()
    if errors:
        for err in errors:
            console.print(f"[red]Error:[/red] {err}")
        sys.exit(1)

    return DatabaseDiagnostics.from_config(
        config, DiagnosticsConfig(max_concurrency=params.get("concurrency") or 5)
    )


# Common connection options
def connection_options(func: Any) -> Any:
    """Decorator that adds common connection options to a command."""
    func = click.option(
        "--provider",
        "-p",
        default="sqlserver",
        type=click.Choice(["sqlserver", "postgresql"]),
        help="Database provider",
    )(func)
    func = click.option("--server", "-s", default="localhost", help="Server hostname")(func)
    func = click.option("--database", "-d", required=False, help="Database name")(func)
    func = click.option("--user", "-u", default="", help="Username")(func)
    func = click.option("--password", "-P", default="", help="Password")(func)
    func = click.option("--port", type=int, default=None, help="Port number")(func)
    func = click.option("--connection-string", "-c", default="", help="Full connection string")(
        func
    )
    func = click.option(
        "--trusted-connection", is_flag=True, help="Use Windows trusted connection"
    )(func)
    func = click.option("--ssl", is_flag=True, help="Enable SSL/TLS")(func)
    func = click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="sqldiag")
def main() -> None:
    """SQLDiag: schema diagnostics for SQL Server and PostgreSQL.

    Audits a live database for missing keys, unenforced relationships,
    orphaned rows, inconsistent types, index problems and data quality
    issues. Read-only: nothing in the target database is changed.
    """


@main.command()
@connection_options
@click.option("--category", default=None, help="Only run checks of this category")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=5,
    show_default=True,
    help="Checks run at the same time",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    default="console",
    type=click.Choice(["console", "json"]),
    help="Output format",
)
def scan(**kwargs: Any) -> None:
    """Run the diagnostics and print the report."""
    _configure_logging(kwargs.get("verbose", False))
    diagnostics = _build_diagnostics(kwargs)
    fmt = kwargs.get("fmt", "console")

    if fmt == "json":
        report = diagnostics.scan(kwargs.get("category"))
        from sqldiag.reporters.json_reporter import JSONReporter

        click.echo(JSONReporter(report).render())
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Running diagnostics...", total=None)
            report = diagnostics.scan(kwargs.get("category"))
            progress.update(task, description="Diagnostics complete!")

        from sqldiag.reporters.console_reporter import ConsoleReporter

        if not report.categories:
            console.print("[yellow]No checks were run.[/yellow]")
        else:
            ConsoleReporter(report, console=console).print_report()


@main.command(name="checks")
@click.option("--category", default=None, help="Only list checks of this category")
def list_checks(category: str | None) -> None:
    """List the available checks and categories."""
    registry = build_registry()
    selected = registry.select(category) if category else list(registry.all())

    table = Table(title="Available Checks")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Code", style="bold")
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Providers")

    for check in selected:
        table.add_row(
            str(check.id),
            check.code,
            check.category or "",
            check_title(check.code, check.name),
            ", ".join(check.providers),
        )
    console.print(table)

    console.print("\n[bold]Categories[/bold]")
    for name in registry.categories():
        console.print(f"  {name}: {category_display_name(name)}")


def _configure_logging(verbose: bool) -> None:
    """Configure logging level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


if __name__ == "__main__":
    main()
