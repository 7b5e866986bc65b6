"""Click-based CLI for dam-series.

Thin wrapper around library modules. Zero business logic — every operation
delegates to the series service, the resolver or the CSV exporter.
"""

from __future__ import annotations

import json
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from dam_series.core import ConfigError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigError as exc:
            console.print(f"[red]Configuration error: {exc}[/red]")
            raise SystemExit(1)
    return ctx.obj["config"]


def _build_service(ctx: click.Context):
    from dam_series.series import NullSeriesCache, SeriesService

    # One-shot process: nothing to gain from caching
    return SeriesService.from_config(_load_config(ctx), cache=NullSeriesCache())


def _parse_request(ctx: click.Context, date_str: str | None, source: str | None):
    """Validate --date/--source the same way the HTTP layer does."""
    from dam_series.core import InvalidRequest
    from dam_series.series import SeriesRequest

    config = _load_config(ctx)
    try:
        return SeriesRequest.parse(date_str, source, config.sources.default_source)
    except InvalidRequest as exc:
        raise click.UsageError(str(exc)) from exc


def _fetch_series(ctx: click.Context, date_str: str | None, source: str | None):
    """Run the engine, printing classified failures and exiting 1."""
    from dam_series.core import SeriesError

    request = _parse_request(ctx, date_str, source)
    service = _build_service(ctx)
    try:
        return service.get_series(request.date, request.mode)
    except SeriesError as exc:
        console.print(f"[red]{type(exc).__name__}: {exc}[/red]")
        if ctx.obj["verbose"] and exc.context:
            for key, value in sorted(exc.context.items()):
                console.print(f"  {key}: {value}")
        raise SystemExit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="DAM_SERIES_CONFIG",
    default=None,
    help="Path to dam-series.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="dam-series")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """DAM Series: half-hour price/volume series from daily market exports."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# series
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--date", "-d", "date_str", type=str, default=None, help="Trading day YYYY-MM-DD (default: today, UTC).")
@click.option("--source", "-s", type=str, default=None, help="auto | xlsx | json (default: from config).")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def series(ctx: click.Context, date_str: str | None, source: str | None, output_format: str) -> None:
    """Print the half-hour series for one trading day."""
    result = _fetch_series(ctx, date_str, source)

    output_format = output_format.lower()
    if output_format == "json":
        click.echo(json.dumps(result.to_payload(), indent=2))
    elif output_format == "csv":
        from dam_series.series import series_to_csv

        click.echo(series_to_csv(result, bom=False))
    else:
        _output_series_table(result)


def _output_series_table(result) -> None:
    """Render a series as a Rich table with the day's high and low."""
    table = Table(title=f"DAM {result.date.isoformat()} ({result.source.value}: {result.file})")
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Volume (MWh)", justify="right")
    table.add_column("Price (€/MWh)", justify="right")

    for i, (label, volume, price) in enumerate(result.points(), start=1):
        table.add_row(str(i), label, f"{volume:.2f}", f"{price:.2f}")

    console.print(table)

    hi_label, hi_price = result.high()
    lo_label, lo_price = result.low()
    console.print(
        f"High: [bold]{hi_price:.2f}[/bold] at {hi_label}  |  "
        f"Low: [bold]{lo_price:.2f}[/bold] at {lo_label}"
    )


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--date", "-d", "date_str", type=str, default=None, help="Trading day YYYY-MM-DD (default: today, UTC).")
@click.option("--source", "-s", type=str, default=None, help="auto | xlsx | json (default: from config).")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory for dam_market_data_<date>.csv.",
)
@click.pass_context
def export(ctx: click.Context, date_str: str | None, source: str | None, output_dir: str) -> None:
    """Write the series for one trading day as a CSV file."""
    from dam_series.series import write_csv

    result = _fetch_series(ctx, date_str, source)
    path = write_csv(result, output_dir)
    console.print(f"[green]✓[/green] Wrote {len(result.labels)} slots to {path}")


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--date", "-d", "date_str", type=str, default=None, help="Trading day YYYY-MM-DD (default: today, UTC).")
@click.pass_context
def status(ctx: click.Context, date_str: str | None) -> None:
    """Show source directories and which file each source would use."""
    from dam_series.core import SeriesError, SourceKind
    from dam_series.series import SourceResolver

    config = _load_config(ctx)
    request = _parse_request(ctx, date_str, None)
    resolver = SourceResolver.from_config(config.sources)

    table = Table(title=f"Sources for {request.date.isoformat()}")
    table.add_column("Source", style="bold", no_wrap=True)
    table.add_column("Directory", overflow="fold")
    table.add_column("File", no_wrap=True)

    for kind in SourceKind:
        try:
            found = resolver.resolve(request.date, kind).name
        except SeriesError as exc:
            found = f"[yellow]{exc.code}[/yellow]"
        table.add_row(kind.value, str(resolver.directory(kind)), found)

    console.print(table)
    console.print(f"Default source: [bold]{config.sources.default_source.value}[/bold]")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: from config).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default: from config).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    config = _load_config(ctx)
    if ctx.obj.get("config_path"):
        # The app factory runs in uvicorn and reads the path from the env
        os.environ["DAM_SERIES_CONFIG"] = ctx.obj["config_path"]
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting dam-series API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "dam_series.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
