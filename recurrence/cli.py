"""Recurrence CLI entry point.

Provides command-line interface for running the HTTP service, processing
archives locally and inspecting configuration.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from recurrence.config import RecurrenceConfig, get_config
from recurrence.errors import RecurrenceError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VALID_MODES = ("lite", "standard")

# Create CLI app
app = typer.Typer(
    name="recurrence",
    help="Recurrence - exception deduplication and support notification service",
    add_completion=False,
)


def _load_config(mode: str | None, config: str | None) -> RecurrenceConfig:
    """Load settings, applying only the options given on the command line."""
    if mode is not None and mode not in VALID_MODES:
        typer.echo(f"❌ Invalid mode: {mode}", err=True)
        typer.echo(f"   Valid modes: {', '.join(VALID_MODES)}", err=True)
        raise typer.Exit(code=1)

    if config and not Path(config).exists():
        typer.echo(f"❌ Configuration file not found: {config}", err=True)
        raise typer.Exit(code=1)

    try:
        overrides = {"mode": mode} if mode is not None else {}
        return get_config(config or None, **overrides)
    except ValueError as e:
        typer.echo(f"❌ Failed to load config: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def start(
    host: Annotated[
        str | None, typer.Option("--host", "-h", help="Host to bind to (default: api_host)")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Port to bind to (default: api_port)")
    ] = None,
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="Operational mode (lite|standard)")
    ] = None,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose output")
    ] = False,
) -> None:
    """Start the Recurrence HTTP service.

    Options left unset fall back to RECURRENCE_* environment variables,
    then to the configuration file, then to built-in defaults.

    MODES:
        lite: In-memory fingerprint store, counters reset on restart
        standard: Redis fingerprint store shared by all workers

    Examples:
        # Start with the configured mode (lite unless set otherwise)
        recurrence start

        # Start against Redis
        RECURRENCE_REDIS_URL=redis://cache:6379/0 recurrence start --mode=standard
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    recurrence_config = _load_config(mode, config)
    host = host or recurrence_config.api_host
    port = port if port is not None else recurrence_config.api_port
    logger.info(f"Starting Recurrence in {recurrence_config.mode} mode on {host}:{port}")

    import uvicorn

    from recurrence.api import create_app
    from recurrence.main import RecurrenceApplication

    app_instance = create_app(RecurrenceApplication(recurrence_config))
    uvicorn.run(app_instance, host=host, port=port, log_level="debug" if verbose else "info")


@app.command()
def ingest(
    archive: Annotated[Path, typer.Argument(help="Zip archive to process")],
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="Operational mode (lite|standard)")
    ] = None,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
) -> None:
    """Process a local archive exactly as an upload would be, then print the result.

    In lite mode the store starts empty for every invocation, so use
    standard mode to count duplicates across runs.
    """
    if not archive.is_file():
        typer.echo(f"❌ Archive not found: {archive}", err=True)
        raise typer.Exit(code=1)

    recurrence_config = _load_config(mode, config)

    try:
        result = asyncio.run(_ingest(recurrence_config, archive))
    except RecurrenceError as e:
        typer.echo(f"❌ {e.kind}: {e.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(result)


async def _ingest(recurrence_config: RecurrenceConfig, archive: Path) -> str:
    from recurrence.main import RecurrenceApplication

    application = RecurrenceApplication(recurrence_config)
    await application.start()
    try:
        response = await application.orchestrator.process_archive(archive.name, archive.read_bytes())
    finally:
        await application.stop()
    return response.model_dump_json(by_alias=True, indent=2)


@app.command()
def version() -> None:
    """Show Recurrence version information."""
    from recurrence import __version__

    typer.echo(f"Recurrence version: {__version__}")


@app.command()
def info() -> None:
    """Show Recurrence system information."""
    typer.echo("Recurrence - exception deduplication and support notification service")
    typer.echo("")
    typer.echo("Endpoints:")
    typer.echo("  POST /exceptions          record an exception occurrence")
    typer.echo("  GET  /exceptions/search   exact-match search")
    typer.echo("  GET  /exceptions          list unique exceptions")
    typer.echo("  POST /upload              process a zip archive")
    typer.echo("  POST /notify              write a notification")
    typer.echo("  GET  /notifications       list notifications")
    typer.echo("")
    typer.echo("Operational Modes:")
    typer.echo("  - lite: In-memory store, zero dependencies")
    typer.echo("  - standard: Redis store with persistent counters")


@app.command()
def modes() -> None:
    """List available operational modes."""
    from recurrence.modes import get_mode, list_modes

    typer.echo("Available operational modes:")
    typer.echo("")

    for mode_name in list_modes():
        mode_instance = get_mode(mode_name)
        typer.echo(f"  {mode_name}:")
        typer.echo(f"    Description: {mode_instance.mode_config.description}")
        typer.echo(f"    Store: {mode_instance.mode_config.store_backend}")
        typer.echo(f"    Persistent: {'Yes' if mode_instance.mode_config.persistent else 'No'}")
        typer.echo(f"    External Services: {'Required' if mode_instance.requires_external_services else 'None'}")
        typer.echo("")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
