"""CLI entry point for tickettrack."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from tickettrack import get_version
from tickettrack.config import ConfigError, TrackerConfig, load_config
from tickettrack.logging import setup_logging
from tickettrack.tracker import TrackerController, build_controller


def _load(config_path: Path | None, verbose: bool) -> TrackerConfig:
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    setup_logging(
        log_dir=config.log_dir,
        level="DEBUG" if verbose else config.log_level,
        console=verbose,
    )
    return config


def _print_tickets(controller: TrackerController) -> None:
    snapshot = controller.snapshot()
    click.echo(f"{snapshot.project_name} ({snapshot.project_id or 'no project'})")
    if not snapshot.tickets:
        click.echo("  No tickets in progress")
    for ticket in snapshot.tickets:
        click.echo(f"  [{ticket.status.value:<11}] {ticket.formatted_time:>8}  {ticket.name}")
    if snapshot.completed_tickets:
        click.echo("Completed:")
        for ticket in snapshot.completed_tickets:
            click.echo(f"  {ticket.formatted_time:>8}  {ticket.name}")
    if snapshot.error is not None:
        click.echo(f"Last error: {snapshot.error.value}", err=True)


config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to config.yaml (defaults to ~/.tickettrack/config.yaml)",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")


@click.group()
@click.version_option(get_version(), prog_name="tickettrack")
def main() -> None:
    """tickettrack - track time on Asana tickets that are In Progress."""
    pass


@main.command()
@config_option
@verbose_option
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
def serve(config_path: Path | None, verbose: bool, host: str | None, port: int | None) -> None:
    """Run the local API that a menu-bar front end talks to."""
    import uvicorn  # noqa: PLC0415

    from tickettrack.api import create_app  # noqa: PLC0415

    config = _load(config_path, verbose)
    app = create_app(config)
    uvicorn.run(app, host=host or config.host, port=port or config.port, log_level="info")


@main.command()
@config_option
@verbose_option
def login(config_path: Path | None, verbose: bool) -> None:
    """Open Asana in the browser and store a pasted session cookie."""
    config = _load(config_path, verbose)
    controller = build_controller(config)
    controller.start()
    try:
        if controller.authenticate().result():
            click.echo("Authenticated.")
            _print_tickets(controller)
        else:
            click.echo("Authentication failed. Copy the full Cookie header and try again.", err=True)
            sys.exit(1)
    finally:
        controller.stop()


@main.command()
@config_option
@verbose_option
def logout(config_path: Path | None, verbose: bool) -> None:
    """Forget the session cookie and all tracked tickets."""
    config = _load(config_path, verbose)
    controller = build_controller(config)
    controller.start()
    try:
        controller.clear_authentication()
    finally:
        controller.stop()
    click.echo("Signed out.")


@main.command("set-project")
@config_option
@verbose_option
@click.argument("project_id")
def set_project(config_path: Path | None, verbose: bool, project_id: str) -> None:
    """Select the Asana project to track (the number in the project URL)."""
    config = _load(config_path, verbose)
    controller = build_controller(config)
    controller.start()
    try:
        if not controller.save_project_selection(project_id).result():
            error = controller.snapshot().error
            click.echo(f"Project not saved ({error.value if error else 'unknown error'})", err=True)
            sys.exit(1)
        click.echo(f"Tracking project {controller.project_id}.")
        _print_tickets(controller)
    finally:
        controller.stop()


@main.command()
@config_option
@verbose_option
@click.option("--refresh/--no-refresh", default=True, help="Fetch from Asana first")
def tickets(config_path: Path | None, verbose: bool, refresh: bool) -> None:
    """List tracked tickets and their time."""
    config = _load(config_path, verbose)
    controller = build_controller(config)
    # Start without the automatic refresh so --no-refresh stays offline
    controller.ledger.load()
    try:
        if refresh:
            controller.start()
            controller.refresh().result()
        _print_tickets(controller)
    finally:
        if refresh:
            controller.stop()
        else:
            controller.store.close()


if __name__ == "__main__":
    main()
