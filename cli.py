"""CLI entry point for proxy-forward."""

import sys
from datetime import datetime

from rich.console import Console
from rich.table import Table

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import mask, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            print_forward_status(config)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    try:
        validate_config(config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE} and set forward.trigger_header[/dim]")
        sys.exit(1)

    if not config.forward.headers:
        console.print("[yellow]Warning:[/yellow] No override headers configured")

    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="debug" if config.proxy.debug else "warning",
        timeout_keep_alive=config.proxy.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def validate_config(config: Config) -> None:
    """Reject configuration the server cannot run with."""
    if not config.forward.trigger_header.strip():
        raise ConfigurationError("Trigger header name is empty")


def print_forward_status(config: Config) -> None:
    """Print the effective forwarding configuration, secrets masked."""
    console.print(f"[bold]Name:[/bold] {config.forward.name}")
    console.print(f"[bold]Trigger header:[/bold] {config.forward.trigger_header}")
    console.print(f"[bold]Listen:[/bold] {config.proxy.host}:{config.proxy.port}")

    if not config.forward.headers:
        console.print("[dim]No override headers configured[/dim]")
        return

    table = Table(title="Override headers", show_header=True, header_style="bold")
    table.add_column("Header")
    table.add_column("Value")
    for key, value in config.forward.headers.items():
        shown = "[red](removed)[/red]" if value == "" else mask(value)
        table.add_row(key, shown)
    console.print(table)


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Proxy Forward[/bold cyan]

Replays requests carrying a Location header against that URL, with the
configured override headers applied, and relays the response back.

[bold]Usage:[/bold]
    proxy-forward              Start with live dashboard
    proxy-forward --check      Show forwarding configuration
    proxy-forward --config     Show config location
    proxy-forward --help       Show this help

[bold]Override headers:[/bold]
    Set forward.headers in the config file. An empty value removes the
    header from forwarded requests.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
