"""Rich console output for the storeqa CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from storeqa.config import StoreConfig
from storeqa.errors import StoreQAError
from storeqa.security.sanitization import mask_secret

console = Console()
err_console = Console(stderr=True)


def config_table(config: StoreConfig) -> Table:
    """Resolved configuration with both credential halves masked."""
    table = Table(title=f"Configuration: {config.environment}", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    rows = [
        ("environment", config.environment),
        ("base_url", config.get_base_url()),
        ("api_base_url", config.get_api_base_url()),
        ("consumer_key", mask_secret(config.get_consumer_key())),
        ("consumer_secret", mask_secret(config.get_consumer_secret())),
        ("browser", config.browser),
        ("headless", str(config.headless)),
        ("timeout", f"{config.timeout:g}s"),
        ("screenshot_dir", config.screenshot_dir),
        ("report_dir", config.report_dir),
    ]
    for name, value in rows:
        table.add_row(name, value)
    return table


def params_table(params: dict[str, str]) -> Table:
    table = Table(title="OAuth parameters", show_header=True)
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green")
    for name, value in params.items():
        table.add_row(name, value)
    return table


def print_error(error: StoreQAError) -> None:
    err_console.print(f"[bold red]{escape(error.message)}[/bold red]", highlight=False)
    if error.suggestions:
        err_console.print("\n[yellow]Suggestions:[/yellow]")
        for suggestion in error.suggestions:
            err_console.print(f"  - {suggestion}", highlight=False, markup=False)
