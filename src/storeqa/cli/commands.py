"""CLI commands for storeqa."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click
import pytest

from storeqa.cli.output import config_table, console, params_table, print_error
from storeqa.config import StoreConfig, load_config, validate_config_credentials
from storeqa.config.loader import CONFIG_DIR_ENV
from storeqa.errors import StoreQAError
from storeqa.mock_store import DEFAULT_CONSUMER_KEY, DEFAULT_CONSUMER_SECRET, MockStoreServer
from storeqa.oauth import FixedClock, FixedNonce, OAuthSigner, signature_base_string
from storeqa.oauth.encoding import append_query, to_query_string
from storeqa.observability import configure_logging
from storeqa.security.sanitization import mask_secret

logger = logging.getLogger(__name__)

SUITES = {
    "api": ["acceptance/test_customer_api.py"],
    "ui": ["acceptance/test_homepage.py"],
}
SUITES["all"] = SUITES["api"] + SUITES["ui"]


def _config(ctx: click.Context) -> StoreConfig:
    """Load the selected environment once per invocation."""
    if "store_config" not in ctx.obj:
        try:
            ctx.obj["store_config"] = load_config(ctx.obj["env"], config_dir=ctx.obj["config_dir"])
        except StoreQAError as e:
            print_error(e)
            sys.exit(1)
    return ctx.obj["store_config"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
@click.option("--env", "-e", default=None, help="Environment (dev, staging, prod). Defaults to STOREQA_ENV or dev.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding <env>.yaml files",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_json: bool, env: str | None, config_dir: Path | None) -> None:
    """storeqa - storefront and WooCommerce API QA harness."""
    ctx.ensure_object(dict)
    ctx.obj["env"] = env
    ctx.obj["config_dir"] = config_dir
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING, json_format=log_json)


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the resolved configuration (secrets masked)."""
    console.print(config_table(_config(ctx)))


@cli.command("check-credentials")
@click.pass_context
def check_credentials(ctx: click.Context) -> None:
    """Validate the API consumer key and secret."""
    config = _config(ctx)
    try:
        validate_config_credentials(config)
    except StoreQAError as e:
        print_error(e)
        sys.exit(1)

    console.print("[green]API credentials found[/green]")
    console.print(f"Consumer Key: {mask_secret(config.get_consumer_key(), visible=10)}", markup=False)
    console.print(f"Consumer Secret: {mask_secret(config.get_consumer_secret(), visible=10)}", markup=False)


@cli.command()
@click.argument("method")
@click.argument("url")
@click.option("--timestamp", type=int, default=None, help="Fixed oauth_timestamp")
@click.option("--nonce", default=None, help="Fixed oauth_nonce")
@click.option("--consumer-key", default=None, help="Override the configured consumer key")
@click.option("--consumer-secret", default=None, help="Override the configured consumer secret")
@click.pass_context
def sign(
    ctx: click.Context,
    method: str,
    url: str,
    timestamp: int | None,
    nonce: str | None,
    consumer_key: str | None,
    consumer_secret: str | None,
) -> None:
    """Print the OAuth parameters and signed URL for METHOD URL.

    Useful for comparing against what the server computed when a request
    comes back 401.
    """
    if consumer_key is None or consumer_secret is None:
        config = _config(ctx)
        consumer_key = consumer_key or config.get_consumer_key()
        consumer_secret = consumer_secret or config.get_consumer_secret()

    try:
        signer = OAuthSigner(
            consumer_key,
            consumer_secret,
            clock=FixedClock(timestamp) if timestamp is not None else None,
            nonce_source=FixedNonce(nonce) if nonce else None,
        )
        params = signer.sign(method, url)
    except StoreQAError as e:
        print_error(e)
        sys.exit(1)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    console.print(params_table(params))
    click.echo("\nBase string:")
    click.echo(signature_base_string(method, url, params))
    click.echo("\nSigned URL:")
    click.echo(append_query(url, to_query_string(params.items())))


@cli.command()
@click.argument("suite", type=click.Choice(sorted(SUITES)))
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--tags", "-m", default=None, help="pytest marker expression, e.g. 'api and not slow'")
@click.option("--headless/--headed", default=None, help="Override the configured browser mode")
@click.pass_context
def run(
    ctx: click.Context,
    suite: str,
    report_dir: Path | None,
    tags: str | None,
    headless: bool | None,
) -> None:
    """Run the live acceptance SUITE (api, ui or all) with pytest."""
    config = _config(ctx)

    if suite in ("api", "all"):
        try:
            validate_config_credentials(config)
        except StoreQAError as e:
            print_error(e)
            console.print("[red]Cannot run API tests without API credentials[/red]")
            sys.exit(1)

    reports = report_dir or Path(config.report_dir)
    reports.mkdir(parents=True, exist_ok=True)

    args = [
        *SUITES[suite],
        "--env",
        config.environment,
        f"--junitxml={reports / f'junit-{suite}.xml'}",
        f"--cucumberjson={reports / f'cucumber-{suite}.json'}",
    ]
    if tags:
        args += ["-m", tags]
    # The pytest fixtures load their own config; hand them the same selection.
    if ctx.obj["config_dir"] is not None:
        os.environ[CONFIG_DIR_ENV] = str(ctx.obj["config_dir"])
    if headless is not None:
        os.environ["STOREQA_HEADLESS"] = "true" if headless else "false"

    console.print(f"[blue]Running {suite} tests against {config.environment}[/blue]")
    logger.debug("pytest %s", " ".join(args))

    exit_code = int(pytest.main(args))
    if exit_code == 0:
        console.print("[green]All tests passed[/green]")
    else:
        console.print(f"[red]Tests failed (exit code {exit_code})[/red]")
    console.print(f"Reports: {reports}", markup=False)
    sys.exit(exit_code)


@cli.command("mock-server")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8080, show_default=True)
@click.option("--consumer-key", default=DEFAULT_CONSUMER_KEY, show_default=True)
@click.option("--consumer-secret", default=DEFAULT_CONSUMER_SECRET, show_default=True)
def mock_server(host: str, port: int, consumer_key: str, consumer_secret: str) -> None:
    """Serve the mock WooCommerce customers API."""
    server = MockStoreServer(host=host, port=port, consumer_key=consumer_key, consumer_secret=consumer_secret)
    console.print(f"Mock store API: {server.api_base_url}", markup=False)
    console.print("Press Ctrl+C to stop")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        console.print("\nStopped")
