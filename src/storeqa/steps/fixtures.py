"""Fixtures and hooks shared by the API and UI scenarios."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from storeqa.client import ApiResponse, OAuthClient
from storeqa.config import StoreConfig, load_config
from storeqa.config.loader import CONFIG_DIR_ENV
from storeqa.errors import StoreQAError
from storeqa.observability import log_context
from storeqa.pages import HomePage, PageFactory
from storeqa.security.sanitization import SensitiveDataFilter

logger = logging.getLogger(__name__)

SCREENSHOT_TIMEOUT_MS = 5000

_scenario_log_context = pytest.StashKey[ExitStack]()
_step_log_context = pytest.StashKey[ExitStack]()


def pytest_addoption(parser):
    """Add the environment selector."""
    parser.addoption(
        "--env",
        action="store",
        default=None,
        help="Environment to test against (dev, staging, prod). Defaults to STOREQA_ENV or dev.",
    )


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    # Expose each phase's report as item.rep_<when> for fixture teardown.
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def pytest_sessionstart(session):
    """Redact signatures and secrets in every log record pytest captures."""
    # httpx logs each request URL at INFO, signature included.
    httpx_logger = logging.getLogger("httpx")
    if httpx_logger.getEffectiveLevel() < logging.WARNING:
        httpx_logger.setLevel(logging.WARNING)

    logging_plugin = session.config.pluginmanager.get_plugin("logging-plugin")
    if logging_plugin is None:
        return
    for name in ("caplog_handler", "report_handler", "log_cli_handler", "log_file_handler"):
        handler = getattr(logging_plugin, name, None)
        if handler is not None:
            handler.addFilter(SensitiveDataFilter())


def _close_log_context(node, key) -> None:
    stack = node.stash.get(key, None)
    if stack is not None:
        del node.stash[key]
        stack.close()


def pytest_bdd_before_scenario(request, feature, scenario):
    # Scenario and step names land on log lines and on StoreQAError locations.
    stack = ExitStack()
    stack.enter_context(log_context(feature=feature.name, scenario=scenario.name))
    request.node.stash[_scenario_log_context] = stack
    logger.info("Scenario: %s", scenario.name)


def pytest_bdd_after_scenario(request, feature, scenario):
    _close_log_context(request.node, _step_log_context)
    _close_log_context(request.node, _scenario_log_context)


def pytest_bdd_before_step(request, feature, scenario, step, step_func):
    _close_log_context(request.node, _step_log_context)
    stack = ExitStack()
    stack.enter_context(log_context(step=f"{step.keyword} {step.name}"))
    request.node.stash[_step_log_context] = stack


def pytest_bdd_after_step(request, feature, scenario, step, step_func, step_func_args):
    _close_log_context(request.node, _step_log_context)


def pytest_bdd_step_error(request, feature, scenario, step, step_func, step_func_args, exception):
    logger.error("Step failed: %s %s: %s", step.keyword, step.name, exception)
    _close_log_context(request.node, _step_log_context)


@dataclass
class ScenarioContext:
    """State passed between the steps of one scenario."""

    customer_data: dict[str, Any] = field(default_factory=dict)
    response: ApiResponse | None = None
    customer_id: str | None = None
    existing_email: str | None = None
    created_customer_ids: list[str] = field(default_factory=list)

    def require_response(self) -> ApiResponse:
        assert self.response is not None, "No API response recorded; did a When step run?"
        return self.response


@pytest.fixture(scope="session")
def store_env(request) -> str | None:
    return request.config.getoption("--env")


@pytest.fixture(scope="session")
def store_config(request, store_env) -> StoreConfig:
    """Configuration for the selected environment, loaded once per run."""
    config_dir = os.environ.get(CONFIG_DIR_ENV) or request.config.rootpath / "config"
    config = load_config(store_env, config_dir=config_dir)
    logger.info(
        "Environment: %s, storefront: %s, API: %s",
        config.environment,
        config.get_base_url(),
        config.get_api_base_url(),
    )
    return config


@pytest.fixture
def scenario_context() -> ScenarioContext:
    return ScenarioContext()


@pytest.fixture
def api_client(store_config, scenario_context) -> Iterator[OAuthClient]:
    """Signed client for one scenario; customers it created are deleted afterwards."""
    client = OAuthClient.from_config(store_config)
    yield client
    for customer_id in scenario_context.created_customer_ids:
        try:
            client.delete(f"/customers/{customer_id}?force=true")
        except StoreQAError as e:
            logger.warning("Failed to delete customer %s: %s", customer_id, e)
    client.close()


def _screenshot_path(directory: str, node_name: str) -> Path:
    safe_name = re.sub(r"[^a-zA-Z0-9._-]", "_", node_name)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(directory) / f"{safe_name}_FAILED_{timestamp}.png"


@pytest.fixture
def browser_page(request, store_config) -> Iterator[Any]:
    """A Playwright page in a fresh browser context.

    A full-page screenshot is written to ``screenshot_dir`` when the
    scenario fails.
    """
    try:
        from playwright.sync_api import sync_playwright
    except ImportError as e:
        raise RuntimeError(
            "UI scenarios need Playwright: pip install 'storeqa[ui]' && playwright install"
        ) from e

    logger.info(
        "Browser: %s, headless: %s, timeout: %sms",
        store_config.browser,
        store_config.headless,
        store_config.timeout_ms,
    )
    with sync_playwright() as playwright:
        browser = getattr(playwright, store_config.browser).launch(headless=store_config.headless)
        context = browser.new_context()
        page = context.new_page()
        page.set_default_timeout(store_config.timeout_ms)
        try:
            yield page
        finally:
            report = getattr(request.node, "rep_call", None)
            if report is not None and report.failed:
                path = _screenshot_path(store_config.screenshot_dir, request.node.name)
                try:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    page.screenshot(path=str(path), full_page=True, timeout=SCREENSHOT_TIMEOUT_MS)
                    logger.info("Screenshot captured for failed scenario: %s", path)
                except Exception as e:
                    logger.warning("Failed to capture screenshot %s: %s", path, e)
            context.close()
            browser.close()


@pytest.fixture
def home_page(browser_page) -> HomePage:
    return PageFactory.create_home_page(browser_page)
