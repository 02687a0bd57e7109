"""Run the feature files offline.

The customer API scenarios are signed for real and served by the mock
store; the homepage scenarios drive the page object through a fake page
laid out like the demo store's shop grid.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from storeqa.config import StoreConfig
from storeqa.mock_store import DEFAULT_CONSUMER_KEY, DEFAULT_CONSUMER_SECRET, MockStoreServer
from storeqa.pages import HomePageLocators
from tests.test_pages import FakeElement, FakePage, grid


@pytest.fixture(scope="session")
def mock_store_server() -> Iterator[MockStoreServer]:
    with MockStoreServer() as server:
        yield server


@pytest.fixture(scope="session")
def store_config(mock_store_server: MockStoreServer) -> StoreConfig:
    return StoreConfig(
        environment="mock",
        base_url=mock_store_server.url,
        api_base_url=mock_store_server.api_base_url,
        consumer_key=DEFAULT_CONSUMER_KEY,
        consumer_secret=DEFAULT_CONSUMER_SECRET,
        timeout=10,
    )


@pytest.fixture
def browser_page() -> FakePage:
    return FakePage(
        {
            HomePageLocators.PRODUCT_GRID: grid(4, 4),
            HomePageLocators.SORTING_DROPDOWN: [FakeElement(y=350)],
            HomePageLocators.SHOP_HEADING: [FakeElement(text="Shop", y=250)],
            HomePageLocators.HEADER_MENU: [FakeElement(y=40)],
        }
    )
