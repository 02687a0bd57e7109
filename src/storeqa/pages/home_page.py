"""Page object for the storefront homepage / shop listing.

The page object only talks to the browser through the handful of
Playwright ``Page`` and ``Locator`` methods it calls, so unit tests can
drive it with simple fakes.
"""

from __future__ import annotations

import logging
from typing import Any

from storeqa.errors import PageError
from storeqa.pages.locators import HomePageLocators

logger = logging.getLogger(__name__)

# Products whose top edges are this close (px) share a row.
SAME_ROW_TOLERANCE = 10
# Row positions are bucketed to this grid (px) before counting.
ROW_BUCKET = 50
# Fraction of the viewport height separating "top" from "bottom".
TOP_FRACTION = 0.6


class HomePage:
    """Interactions with the storefront homepage."""

    def __init__(self, page: Any) -> None:
        self.page = page

    def navigate(self, base_url: str) -> None:
        self.page.goto(base_url)
        self.page.wait_for_load_state()

    def wait_for_products(self, timeout_ms: int) -> None:
        """Wait until at least one product title is rendered."""
        self.page.wait_for_selector(HomePageLocators.PRODUCT_GRID, timeout=timeout_ms)

    def product_elements(self) -> list[Any]:
        return self.page.locator(HomePageLocators.PRODUCT_GRID).all()

    def product_count(self) -> int:
        return len(self.product_elements())

    def _product(self, index: int) -> Any:
        products = self.product_elements()
        if not 0 <= index < len(products):
            raise IndexError(f"Product index out of range: {index}")
        return products[index]

    def product_name(self, index: int) -> str:
        return self._product(index).text_content() or ""

    def product_price(self, index: int) -> str:
        product = self._product(index)
        price = product.locator("..").locator(HomePageLocators.PRODUCT_PRICE).first
        return price.text_content() or ""

    def has_name_and_price(self, index: int) -> bool:
        try:
            name = self.product_name(index)
            price = self.product_price(index)
        except Exception as e:
            logger.debug("Could not read product %d: %s", index, e)
            return False
        return bool(name.strip()) and bool(price.strip())

    def page_title(self) -> str:
        return self.page.title()

    def _top(self, locator: Any) -> float:
        box = locator.bounding_box()
        if box is None:
            raise PageError("Element has no bounding box (not rendered)")
        return float(box["y"])

    def product_columns(self) -> int:
        """Count products in the first row of the grid.

        Raises:
            PageError: If element positions cannot be measured.
        """
        try:
            products = self.product_elements()
            if not products:
                return 0
            first_y = self._top(products[0])
            columns = 0
            for product in products:
                if abs(self._top(product) - first_y) > SAME_ROW_TOLERANCE:
                    break
                columns += 1
            return columns
        except PageError:
            raise
        except Exception as e:
            raise PageError(f"Failed to determine number of product columns: {e}", cause=e) from e

    def product_rows(self) -> int:
        """Count distinct product rows.

        Raises:
            PageError: If element positions cannot be measured.
        """
        try:
            products = self.product_elements()
            rows = {round(self._top(product) / ROW_BUCKET) * ROW_BUCKET for product in products}
            return len(rows)
        except PageError:
            raise
        except Exception as e:
            raise PageError(f"Failed to determine number of product rows: {e}", cause=e) from e

    def _is_visible(self, selector: str) -> bool:
        try:
            return bool(self.page.locator(selector).first.is_visible())
        except Exception as e:
            logger.debug("Visibility check failed for %s: %s", selector, e)
            return False

    def _dropdown_fraction(self) -> float | None:
        """Vertical position of the sorting dropdown as a viewport fraction."""
        if not self.is_sorting_dropdown_displayed():
            return None
        try:
            y = self._top(self.page.locator(HomePageLocators.SORTING_DROPDOWN).first)
            viewport = self.page.viewport_size
        except Exception as e:
            logger.debug("Could not measure sorting dropdown: %s", e)
            return None
        if not viewport or not viewport.get("height"):
            return None
        return y / viewport["height"]

    def is_sorting_dropdown_displayed(self) -> bool:
        return self._is_visible(HomePageLocators.SORTING_DROPDOWN)

    def is_sorting_dropdown_at_top(self) -> bool:
        fraction = self._dropdown_fraction()
        return fraction is not None and fraction < TOP_FRACTION

    def is_sorting_dropdown_at_bottom(self) -> bool:
        fraction = self._dropdown_fraction()
        return fraction is not None and fraction > TOP_FRACTION

    def is_shop_heading_displayed(self) -> bool:
        return self._is_visible(HomePageLocators.SHOP_HEADING)

    def is_header_menu_displayed(self) -> bool:
        return self._is_visible(HomePageLocators.HEADER_MENU)
