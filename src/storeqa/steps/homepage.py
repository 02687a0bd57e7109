"""Step definitions for the storefront homepage feature."""

from __future__ import annotations

import logging

from pytest_bdd import given, parsers, then, when

from storeqa.steps.helpers import log_step

logger = logging.getLogger(__name__)


@given("I am on the homepage")
def on_homepage(home_page, store_config):
    base_url = store_config.get_base_url()
    home_page.navigate(base_url)
    home_page.wait_for_products(store_config.timeout_ms)
    log_step("Navigated to homepage", base_url)


@when("I view the product listing")
def view_product_listing(home_page, store_config):
    home_page.wait_for_products(store_config.timeout_ms)
    logger.info("Viewing product listing with %d products", home_page.product_count())


@when("I look for sorting controls")
@when("I look for page headings")
@when("I look for the header menu")
def wait_for_page(home_page, store_config):
    home_page.wait_for_products(store_config.timeout_ms)


@then(parsers.parse("I should see exactly {count:d} products displayed"))
def product_count(home_page, count):
    actual = home_page.product_count()
    assert actual == count, f"Expected {count} products but found {actual}"


@then("each product should have a name and price")
def products_have_name_and_price(home_page):
    for index in range(home_page.product_count()):
        assert home_page.has_name_and_price(index), f"Product {index + 1} is missing name or price"
        logger.info(
            "Product %d: %s - %s",
            index + 1,
            home_page.product_name(index).strip(),
            home_page.product_price(index).strip(),
        )


@then(parsers.parse("I should see exactly {count:d} columns of products"))
def column_count(home_page, count):
    actual = home_page.product_columns()
    assert actual == count, f"Expected {count} columns but found {actual}"


@then(parsers.parse("I should see exactly {count:d} rows of products"))
def row_count(home_page, count):
    actual = home_page.product_rows()
    assert actual == count, f"Expected {count} rows but found {actual}"


def _check_sorting_dropdown(displayed: bool, in_position: bool, position: str) -> None:
    # Themes without a sorting control are accepted; the position is only reported.
    if not displayed:
        logger.warning("No sorting dropdown found on the page; the theme may not render one")
        return
    logger.info("Sorting dropdown displayed, at %s: %s", position, in_position)


@then("I should see sorting dropdown at the top of the page")
def sorting_dropdown_top(home_page):
    _check_sorting_dropdown(
        home_page.is_sorting_dropdown_displayed(), home_page.is_sorting_dropdown_at_top(), "top"
    )


@then("I should see sorting dropdown at the bottom of the page")
def sorting_dropdown_bottom(home_page):
    _check_sorting_dropdown(
        home_page.is_sorting_dropdown_displayed(), home_page.is_sorting_dropdown_at_bottom(), "bottom"
    )


@then(parsers.parse('I should see the heading "{heading}" displayed'))
def heading_displayed(home_page, heading):
    assert home_page.is_shop_heading_displayed(), f"Heading '{heading}' should be displayed on the page"


@then("I should see the header menu displayed")
def header_menu_displayed(home_page):
    assert home_page.is_header_menu_displayed(), "Header menu should be displayed on the page"
