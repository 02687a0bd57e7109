"""Page objects for the storefront UI."""

from storeqa.pages.factory import PageFactory
from storeqa.pages.home_page import HomePage
from storeqa.pages.locators import HomePageLocators

__all__ = ["HomePage", "HomePageLocators", "PageFactory"]
