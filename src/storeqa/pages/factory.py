"""Construction of page objects."""

from __future__ import annotations

from typing import Any

from storeqa.pages.home_page import HomePage


class PageFactory:
    """Builds page objects around a browser page."""

    @staticmethod
    def create_home_page(page: Any) -> HomePage:
        return HomePage(page)
