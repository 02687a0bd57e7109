"""CSS selectors for the storefront homepage.

Several selectors list alternatives separated by commas so the same page
object works across WooCommerce themes.
"""


class HomePageLocators:
    """Selectors used by :class:`storeqa.pages.home_page.HomePage`."""

    PRODUCT_CONTAINER = ".product"
    PRODUCT_TITLE = ".woocommerce-loop-product__title"
    PRODUCT_PRICE = ".price"

    # One title element per rendered product card.
    PRODUCT_GRID = PRODUCT_TITLE

    SORTING_DROPDOWN = "select[name='orderby'], .woocommerce-ordering select, .orderby, select.orderby"

    SHOP_HEADING = "h1:has-text('Shop'), h2:has-text('Shop'), .shop-title:has-text('Shop')"
    HEADER_MENU = "nav, .main-navigation, .header-menu, .site-navigation"

    def __init__(self) -> None:
        raise TypeError("HomePageLocators is a namespace and cannot be instantiated")
