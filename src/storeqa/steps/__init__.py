"""pytest-bdd step definitions and fixtures.

The modules here are pytest plugins. Load them from the root
``conftest.py``::

    pytest_plugins = [
        "storeqa.steps.fixtures",
        "storeqa.steps.customer_api",
        "storeqa.steps.homepage",
    ]
"""
