"""Homepage feature in a real browser.

Needs the ``ui`` extra and installed browsers (``playwright install``).
"""

import pytest
from pytest_bdd import scenarios

pytestmark = pytest.mark.live

scenarios("frontend/homepage.feature")
