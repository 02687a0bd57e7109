"""Customer API scenarios, signed for real and served by the mock store."""

from pytest_bdd import scenarios

scenarios("backend/customer_api.feature")
