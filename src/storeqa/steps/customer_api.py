"""Step definitions for the WooCommerce customer API feature."""

from __future__ import annotations

import json
import logging
from typing import Any

from pytest_bdd import given, then, when

from storeqa.steps.helpers import log_step, unique_email

logger = logging.getLogger(__name__)

TEST_PASSWORD = "TestPassword123!"
NON_EXISTING_CUSTOMER_ID = "999999999"

CREATED_STATUSES = (200, 201)


def _body_value(response, key: str) -> Any:
    try:
        data = response.json()
    except json.JSONDecodeError as e:
        raise AssertionError(f"Response is not JSON: {response.body[:200]!r}") from e
    assert isinstance(data, dict), f"Expected a JSON object, got {type(data).__name__}"
    return data.get(key)


def _create_customer(api_client, scenario_context, data: dict[str, Any]):
    response = api_client.post("/customers", data)
    if response.status_code in CREATED_STATUSES:
        customer_id = _body_value(response, "id")
        if customer_id is not None:
            scenario_context.created_customer_ids.append(str(customer_id))
    return response


# Preconditions


@given("I have valid customer data with email and password")
@given("I have valid customer data with email and password only")
def valid_customer_data(scenario_context):
    email = unique_email("test.customer")
    scenario_context.customer_data = {"email": email, "password": TEST_PASSWORD}
    log_step("Prepare customer data", f"email={email}")


@given("I have customer data with email but no password")
def customer_data_without_password(scenario_context):
    email = unique_email("test.customer")
    scenario_context.customer_data = {"email": email}
    log_step("Prepare customer data", f"email={email}, password=(none)")


@given("I have access to the customers API")
def customers_api_access(api_client):
    log_step("Customers API", api_client.base_url)


@given("I have a customer with an existing email")
def customer_with_existing_email(api_client, scenario_context):
    email = unique_email("existing.customer")
    data = {"email": email, "password": TEST_PASSWORD}
    response = _create_customer(api_client, scenario_context, data)
    assert response.status_code in CREATED_STATUSES, (
        f"First customer should be created, got {response.status_code}: {response.body}"
    )
    scenario_context.existing_email = email
    log_step("Existing customer created", email)


@given("I have a created customer with a known ID")
def customer_with_known_id(api_client, scenario_context):
    scenario_context.customer_data = {"email": unique_email("test.customer"), "password": TEST_PASSWORD}
    response = _create_customer(api_client, scenario_context, scenario_context.customer_data)
    assert response.status_code in CREATED_STATUSES, (
        f"Customer should be created, got {response.status_code}: {response.body}"
    )
    customer_id = _body_value(response, "id")
    assert customer_id is not None, "Customer ID should not be null"
    scenario_context.customer_id = str(customer_id)
    log_step("Customer created", f"id={customer_id}")


# Actions


@when("I create a new customer via POST /customers")
@when("I attempt to create a customer via POST /customers")
def create_customer(api_client, scenario_context):
    scenario_context.response = _create_customer(api_client, scenario_context, scenario_context.customer_data)
    logger.info("POST /customers -> %d", scenario_context.response.status_code)


@when("I retrieve all customers via GET /customers")
def list_customers(api_client, scenario_context):
    scenario_context.response = api_client.get("/customers")
    logger.info("GET /customers -> %d", scenario_context.response.status_code)


@when("I attempt to create another customer with the same email")
def create_duplicate_customer(api_client, scenario_context):
    data = {"email": scenario_context.existing_email, "password": "AnotherPassword123!"}
    scenario_context.response = _create_customer(api_client, scenario_context, data)
    logger.info("POST /customers (duplicate) -> %d", scenario_context.response.status_code)


@when("I attempt to retrieve a non-existing customer via GET /customers/{id}")
def get_missing_customer(api_client, scenario_context):
    scenario_context.response = api_client.get(f"/customers/{NON_EXISTING_CUSTOMER_ID}")
    logger.info("GET /customers/%s -> %d", NON_EXISTING_CUSTOMER_ID, scenario_context.response.status_code)


@when("I retrieve the customer via GET /customers/{id}")
def get_customer(api_client, scenario_context):
    scenario_context.response = api_client.get(f"/customers/{scenario_context.customer_id}")
    logger.info("GET /customers/%s -> %d", scenario_context.customer_id, scenario_context.response.status_code)


# Outcomes


@then("the customer should be created successfully")
def customer_created(scenario_context):
    response = scenario_context.require_response()
    assert response.status_code in CREATED_STATUSES, (
        f"Expected status code 200 or 201, but got: {response.status_code}\nResponse body: {response.body}"
    )


@then("the response should contain the customer email")
def response_contains_email(scenario_context):
    email = scenario_context.customer_data["email"]
    assert email in scenario_context.require_response().body, f"Response should contain {email}"


@then("the response should contain a customer ID")
def response_contains_id(scenario_context):
    customer_id = _body_value(scenario_context.require_response(), "id")
    assert customer_id is not None, "Response should contain a customer ID"
    scenario_context.customer_id = str(customer_id)


@then("the response should be successful")
def response_successful(scenario_context):
    response = scenario_context.require_response()
    assert response.ok, f"Expected a 2xx status code, but got: {response.status_code}"


@then("the response should contain a list of customers")
def response_is_customer_list(scenario_context):
    customers = scenario_context.require_response().json()
    assert isinstance(customers, list), "Response should be a JSON array"
    logger.info("Response contains %d customers", len(customers))


@then("the request should fail with appropriate error")
def request_failed(scenario_context):
    status = scenario_context.require_response().status_code
    assert status >= 400, f"Expected an error status code (4xx or 5xx), but got: {status}"


@then("the response should indicate password is required")
def password_required(scenario_context):
    body = scenario_context.require_response().body.lower()
    assert "password" in body or "required" in body, "Response should indicate password is required"


@then("the response should contain empty string for first_name")
def empty_first_name(scenario_context):
    assert _body_value(scenario_context.require_response(), "first_name") == ""


@then("the response should contain empty string for last_name")
def empty_last_name(scenario_context):
    assert _body_value(scenario_context.require_response(), "last_name") == ""


@then("the response should contain a username based on the email")
def username_from_email(scenario_context):
    username = _body_value(scenario_context.require_response(), "username")
    local_part = scenario_context.customer_data["email"].split("@")[0]
    assert username, "Username should not be empty"
    assert local_part in username, f"Username {username!r} should be based on {local_part!r}"


@then("the response should indicate email already exists")
def email_exists(scenario_context):
    body = scenario_context.require_response().body.lower()
    assert "email" in body and any(word in body for word in ("already", "exists", "duplicate", "taken")), (
        "Response should indicate email already exists"
    )


@then("the response should return status code 404")
def status_404(scenario_context):
    status = scenario_context.require_response().status_code
    assert status == 404, f"Expected status code 404, but got: {status}"


@then("the response should indicate customer not found")
def customer_not_found(scenario_context):
    body = scenario_context.require_response().body.lower()
    assert any(word in body for word in ("not found", "not_found", "invalid", "404", "error")), (
        "Response should indicate customer not found"
    )


@then("the response should contain exactly one customer")
def exactly_one_customer(scenario_context):
    data = scenario_context.require_response().json()
    assert isinstance(data, dict), "Response should be a single customer object, not an array"
    assert "id" in data and "email" in data, "Response should contain customer id and email"


@then("the customer ID should match the requested ID")
def customer_id_matches(scenario_context):
    response_id = _body_value(scenario_context.require_response(), "id")
    assert str(response_id) == scenario_context.customer_id
