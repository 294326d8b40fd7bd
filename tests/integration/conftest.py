"""Integration test fixtures (service checks and prerequisites).

Provides fixtures for checking if the inventory SOAP service is available.
Integration tests are skipped if it is not running.
"""

import pytest
import httpx

from inventory_client.config import settings


@pytest.fixture(scope="session")
def check_inventory_service():
    """Check if the inventory service publishes its WSDL at SOAP_ENDPOINT_URL.

    Skips tests if the service is not reachable.
    """
    url = f"{settings.SOAP_ENDPOINT_URL}?wsdl"
    try:
        response = httpx.get(url, timeout=5)
        if response.status_code != 200:
            pytest.skip(f"Inventory service not available (HTTP {response.status_code})")
    except httpx.HTTPError as e:
        pytest.skip(f"Inventory service not available: {e}")


@pytest.fixture
def integration_settings(test_settings, check_inventory_service):
    """Settings for integration tests against the real service.

    Keeps the per-test audit log from test_settings, points at the
    configured endpoint and uses the seeded admin account.
    """
    test_settings.SOAP_ENDPOINT_URL = settings.SOAP_ENDPOINT_URL
    test_settings.SOAP_USERNAME = settings.SOAP_USERNAME or "admin"
    test_settings.SOAP_PASSWORD = settings.SOAP_PASSWORD or "admin123"
    test_settings.PROMETHEUS_ENABLED = False

    return test_settings
