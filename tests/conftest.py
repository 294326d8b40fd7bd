"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import logging

import pytest
import structlog
from pathlib import Path

from inventory_client.config import Settings
from inventory_client.logging_config import configure_logging


@pytest.fixture(scope="session", autouse=True)
def structured_logging():
    """Route structlog through stdlib logging on stderr for the whole run.

    Without this, structlog falls back to printing on stdout, which would
    mix log lines into the command output the CLI tests read.
    """
    configure_logging("DEBUG", "development")


@pytest.fixture
def restore_logging():
    """Put back the root handlers and structlog config after a test reconfigures them."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    config = structlog.get_config()

    yield

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.configure(**config)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    The audit log goes to a per-test temporary directory. Override specific
    settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_ATTEMPTS = 5
    """
    return Settings(
        # === Application ===
        APP_VERSION="0.1.0",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === SOAP Service ===
        SOAP_ENDPOINT_URL="http://inventory.test/InventarioService",
        SOAP_NAMESPACE="http://ws.inventario.ferreteria.com/",
        SOAP_USERNAME="admin",
        SOAP_PASSWORD="admin123",

        # === Retry & Timeouts ===
        MAX_ATTEMPTS=3,
        BASE_TIMEOUT_MS=10000,
        TIMEOUT_INCREMENT_MS=5000,
        BASE_DELAY_MS=1000,
        PROBE_TIMEOUT_MS=5000,

        # === Audit Log ===
        AUDIT_LOG_PATH=str(tmp_path / "logs" / "soap_calls.log"),
        AUDIT_LOG_MAX_BYTES=5 * 1024 * 1024,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixtures_dir: Path):
    """Factory fixture returning the text of a fixture file.

    Usage:
        def test_something(load_fixture):
            body = load_fixture("consultar_articulo_ok.xml")
    """
    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def ok_body(load_fixture) -> str:
    """Clean consultarArticulo response envelope."""
    return load_fixture("consultar_articulo_ok.xml")


@pytest.fixture
def malformed_body(load_fixture) -> str:
    """Complete consultarArticulo envelope the strict decoder rejects."""
    return load_fixture("consultar_articulo_malformed.xml")


@pytest.fixture
def rejected_body(load_fixture) -> str:
    """Well-formed consultarArticulo response with exitoso=false."""
    return load_fixture("consultar_articulo_rejected.xml")


@pytest.fixture
def fault_body(load_fixture) -> str:
    """SOAP Fault envelope."""
    return load_fixture("fault.xml")


@pytest.fixture
def truncated_body(ok_body: str) -> str:
    """The clean response cut off inside a tag, as seen under load."""
    return ok_body[: ok_body.index("<precioVenta>") + 5]
