"""
Configuration settings for the Inventory SOAP Client.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === SOAP Service ===
    SOAP_ENDPOINT_URL: str = "http://localhost:8080/InventarioService"
    SOAP_NAMESPACE: str = "http://ws.inventario.ferreteria.com/"
    SOAP_USERNAME: Optional[str] = None
    SOAP_PASSWORD: Optional[str] = None

    # === Retry & Timeouts ===
    MAX_ATTEMPTS: int = 3
    BASE_TIMEOUT_MS: int = 10000
    TIMEOUT_INCREMENT_MS: int = 5000  # Added once per attempt number
    BASE_DELAY_MS: int = 1000  # Linear backoff: BASE_DELAY_MS * attempt
    PROBE_TIMEOUT_MS: int = 5000

    # === Response Inspection ===
    MIN_ENVELOPE_BYTES: int = 200  # Shorter unclosed envelopes count as truncated

    # === Audit Log ===
    AUDIT_LOG_PATH: str = "logs/soap_calls.log"
    AUDIT_LOG_MAX_BYTES: int = 5 * 1024 * 1024  # Reset file above 5 MiB

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
