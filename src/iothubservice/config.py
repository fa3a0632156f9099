"""Configuration for the IoT Hub service client.

Uses Pydantic settings for environment-based configuration. Every field can be
set through an ``IOTHUB_SERVICE_`` prefixed environment variable or a ``.env``
file in the working directory.
"""

from __future__ import annotations

import logging

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from iothubservice.auth import ConnectionString
from iothubservice.config_enums import Environment
from iothubservice.exceptions import ConfigurationError
from iothubservice.version import __version__

DEFAULT_API_VERSION = "2020-05-31-preview"


class IoTHubServiceSettings(BaseSettings):
    """Configuration settings for the IoT Hub service client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="IOTHUB_SERVICE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Client identity
    SERVICE_NAME: str = "iothub-service-client"

    # Environment
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment of the calling application",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Hub addressing and credentials
    CONNECTION_STRING: SecretStr | None = Field(
        default=None,
        description="Shared access policy connection string "
        "(HostName=...;SharedAccessKeyName=...;SharedAccessKey=...)",
    )
    HOST_NAME: str | None = Field(
        default=None,
        description="IoT Hub host name, overrides the connection string host",
    )
    BASE_URL: str | None = Field(
        default=None,
        description="Full base URL override, e.g. for a proxy or a local emulator",
    )
    API_VERSION: str = Field(
        default=DEFAULT_API_VERSION,
        min_length=1,
        description="IoT Hub REST api-version query parameter",
    )

    # SAS token lifecycle
    SAS_TOKEN_TTL_SECONDS: int = Field(
        default=3600,
        gt=0,
        description="Lifetime of generated SAS tokens in seconds",
    )
    SAS_TOKEN_RENEWAL_MARGIN_SECONDS: int = Field(
        default=300,
        ge=0,
        description="Regenerate the SAS token this many seconds before it expires",
    )

    # HTTP client configuration
    HTTP_CLIENT_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="HTTP client request timeout in seconds",
    )
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="HTTP client connection timeout in seconds",
    )
    USER_AGENT: str = Field(
        default=f"iothub-service-client/{__version__}",
        min_length=1,
        description="User-Agent header sent with every request",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize to an upper-case stdlib level name."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    def get_connection_string(self) -> str | None:
        """Return the raw connection string, or None when not configured."""
        if self.CONNECTION_STRING is None:
            return None
        return self.CONNECTION_STRING.get_secret_value()

    def resolve_host_name(self) -> str | None:
        """Host name from HOST_NAME, falling back to the connection string."""
        if self.HOST_NAME:
            return self.HOST_NAME

        connection_string = self.get_connection_string()
        if connection_string:
            return ConnectionString.parse(connection_string).host_name
        return None

    def resolve_base_url(self) -> str:
        """Base URL for all operations.

        Raises:
            ConfigurationError: When neither BASE_URL, HOST_NAME nor a
                connection string is configured
        """
        if self.BASE_URL:
            return self.BASE_URL.rstrip("/")

        host_name = self.resolve_host_name()
        if not host_name:
            raise ConfigurationError(
                "No IoT Hub address configured: set IOTHUB_SERVICE_BASE_URL, "
                "IOTHUB_SERVICE_HOST_NAME or IOTHUB_SERVICE_CONNECTION_STRING"
            )
        return f"https://{host_name}"
