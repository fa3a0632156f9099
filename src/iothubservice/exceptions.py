"""Exception hierarchy for the IoT Hub service client.

Every failure surfaced by an operation is one of four non-overlapping kinds:
transport failures, response decoding failures, service error responses and
client configuration problems. All of them derive from IoTHubServiceError and
carry an ErrorCode, a correlation ID and structured details for logging.

Cancellation is not wrapped: asyncio.CancelledError propagates unchanged.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from iothubservice.error_enums import ErrorCode, error_code_for_status

if TYPE_CHECKING:
    from iothubservice.models.errors import ErrorResponse


class IoTHubServiceError(Exception):
    """Base exception for the IoT Hub service client.

    Catch this to handle every client-raised failure in one place.
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        correlation_id: UUID | None = None,
        details: dict[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        """Initialize the base client error.

        Args:
            error_code: The ErrorCode enum value for categorization
            message: Human-readable error message
            correlation_id: Optional correlation ID of the failed request
            details: Optional dictionary of additional error context
            timestamp: Optional error timestamp (defaults to current UTC time)
        """
        self.error_code = error_code
        self.message = message
        self.correlation_id = correlation_id
        self.details = details or {}
        self.timestamp = timestamp or datetime.now(UTC)
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


class ConfigurationError(IoTHubServiceError):
    """Client configuration is unusable (connection string, base URL, key material).

    Raised before any request is sent.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(
            error_code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details=details,
        )


class TransportError(IoTHubServiceError):
    """The HTTP exchange failed below the service semantics.

    Connection refused, DNS resolution, TLS handshake and timeouts end up here.
    The originating httpx exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        correlation_id: UUID | None = None,
        is_timeout: bool = False,
    ) -> None:
        self.method = method
        self.url = url
        self.is_timeout = is_timeout
        super().__init__(
            error_code=ErrorCode.TIMEOUT if is_timeout else ErrorCode.CONNECTION_ERROR,
            message=message,
            correlation_id=correlation_id,
            details={"method": method, "url": url},
        )


class DecodeError(IoTHubServiceError):
    """A response body could not be decoded into the expected model.

    ``fields`` holds the dotted wire paths of the offending fields, when the
    body was valid JSON but did not match the schema.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        fields: list[str] | None = None,
        status_code: int | None = None,
        correlation_id: UUID | None = None,
    ) -> None:
        self.operation = operation
        self.fields = fields or []
        self.status_code = status_code
        super().__init__(
            error_code=ErrorCode.PARSING_ERROR,
            message=message,
            correlation_id=correlation_id,
            details={"operation": operation, "fields": self.fields, "status_code": status_code},
        )


class ServiceError(IoTHubServiceError):
    """The service answered with a well-formed non-2xx response.

    ``error`` is the parsed error payload when the body matched the service's
    error schema, otherwise None and ``body`` holds the raw text.
    """

    def __init__(
        self,
        *,
        operation: str,
        status_code: int,
        body: str,
        error: ErrorResponse | None = None,
        iothub_error_code: str | None = None,
        correlation_id: UUID | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        self.error = error
        self.iothub_error_code = iothub_error_code

        if error is not None and error.message:
            message = f"{operation} failed with HTTP {status_code}: {error.message}"
        else:
            message = f"{operation} failed with HTTP {status_code}"

        super().__init__(
            error_code=error_code_for_status(status_code),
            message=message,
            correlation_id=correlation_id,
            details={
                "operation": operation,
                "status_code": status_code,
                "iothub_error_code": iothub_error_code,
            },
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
