"""Generic executor for IoT Hub service operations.

ApiClient turns an OperationDescriptor plus call arguments into one HTTP
exchange on the shared httpx.AsyncClient and maps the outcome:

- 2xx: body decoded into the descriptor's response type
- non-2xx: ServiceError, with the service error payload when it parses
- httpx transport failure: TransportError
- undecodable body: DecodeError

Nothing is retried. Cancellation of the calling task propagates as
asyncio.CancelledError from the in-flight request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from iothubservice.apis.operations import OperationDescriptor
from iothubservice.config import DEFAULT_API_VERSION
from iothubservice.exceptions import DecodeError, ServiceError, TransportError
from iothubservice.logging_utils import create_service_logger, request_context
from iothubservice.models import ErrorResponse
from iothubservice.protocols import TokenProviderProtocol

logger = create_service_logger("iothubservice.apis")

T = TypeVar("T")

CORRELATION_ID_HEADER = "x-ms-client-request-id"
IOTHUB_ERROR_CODE_HEADER = "iothub-errorcode"


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Decoded body together with the raw status and headers."""

    data: T
    status_code: int
    headers: httpx.Headers


@lru_cache(maxsize=None)
def _type_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def _encode_body(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(body, list):
        return [_encode_body(item) for item in body]
    return body


def validation_error_fields(exc: ValidationError) -> list[str]:
    """Dotted wire paths of the failing fields; body-level errors have no path."""
    fields: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        if path:
            fields.append(path)
    return fields


def format_etag(etag: str | None) -> str:
    """If-Match header value: quoted etag, or ``*`` to match any version."""
    if not etag or etag == "*":
        return "*"
    if etag.startswith('"') and etag.endswith('"'):
        return etag
    return f'"{etag}"'


class ApiClient:
    """Executes operation descriptors against one IoT Hub."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str,
        token_provider: TokenProviderProtocol | None = None,
        api_version: str = DEFAULT_API_VERSION,
        user_agent: str | None = None,
    ) -> None:
        """Initialize with shared HTTP client.

        Args:
            http_client: Shared httpx AsyncClient instance (owns the connection pool)
            base_url: Hub base URL, e.g. ``https://my-hub.azure-devices.net``
            token_provider: Supplies the Authorization header value per request
            api_version: Value of the ``api-version`` query parameter
            user_agent: Optional User-Agent header value
        """
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._api_version = api_version
        self._user_agent = user_agent

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_version(self) -> str:
        return self._api_version

    async def _build_headers(
        self, correlation_id: UUID, extra: Mapping[str, str] | None
    ) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            CORRELATION_ID_HEADER: str(correlation_id),
        }
        if self._user_agent:
            headers["User-Agent"] = self._user_agent
        if self._token_provider is not None:
            headers["Authorization"] = await self._token_provider.get_token()
        if extra:
            headers.update(extra)
        return headers

    async def execute(
        self,
        operation: OperationDescriptor,
        *,
        path_params: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        correlation_id: UUID | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Execute an operation and return only the decoded body."""
        response = await self.send(
            operation,
            path_params=path_params,
            query=query,
            headers=headers,
            body=body,
            correlation_id=correlation_id,
            timeout=timeout,
        )
        return response.data

    async def send(
        self,
        operation: OperationDescriptor,
        *,
        path_params: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        correlation_id: UUID | None = None,
        timeout: float | None = None,
    ) -> ApiResponse[Any]:
        """Execute an operation.

        Args:
            operation: Descriptor of the endpoint to call
            path_params: Values for the path template placeholders
            query: Extra query parameters (None values are dropped)
            headers: Extra request headers
            body: Request body: a model, a list of models or plain JSON data
            correlation_id: Request correlation ID (generated when omitted)
            timeout: Per-request timeout in seconds, overriding the client default

        Returns:
            ApiResponse with the decoded body, status code and headers

        Raises:
            TransportError: Connection, TLS or timeout failure
            ServiceError: Non-2xx response
            DecodeError: 2xx body does not match the declared response type
            ValueError: Missing path parameter
        """
        correlation_id = correlation_id or uuid4()
        url = f"{self._base_url}{operation.render_path(path_params)}"

        params: dict[str, Any] = {"api-version": self._api_version}
        if query:
            params.update({k: v for k, v in query.items() if v is not None})

        request_headers = await self._build_headers(correlation_id, headers)
        json_body = _encode_body(body) if body is not None else None
        request_options: dict[str, Any] = {}
        if timeout is not None:
            request_options["timeout"] = timeout

        with request_context(operation.name, str(correlation_id)):
            logger.debug(
                "Sending IoT Hub request",
                extra={"method": operation.method, "url": url},
            )

            try:
                response = await self._client.request(
                    operation.method,
                    url,
                    params=params,
                    headers=request_headers,
                    json=json_body,
                    **request_options,
                )
            except httpx.TimeoutException as exc:
                logger.error(
                    "IoT Hub request timed out",
                    extra={"method": operation.method, "url": url, "error": str(exc)},
                )
                raise TransportError(
                    f"{operation.name} timed out: {exc}",
                    method=operation.method,
                    url=url,
                    correlation_id=correlation_id,
                    is_timeout=True,
                ) from exc
            except httpx.TransportError as exc:
                logger.error(
                    "IoT Hub request failed at transport level",
                    extra={"method": operation.method, "url": url, "error": str(exc)},
                )
                raise TransportError(
                    f"{operation.name} failed: {exc}",
                    method=operation.method,
                    url=url,
                    correlation_id=correlation_id,
                ) from exc

            if not response.is_success:
                raise self._service_error(operation, response, correlation_id)

            data = self._decode(operation, response, correlation_id)

            logger.info(
                "IoT Hub request succeeded",
                extra={"status_code": response.status_code},
            )
            return ApiResponse(data=data, status_code=response.status_code, headers=response.headers)

    def _decode(
        self, operation: OperationDescriptor, response: httpx.Response, correlation_id: UUID
    ) -> Any:
        if operation.response_type is None:
            return None

        if not response.content:
            raise DecodeError(
                f"{operation.name} returned an empty body",
                operation=operation.name,
                status_code=response.status_code,
                correlation_id=correlation_id,
            )

        try:
            return _type_adapter(operation.response_type).validate_json(response.content)
        except ValidationError as exc:
            fields = validation_error_fields(exc)
            logger.warning(
                "Failed to decode IoT Hub response",
                extra={"status_code": response.status_code, "fields": fields},
            )
            raise DecodeError(
                f"{operation.name} response could not be decoded: {exc.error_count()} error(s)",
                operation=operation.name,
                fields=fields,
                status_code=response.status_code,
                correlation_id=correlation_id,
            ) from exc

    def _service_error(
        self, operation: OperationDescriptor, response: httpx.Response, correlation_id: UUID
    ) -> ServiceError:
        error: ErrorResponse | None = None
        if operation.error_model is not None and response.content:
            try:
                error = operation.error_model.model_validate_json(response.content)
            except ValidationError:
                error = None
            # A JSON object without any of the error schema's fields is not an error payload
            if error is not None and error.message is None and error.exception_message is None:
                error = None

        iothub_error_code = response.headers.get(IOTHUB_ERROR_CODE_HEADER)
        if iothub_error_code is None and error is not None:
            iothub_error_code = error.error_code

        logger.warning(
            "IoT Hub returned an error response",
            extra={"status_code": response.status_code, "iothub_error_code": iothub_error_code},
        )

        return ServiceError(
            operation=operation.name,
            status_code=response.status_code,
            body=response.text,
            error=error,
            iothub_error_code=iothub_error_code,
            correlation_id=correlation_id,
        )
