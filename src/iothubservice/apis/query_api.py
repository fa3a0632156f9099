"""IoT Hub query language over device and module twins."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any
from uuid import UUID, uuid4

from pydantic import TypeAdapter, ValidationError

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient, validation_error_fields
from iothubservice.exceptions import DecodeError
from iothubservice.logging_utils import create_service_logger
from iothubservice.models import QueryResult, QuerySpecification, Twin

logger = create_service_logger("iothubservice.apis.query")

MAX_ITEM_COUNT_HEADER = "x-ms-max-item-count"
CONTINUATION_HEADER = "x-ms-continuation"
ITEM_TYPE_HEADER = "x-ms-item-type"

_twins = TypeAdapter(list[Twin])


class QueryApi:
    """Runs twin queries, one page per call or as an async iterator."""

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    async def query_iot_hub(
        self,
        query: str,
        *,
        page_size: int | None = None,
        continuation_token: str | None = None,
        correlation_id: UUID | None = None,
    ) -> QueryResult:
        """Fetch one page of query results.

        Args:
            query: Query text, e.g. ``SELECT * FROM devices WHERE tags.site = 'x'``
            page_size: Maximum items in the page (service default when None)
            continuation_token: Token from the previous page's result
            correlation_id: Request correlation ID

        Returns:
            QueryResult holding the twins (or, for aggregate, projection and
            job queries, the raw JSON objects) and the token of the next page

        Raises:
            DecodeError: A twin page whose items do not match the twin schema
        """
        correlation_id = correlation_id or uuid4()
        headers: dict[str, str] = {}
        if page_size is not None:
            headers[MAX_ITEM_COUNT_HEADER] = str(page_size)
        if continuation_token:
            headers[CONTINUATION_HEADER] = continuation_token

        response = await self._api.send(
            ops.QUERY_IOT_HUB,
            headers=headers,
            body=QuerySpecification(query=query),
            correlation_id=correlation_id,
        )

        page = QueryResult(
            continuation_token=response.headers.get(CONTINUATION_HEADER) or None,
            item_type=response.headers.get(ITEM_TYPE_HEADER),
        )
        if not page.is_twin_page:
            return page.model_copy(update={"raw_items": response.data})

        try:
            twins = _twins.validate_python(response.data)
        except ValidationError as exc:
            raise DecodeError(
                f"{ops.QUERY_IOT_HUB.name} returned twins that could not be decoded: "
                f"{exc.error_count()} error(s)",
                operation=ops.QUERY_IOT_HUB.name,
                fields=validation_error_fields(exc),
                status_code=response.status_code,
                correlation_id=correlation_id,
            ) from exc
        return page.model_copy(update={"items": twins})

    async def iter_query(
        self, query: str, *, page_size: int | None = None
    ) -> AsyncIterator[Twin | dict[str, Any]]:
        """Yield every item matching ``query``, following continuation tokens.

        Twin queries yield Twin models; other queries yield the raw JSON objects.
        """
        continuation_token: str | None = None
        pages = 0
        while True:
            page = await self.query_iot_hub(
                query, page_size=page_size, continuation_token=continuation_token
            )
            pages += 1
            for item in page.results:
                yield item
            if not page.has_more:
                break
            continuation_token = page.continuation_token

        logger.debug("Query exhausted", extra={"pages": pages})
