"""Twin query models."""

from __future__ import annotations

from typing import Any

from iothubservice.models.base import IoTHubModel
from iothubservice.models.twin import Twin

TWIN_ITEM_TYPE = "Twin"


class QuerySpecification(IoTHubModel):
    """Body of a query request, e.g. ``SELECT * FROM devices WHERE ...``."""

    query: str


class QueryResult(IoTHubModel):
    """One page of query results.

    The service returns the items as the response body and the paging state
    in the ``x-ms-continuation`` and ``x-ms-item-type`` response headers.
    Pages of twins are decoded into ``items``. Aggregates, projections and
    job rows (item types such as ``Raw`` or ``DeviceJob``) are kept as the
    JSON objects the service sent, in ``raw_items``.
    """

    items: list[Twin] = []
    raw_items: list[dict[str, Any]] = []
    continuation_token: str | None = None
    item_type: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.continuation_token)

    @property
    def is_twin_page(self) -> bool:
        # Pages without an item type header are twin pages
        return self.item_type in (None, TWIN_ITEM_TYPE)

    @property
    def results(self) -> list[Twin] | list[dict[str, Any]]:
        """The page's items, whichever form they were returned in."""
        if self.is_twin_page:
            return self.items
        return self.raw_items
