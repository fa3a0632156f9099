"""Base model shared by every IoT Hub data transfer object."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class IoTHubModel(BaseModel):
    """Immutable value type with camelCase wire names.

    Unknown wire fields are dropped on decode so that service-side additions
    never break deserialization. Python attribute names and wire names are
    both accepted on construction.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        protected_namespaces=(),
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using wire names, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
