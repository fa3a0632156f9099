"""Error payload returned by the IoT Hub service on non-2xx responses."""

from __future__ import annotations

import re

from pydantic import Field

from iothubservice.models.base import IoTHubModel

_ERROR_CODE_PATTERN = re.compile(r"ErrorCode:(?P<code>[A-Za-z0-9]+)")


class ErrorResponse(IoTHubModel):
    """Service error body.

    ``Message`` often embeds a JSON document or an ``ErrorCode:<Name>;`` prefix;
    ``ExceptionMessage`` carries the tracking ID and timestamp.
    """

    message: str | None = Field(default=None, alias="Message")
    exception_message: str | None = Field(default=None, alias="ExceptionMessage")

    @property
    def error_code(self) -> str | None:
        """IoT Hub error code name embedded in the message (e.g. ``DeviceNotFound``)."""
        for text in (self.message, self.exception_message):
            if text:
                match = _ERROR_CODE_PATTERN.search(text)
                if match:
                    return match.group("code")
        return None
