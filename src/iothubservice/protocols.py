"""Protocol definitions for the IoT Hub service client.

Defines the seams callers can substitute, such as the token supplier.
"""

from __future__ import annotations

from typing import Protocol


class TokenProviderProtocol(Protocol):
    """Supplies the Authorization header value for each request."""

    async def get_token(self) -> str:
        """Return a currently valid token, e.g. ``SharedAccessSignature sr=...``."""
        ...


__all__ = ["TokenProviderProtocol"]
