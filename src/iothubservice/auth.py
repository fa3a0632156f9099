"""Shared Access Signature authentication for the IoT Hub service API.

Provides connection string parsing, SAS token generation and the token
providers the operations layer calls before every request.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import hmac
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote

from iothubservice.exceptions import ConfigurationError
from iothubservice.logging_utils import create_service_logger

logger = create_service_logger("iothubservice.auth")

HOST_NAME_KEY = "HostName"
KEY_NAME_KEY = "SharedAccessKeyName"
KEY_KEY = "SharedAccessKey"


@dataclass(frozen=True)
class ConnectionString:
    """Parsed IoT Hub shared access policy connection string."""

    host_name: str
    shared_access_key_name: str
    shared_access_key: str

    @classmethod
    def parse(cls, value: str) -> ConnectionString:
        """Parse ``HostName=...;SharedAccessKeyName=...;SharedAccessKey=...``.

        Values may themselves contain ``=`` (base64 padding), so each segment
        is split on the first ``=`` only. Key names are matched exactly.

        Raises:
            ConfigurationError: On a malformed segment or missing keys
        """
        parts: dict[str, str] = {}
        for segment in value.strip().split(";"):
            if not segment:
                continue
            if "=" not in segment:
                raise ConfigurationError("Malformed connection string segment, expected Key=Value")
            key, _, segment_value = segment.partition("=")
            parts[key.strip()] = segment_value.strip()

        missing = [k for k in (HOST_NAME_KEY, KEY_NAME_KEY, KEY_KEY) if not parts.get(k)]
        if missing:
            raise ConfigurationError(
                f"Connection string is missing required keys: {', '.join(missing)}",
                missing_keys=missing,
            )

        return cls(
            host_name=parts[HOST_NAME_KEY],
            shared_access_key_name=parts[KEY_NAME_KEY],
            shared_access_key=parts[KEY_KEY],
        )

    def __repr__(self) -> str:
        return (
            f"ConnectionString(host_name={self.host_name!r}, "
            f"shared_access_key_name={self.shared_access_key_name!r}, shared_access_key='***')"
        )


def generate_sas_token(
    resource_uri: str,
    key: str,
    policy_name: str | None,
    expiry: int,
) -> str:
    """Build a SharedAccessSignature token.

    Args:
        resource_uri: Resource the token grants access to (the hub host name)
        key: Base64 encoded shared access key
        policy_name: Shared access policy name, omitted from the token if None
        expiry: Expiry as seconds since the epoch

    Returns:
        ``SharedAccessSignature sr=...&sig=...&se=...[&skn=...]``

    Raises:
        ConfigurationError: If the key is not valid base64
    """
    encoded_uri = quote(resource_uri, safe="")
    string_to_sign = f"{encoded_uri}\n{expiry}".encode("utf-8")

    try:
        decoded_key = base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("Shared access key is not valid base64") from exc

    digest = hmac.new(decoded_key, string_to_sign, hashlib.sha256).digest()
    signature = quote(base64.b64encode(digest).decode("utf-8"), safe="")

    token = f"SharedAccessSignature sr={encoded_uri}&sig={signature}&se={expiry}"
    if policy_name:
        token += f"&skn={policy_name}"
    return token


class StaticTokenProvider:
    """Returns a caller-supplied authorization header value verbatim."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_token(self) -> str:
        return self._token


class SasTokenProvider:
    """Generates and caches SAS tokens signed with a shared access policy key.

    A cached token is reused until it is within ``renewal_margin_seconds`` of
    its expiry. Concurrent callers share one regeneration.
    """

    def __init__(
        self,
        host_name: str,
        policy_name: str,
        key: str,
        *,
        ttl_seconds: int = 3600,
        renewal_margin_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if renewal_margin_seconds >= ttl_seconds:
            raise ConfigurationError(
                "SAS token renewal margin must be shorter than the token lifetime",
                ttl_seconds=ttl_seconds,
                renewal_margin_seconds=renewal_margin_seconds,
            )
        self._resource_uri = host_name.lower()
        self._policy_name = policy_name
        self._key = key
        self._ttl_seconds = ttl_seconds
        self._renewal_margin_seconds = renewal_margin_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._token: str | None = None
        self._expiry: int = 0

    @classmethod
    def from_connection_string(
        cls,
        connection_string: ConnectionString | str,
        *,
        ttl_seconds: int = 3600,
        renewal_margin_seconds: int = 300,
    ) -> SasTokenProvider:
        if isinstance(connection_string, str):
            connection_string = ConnectionString.parse(connection_string)
        return cls(
            connection_string.host_name,
            connection_string.shared_access_key_name,
            connection_string.shared_access_key,
            ttl_seconds=ttl_seconds,
            renewal_margin_seconds=renewal_margin_seconds,
        )

    @property
    def expiry(self) -> int:
        """Expiry (epoch seconds) of the cached token, 0 if none was generated."""
        return self._expiry

    def _needs_renewal(self, now: float) -> bool:
        return self._token is None or now >= self._expiry - self._renewal_margin_seconds

    async def get_token(self) -> str:
        async with self._lock:
            now = self._clock()
            token = self._token
            if token is None or self._needs_renewal(now):
                self._expiry = int(now) + self._ttl_seconds
                token = generate_sas_token(
                    self._resource_uri, self._key, self._policy_name, self._expiry
                )
                self._token = token
                logger.debug(
                    "Generated SAS token",
                    extra={"resource_uri": self._resource_uri, "expiry": self._expiry},
                )
            return token
