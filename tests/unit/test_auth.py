"""Tests for connection string parsing and SAS token generation."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import hmac
from urllib.parse import parse_qs, quote, unquote

import pytest

from iothubservice.auth import (
    ConnectionString,
    SasTokenProvider,
    StaticTokenProvider,
    generate_sas_token,
)
from iothubservice.exceptions import ConfigurationError
from tests.constants import CONNECTION_STRING, HOST_NAME, POLICY_NAME, SHARED_ACCESS_KEY


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _token_fields(token: str) -> dict[str, str]:
    scheme, _, query = token.partition(" ")
    assert scheme == "SharedAccessSignature"
    return {key: values[0] for key, values in parse_qs(query).items()}


class TestConnectionString:
    def test_parse(self) -> None:
        parsed = ConnectionString.parse(CONNECTION_STRING)

        assert parsed.host_name == HOST_NAME
        assert parsed.shared_access_key_name == POLICY_NAME
        assert parsed.shared_access_key == SHARED_ACCESS_KEY

    def test_key_padding_is_preserved(self) -> None:
        """Values split on the first '=' only, so base64 padding survives."""
        parsed = ConnectionString.parse(
            "HostName=h.azure-devices.net;SharedAccessKeyName=p;SharedAccessKey=YWJjZA=="
        )

        assert parsed.shared_access_key == "YWJjZA=="

    def test_trailing_separator_is_ignored(self) -> None:
        assert ConnectionString.parse(f"{CONNECTION_STRING};").host_name == HOST_NAME

    def test_missing_keys_are_reported(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ConnectionString.parse(f"HostName={HOST_NAME}")

        assert exc_info.value.details["missing_keys"] == ["SharedAccessKeyName", "SharedAccessKey"]

    def test_malformed_segment(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed"):
            ConnectionString.parse(f"HostName={HOST_NAME};garbage")

    def test_repr_masks_key(self) -> None:
        assert SHARED_ACCESS_KEY not in repr(ConnectionString.parse(CONNECTION_STRING))


class TestGenerateSasToken:
    def test_signature_matches_hmac_of_uri_and_expiry(self) -> None:
        token = generate_sas_token(HOST_NAME, SHARED_ACCESS_KEY, POLICY_NAME, 1_700_000_000)
        fields = _token_fields(token)

        string_to_sign = f"{quote(HOST_NAME, safe='')}\n1700000000".encode()
        expected = base64.b64encode(
            hmac.new(base64.b64decode(SHARED_ACCESS_KEY), string_to_sign, hashlib.sha256).digest()
        ).decode()

        assert fields["sr"] == HOST_NAME
        assert fields["sig"] == expected
        assert fields["se"] == "1700000000"
        assert fields["skn"] == POLICY_NAME

    def test_signature_is_url_encoded(self) -> None:
        token = generate_sas_token(HOST_NAME, SHARED_ACCESS_KEY, POLICY_NAME, 1_700_000_000)
        raw_sig = token.split("sig=", 1)[1].split("&", 1)[0]

        assert "+" not in raw_sig and "/" not in raw_sig and "=" not in raw_sig
        assert base64.b64decode(unquote(raw_sig))

    def test_policy_name_is_optional(self) -> None:
        token = generate_sas_token(HOST_NAME, SHARED_ACCESS_KEY, None, 1_700_000_000)

        assert "skn=" not in token

    def test_invalid_key(self) -> None:
        with pytest.raises(ConfigurationError, match="base64"):
            generate_sas_token(HOST_NAME, "not base64!", POLICY_NAME, 1_700_000_000)


class TestSasTokenProvider:
    async def test_first_call_generates_and_caches_token(self) -> None:
        provider = SasTokenProvider(
            HOST_NAME, POLICY_NAME, SHARED_ACCESS_KEY, clock=FakeClock(1_000.0)
        )
        assert provider.expiry == 0

        token = await provider.get_token()

        assert _token_fields(token)["se"] == "4600"
        assert await provider.get_token() is token

    async def test_token_is_cached_until_renewal_margin(self) -> None:
        clock = FakeClock(1_000.0)
        provider = SasTokenProvider(
            HOST_NAME,
            POLICY_NAME,
            SHARED_ACCESS_KEY,
            ttl_seconds=3600,
            renewal_margin_seconds=300,
            clock=clock,
        )

        first = await provider.get_token()
        assert provider.expiry == 4_600

        clock.now = 4_299.0
        assert await provider.get_token() == first

        clock.now = 4_300.0
        renewed = await provider.get_token()
        assert renewed != first
        assert provider.expiry == 7_900

    async def test_concurrent_callers_share_one_token(self) -> None:
        provider = SasTokenProvider(
            HOST_NAME, POLICY_NAME, SHARED_ACCESS_KEY, clock=FakeClock(1_000.0)
        )

        tokens = await asyncio.gather(*(provider.get_token() for _ in range(10)))

        assert len(set(tokens)) == 1

    async def test_resource_uri_is_lower_cased(self) -> None:
        provider = SasTokenProvider(
            "Test-Hub.Azure-Devices.NET", POLICY_NAME, SHARED_ACCESS_KEY, clock=FakeClock(0.0)
        )

        assert _token_fields(await provider.get_token())["sr"] == "test-hub.azure-devices.net"

    def test_margin_must_be_shorter_than_ttl(self) -> None:
        with pytest.raises(ConfigurationError):
            SasTokenProvider(
                HOST_NAME, POLICY_NAME, SHARED_ACCESS_KEY, ttl_seconds=60, renewal_margin_seconds=60
            )

    async def test_from_connection_string(self) -> None:
        provider = SasTokenProvider.from_connection_string(CONNECTION_STRING, ttl_seconds=600)

        fields = _token_fields(await provider.get_token())

        assert fields["skn"] == POLICY_NAME
        assert fields["sr"] == HOST_NAME


async def test_static_token_provider_returns_token_verbatim() -> None:
    assert await StaticTokenProvider("SharedAccessSignature sr=x").get_token() == (
        "SharedAccessSignature sr=x"
    )
