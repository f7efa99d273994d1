"""Tests for the authoritative score lookup client."""

import httpx
import pytest
import respx

from creator_iq.scoring.authority import IQCheckerClient
from creator_iq.scoring.errors import AuthorityError

LOOKUP_URL = "https://iq.test/api/iq/alice_x"


@pytest.fixture
async def client(scoring_config):
    client = IQCheckerClient(scoring_config)
    yield client
    await client.close()


class TestLookup:
    @respx.mock
    async def test_returns_score(self, client) -> None:
        respx.get(LOOKUP_URL).mock(
            return_value=httpx.Response(200, json={"iqScore": 131, "confidence": 90})
        )

        found = await client.lookup("alice_x")

        assert found.score == 131
        assert found.confidence == 90

    @respx.mock
    async def test_strips_at_sign_and_escapes(self, client) -> None:
        route = respx.get("https://iq.test/api/iq/a%20b").mock(
            return_value=httpx.Response(200, json={"iqScore": 100})
        )

        found = await client.lookup("@a b")

        assert route.called
        assert found.confidence is None

    @respx.mock
    async def test_accepts_score_field(self, client) -> None:
        respx.get(LOOKUP_URL).mock(return_value=httpx.Response(200, json={"score": 99.5}))
        assert (await client.lookup("alice_x")).score == 99.5

    @respx.mock
    async def test_not_found(self, client) -> None:
        respx.get(LOOKUP_URL).mock(return_value=httpx.Response(404))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "not_found"

    @respx.mock
    @pytest.mark.parametrize("payload", [{}, {"iqScore": 0}, {"iqScore": None}, {"iqScore": "high"}])
    async def test_missing_score_is_not_found(self, client, payload) -> None:
        respx.get(LOOKUP_URL).mock(return_value=httpx.Response(200, json=payload))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "not_found"

    @respx.mock
    async def test_server_error_is_transport(self, client) -> None:
        route = respx.get(LOOKUP_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "transport"
        assert route.call_count == 1

    @respx.mock
    async def test_connection_error_is_transport(self, client) -> None:
        respx.get(LOOKUP_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "transport"

    @respx.mock
    async def test_invalid_json_is_malformed(self, client) -> None:
        respx.get(LOOKUP_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "malformed"

    @respx.mock
    async def test_non_object_is_malformed(self, client) -> None:
        respx.get(LOOKUP_URL).mock(return_value=httpx.Response(200, json=[131]))

        with pytest.raises(AuthorityError) as exc_info:
            await client.lookup("alice_x")
        assert exc_info.value.kind == "malformed"
