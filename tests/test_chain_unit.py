"""
Unit tests for ChainClient with mocked HTTP responses.

These tests verify parameter parsing and retry behaviour without making
network calls.
"""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from greenfield_sdk.chain import ChainClient, parse_redundancy_params, retry_on_error
from greenfield_sdk.errors import (
    GreenfieldChainConnectionError,
    GreenfieldConfigUnavailableError,
)
from greenfield_sdk.integrity import RedundancyConfig

from tests.conftest import TEST_REST_URL, json_response


def status_error_response(status_code: int) -> Mock:
    response = json_response({"message": "error"}, status_code=status_code)
    request = httpx.Request("GET", f"{TEST_REST_URL}/greenfield/storage/params")
    response.raise_for_status = Mock(
        side_effect=httpx.HTTPStatusError(
            f"status {status_code}", request=request, response=response
        )
    )
    return response


class TestParseRedundancyParams:
    def test_versioned_params(self, storage_params_body):
        config = parse_redundancy_params(storage_params_body)
        assert config == RedundancyConfig(segment_size=1024, data_shards=4, parity_shards=2)

    def test_legacy_flat_params(self):
        body = {
            "params": {
                "max_segment_size": "16777216",
                "redundant_data_chunk_num": "4",
                "redundant_parity_chunk_num": "2",
            }
        }
        config = parse_redundancy_params(body)
        assert config.segment_size == 16 * 1024 * 1024
        assert config.data_shards == 4
        assert config.parity_shards == 2

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"params": None},
            {"params": {"max_segment_size": "1024"}},
            {"params": {"versioned_params": {"max_segment_size": "x",
                                             "redundant_data_chunk_num": 4,
                                             "redundant_parity_chunk_num": 2}}},
            [],
        ],
    )
    def test_malformed_bodies(self, body):
        with pytest.raises(GreenfieldConfigUnavailableError):
            parse_redundancy_params(body)


@pytest.mark.asyncio
class TestChainClientUnit:
    async def test_get_redundancy_params(self, chain_client, storage_params_body):
        with patch.object(chain_client._client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = json_response(storage_params_body)

            config = await chain_client.get_redundancy_params()

            assert config.data_shards == 4
            assert config.parity_shards == 2
            assert config.segment_size == 1024
            mock_get.assert_called_once()
            assert mock_get.call_args.args[0] == "/greenfield/storage/params"

    async def test_server_error_is_retried(self, chain_client, storage_params_body):
        with patch.object(chain_client._client, "get", new_callable=AsyncMock) as mock_get, \
                patch("greenfield_sdk.chain.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            mock_get.side_effect = [
                status_error_response(503),
                json_response(storage_params_body),
            ]

            config = await chain_client.get_redundancy_params()

            assert config.data_shards == 4
            assert mock_get.call_count == 2
            mock_sleep.assert_awaited_once()

    async def test_client_error_is_not_retried(self, chain_client):
        with patch.object(chain_client._client, "get", new_callable=AsyncMock) as mock_get, \
                patch("greenfield_sdk.chain.asyncio.sleep", new_callable=AsyncMock):
            mock_get.return_value = status_error_response(404)

            with pytest.raises(GreenfieldConfigUnavailableError, match="status 404"):
                await chain_client.get_redundancy_params()

            assert mock_get.call_count == 1

    async def test_connection_failure(self, chain_client):
        with patch.object(chain_client._client, "get", new_callable=AsyncMock) as mock_get, \
                patch("greenfield_sdk.chain.asyncio.sleep", new_callable=AsyncMock):
            mock_get.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(GreenfieldConfigUnavailableError) as exc_info:
                await chain_client.get_redundancy_params()

            assert isinstance(exc_info.value.__cause__, GreenfieldChainConnectionError)
            assert mock_get.call_count == 4

    async def test_invalid_json(self, chain_client):
        response = json_response(None)
        response.json.side_effect = ValueError("Expecting value")

        with patch.object(chain_client._client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = response

            with pytest.raises(GreenfieldConfigUnavailableError):
                await chain_client.get_redundancy_params()

    async def test_rest_url_from_config(self):
        from greenfield_sdk.config import set_config_value

        set_config_value("chain", "rest_url", "https://configured.example")
        client = ChainClient()
        assert client.rest_url == "https://configured.example"
        await client.close()

    async def test_context_manager_closes_client(self):
        async with ChainClient(rest_url=TEST_REST_URL) as client:
            inner = client._client
        assert inner.is_closed


@pytest.mark.asyncio
class TestRetryDecorator:
    async def test_gives_up_after_retries(self):
        calls = []

        @retry_on_error(retries=2, backoff=0)
        async def flaky():
            calls.append(1)
            raise httpx.ReadTimeout("timed out")

        with pytest.raises(httpx.ReadTimeout):
            await flaky()

        assert len(calls) == 3

    async def test_other_errors_are_not_retried(self):
        calls = []

        @retry_on_error(retries=2, backoff=0)
        async def broken():
            calls.append(1)
            raise KeyError("boom")

        with pytest.raises(KeyError):
            await broken()

        assert len(calls) == 1
