"""
Pytest configuration and fixtures for Greenfield SDK tests.

This module provides shared fixtures: an isolated config directory, sample
payloads, redundancy configs and a chain client with mocked HTTP.
"""

import random
from typing import AsyncGenerator
from unittest.mock import Mock

import pytest
import pytest_asyncio
from httpx import Response

from greenfield_sdk import config
from greenfield_sdk.chain import ChainClient
from greenfield_sdk.client import GreenfieldClient
from greenfield_sdk.integrity import RedundancyConfig

TEST_ADDRESS = "0x" + "ab" * 20
TEST_SP_ADDRESS = "0x" + "12" * 20
TEST_REST_URL = "https://test.greenfield.local"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config module at a temporary directory and clear env overrides."""
    config_dir = tmp_path / ".greenfield"
    monkeypatch.setattr(config, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(config, "CONFIG_FILE", str(config_dir / "config.json"))
    for env_name in config.ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    return config_dir


def make_payload(size: int, seed: int = 42) -> bytes:
    """Deterministic pseudo-random payload of the given size."""
    rng = random.Random(seed)
    return bytes(rng.getrandbits(8) for _ in range(size))


def json_response(body, status_code: int = 200) -> Mock:
    """Mocked httpx response returning `body` from .json()."""
    response = Mock(spec=Response)
    response.status_code = status_code
    response.json.return_value = body
    response.raise_for_status = Mock()
    return response


@pytest.fixture
def small_redundancy() -> RedundancyConfig:
    return RedundancyConfig(segment_size=1024, data_shards=4, parity_shards=2)


@pytest.fixture
def storage_params_body():
    return {
        "params": {
            "versioned_params": {
                "max_segment_size": "1024",
                "redundant_data_chunk_num": 4,
                "redundant_parity_chunk_num": 2,
                "min_charge_size": "1048576",
            },
            "max_payload_size": "68719476736",
        }
    }


@pytest_asyncio.fixture
async def chain_client() -> AsyncGenerator[ChainClient, None]:
    client = ChainClient(rest_url=TEST_REST_URL)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def greenfield_client() -> AsyncGenerator[GreenfieldClient, None]:
    client = GreenfieldClient(rest_url=TEST_REST_URL, address=TEST_ADDRESS)
    yield client
    await client.close()
