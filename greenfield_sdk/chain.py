"""
Greenfield chain REST client.

Only the storage module parameter query is implemented here: it supplies the
redundancy parameters (segment size, data and parity chunk counts) every
integrity hash depends on. Transaction signing and broadcast are left to an
external broadcaster (see greenfield_sdk.client).
"""

import asyncio
import functools
import logging
from typing import Any, Dict, Optional

import httpx

from greenfield_sdk.config import DEFAULT_CONFIG, get_config_value
from greenfield_sdk.errors import (
    GreenfieldChainConnectionError,
    GreenfieldChainError,
    GreenfieldConfigUnavailableError,
)
from greenfield_sdk.integrity import RedundancyConfig

logger = logging.getLogger(__name__)

STORAGE_PARAMS_PATH = "/greenfield/storage/params"


def retry_on_error(retries: int = 3, backoff: float = 2.0):
    """
    Decorator to retry HTTP requests on transport errors and 5xx responses.

    Args:
        retries: Number of retry attempts (default: 3)
        backoff: Seconds to wait between retries (default: 2.0)
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(retries + 1):
                try:
                    return await func(*args, **kwargs)
                except httpx.HTTPStatusError as e:
                    # 4xx won't get better by asking again
                    if e.response.status_code < 500:
                        raise
                    last_exception = e
                except httpx.TransportError as e:
                    last_exception = e

                if attempt == retries:
                    break

                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{retries + 1}): {last_exception}"
                )
                logger.warning(f"Retrying in {backoff} seconds...")
                await asyncio.sleep(backoff)

            raise last_exception

        return wrapper

    return decorator


def parse_redundancy_params(payload: Dict[str, Any]) -> RedundancyConfig:
    """
    Extract the redundancy parameters from a storage params response.

    Newer chains nest the versioned values under params.versioned_params;
    older ones keep them directly under params.

    Args:
        payload: Decoded JSON body of GET /greenfield/storage/params

    Returns:
        RedundancyConfig: segment size, data shards and parity shards

    Raises:
        GreenfieldConfigUnavailableError: If the payload is missing fields
    """
    params = payload.get("params") if isinstance(payload, dict) else None
    if not isinstance(params, dict):
        raise GreenfieldConfigUnavailableError(
            "Storage params response does not contain 'params'"
        )

    source = params.get("versioned_params") or params
    try:
        return RedundancyConfig(
            segment_size=int(source["max_segment_size"]),
            data_shards=int(source["redundant_data_chunk_num"]),
            parity_shards=int(source["redundant_parity_chunk_num"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GreenfieldConfigUnavailableError(
            f"Malformed storage params response: {e}"
        ) from e


class ChainClient:
    """
    HTTP client for the Greenfield chain REST endpoint.
    """

    def __init__(self, rest_url: Optional[str] = None, timeout: float = 30.0):
        """
        Initialize the chain client.

        Args:
            rest_url: Chain REST endpoint (from config if None)
            timeout: Request timeout in seconds
        """
        self.rest_url = rest_url or get_config_value(
            "chain", "rest_url", DEFAULT_CONFIG["chain"]["rest_url"]
        )
        self._client = httpx.AsyncClient(
            base_url=self.rest_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            follow_redirects=True,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    @retry_on_error(retries=3, backoff=2.0)
    async def _get(self, path: str) -> Dict[str, Any]:
        response = await self._client.get(path, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()

    async def get_storage_params(self) -> Dict[str, Any]:
        """
        Query the storage module parameters.

        Maps to: GET /greenfield/storage/params

        Returns:
            Dict[str, Any]: The decoded response body

        Raises:
            GreenfieldChainConnectionError: If the endpoint can't be reached
            GreenfieldChainError: If the endpoint returns an error status
        """
        try:
            return await self._get(STORAGE_PARAMS_PATH)
        except httpx.TransportError as e:
            raise GreenfieldChainConnectionError(
                f"Could not reach chain endpoint {self.rest_url}: {e}"
            ) from e
        except httpx.HTTPStatusError as e:
            raise GreenfieldChainError(
                f"Storage params query failed with status {e.response.status_code}"
            ) from e

    async def get_redundancy_params(self) -> RedundancyConfig:
        """
        Query the redundancy parameters used for integrity hashing.

        Returns:
            RedundancyConfig: segment size, data shards and parity shards

        Raises:
            GreenfieldConfigUnavailableError: If the parameters can't be fetched or parsed
        """
        try:
            payload = await self.get_storage_params()
        except (GreenfieldChainError, ValueError) as e:
            raise GreenfieldConfigUnavailableError(
                f"Redundancy parameters unavailable: {e}"
            ) from e

        config = parse_redundancy_params(payload)
        logger.info(
            f"Chain redundancy params: segment_size={config.segment_size}, "
            f"data_shards={config.data_shards}, parity_shards={config.parity_shards}"
        )
        return config
