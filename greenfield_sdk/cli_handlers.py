#!/usr/bin/env python3
"""
Command Line Interface handlers for Greenfield SDK.

This module provides handler functions for CLI commands: integrity hashing,
chain parameter queries and configuration management.
"""
import json
import os
from typing import Any, Optional

from greenfield_sdk.cli_rich import (
    ProgressTracker,
    console,
    error,
    info,
    log,
    print_panel,
    print_table,
    success,
)
from greenfield_sdk.client import GreenfieldClient
from greenfield_sdk.config import (
    get_all_config,
    get_config_value,
    get_redundancy_config,
    reset_config,
    set_config_value,
)
from greenfield_sdk.errors import GreenfieldError
from greenfield_sdk.integrity import RedundancyConfig, RedundancyType
from greenfield_sdk.utils import format_size


def create_client(args: Any) -> GreenfieldClient:
    """Create a GreenfieldClient instance from command line arguments."""
    return GreenfieldClient(rest_url=getattr(args, "rest_url", None))


async def resolve_redundancy(
    client: GreenfieldClient,
    segment_size: Optional[int] = None,
    data_shards: Optional[int] = None,
    parity_shards: Optional[int] = None,
    offline: bool = False,
) -> RedundancyConfig:
    """
    Work out the redundancy params for a hash command.

    Explicit values win. Missing ones come from the config file when offline,
    otherwise from the chain.
    """
    overrides = {
        "segment_size": segment_size,
        "data_shards": data_shards,
        "parity_shards": parity_shards,
    }
    if all(value is not None for value in overrides.values()):
        return RedundancyConfig(**overrides)

    if offline:
        base = get_redundancy_config()
    else:
        base = await client.get_redundancy_params()

    return base.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )


async def handle_hash(
    client: GreenfieldClient,
    file_path: str,
    segment_size: Optional[int] = None,
    data_shards: Optional[int] = None,
    parity_shards: Optional[int] = None,
    replica: bool = False,
    offline: bool = False,
    as_json: bool = False,
) -> int:
    """Handle the hash command"""
    if not os.path.isfile(file_path):
        error(f"File not found: {file_path}")
        return 1

    redundancy_type = RedundancyType.REPLICA if replica else RedundancyType.EC
    file_size = os.path.getsize(file_path)

    try:
        redundancy = await resolve_redundancy(
            client, segment_size, data_shards, parity_shards, offline
        )

        with open(file_path, "rb") as f:
            if as_json:
                result = await client.compute_hash_roots(f, redundancy_type, redundancy)
            else:
                info(
                    f"Hashing [bold]{os.path.basename(file_path)}[/bold] "
                    f"({format_size(file_size)}) with {redundancy.data_shards}+"
                    f"{redundancy.parity_shards} shards, "
                    f"{format_size(redundancy.segment_size)} segments"
                )
                with ProgressTracker("Hashing segments", file_size) as tracker:
                    result = await client.compute_hash_roots(
                        f,
                        redundancy_type,
                        redundancy,
                        progress_callback=tracker.callback,
                    )
                    tracker.finish()
    except (GreenfieldError, OSError) as e:
        error(f"Failed to compute hash roots: {e}")
        return 1

    if as_json:
        payload = {
            "file": file_path,
            "size": result.total_size,
            "redundancy_type": redundancy_type.value,
            "segment_size": redundancy.segment_size,
            "data_shards": redundancy.data_shards,
            "parity_shards": redundancy.parity_shards,
            "hash_roots": result.hex_roots(),
        }
        console.print_json(json.dumps(payload))
        return 0

    rows = [
        {
            "Shard": index,
            "Kind": "data" if index < redundancy.data_shards else "parity",
            "Hash Root": root,
        }
        for index, root in enumerate(result.hex_roots())
    ]
    print_table("Hash Roots", rows, ["Shard", "Kind", "Hash Root"])
    success(
        f"Computed {len(result.hash_roots)} hash roots for "
        f"{result.total_size} bytes ({redundancy_type.value})"
    )
    return 0


async def handle_params(client: GreenfieldClient) -> int:
    """Handle the params command"""
    try:
        params = await client.get_redundancy_params()
    except GreenfieldError as e:
        error(f"Failed to fetch redundancy parameters: {e}")
        return 1

    print_table(
        "Redundancy Parameters",
        [
            {"Parameter": "segment_size", "Value": f"{params.segment_size} ({format_size(params.segment_size)})"},
            {"Parameter": "data_shards", "Value": params.data_shards},
            {"Parameter": "parity_shards", "Value": params.parity_shards},
        ],
        ["Parameter", "Value"],
    )
    return 0


#
# Config Handlers
#


def _parse_config_value(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if value.isdigit():
        return int(value)
    return value


def handle_config_get(section: str, key: str) -> int:
    """Handle the config get command"""
    value = get_config_value(section, key)
    log(
        f"[bold cyan]{section}[/bold cyan].[bold green]{key}[/bold green] = [bold]{value}[/bold]"
    )
    return 0


def handle_config_set(section: str, key: str, value: str) -> int:
    """Handle the config set command"""
    parsed = _parse_config_value(value)
    if not set_config_value(section, key, parsed):
        error(f"Could not save {section}.{key}")
        return 1

    success(
        f"Set [bold cyan]{section}[/bold cyan].[bold green]{key}[/bold green] = [bold]{parsed}[/bold]"
    )
    return 0


def handle_config_list() -> int:
    """Handle the config list command"""
    config = get_all_config()

    config_lines = ["Current configuration:"]
    for section, values in config.items():
        config_lines.append(f"\n[bold cyan]{section}[/bold cyan]")
        for key, value in values.items():
            config_lines.append(f"  [bold green]{key}[/bold green] = [bold]{value}[/bold]")

    print_panel("\n".join(config_lines), title="Configuration")
    return 0


def handle_config_reset() -> int:
    """Handle the config reset command"""
    if not reset_config():
        error("Could not reset configuration")
        return 1
    success("Configuration reset to default values")
    return 0
