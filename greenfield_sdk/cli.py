#!/usr/bin/env python3
"""
Command Line Interface tools for Greenfield SDK.

This module provides the `greenfield` command for computing object integrity
hashes, inspecting chain redundancy parameters and managing configuration.
"""

import asyncio
import logging
import sys
from typing import Callable, List, Optional

from greenfield_sdk import cli_handlers
from greenfield_sdk.cli_parser import create_parser, parse_arguments
from greenfield_sdk.cli_rich import error, warning
from greenfield_sdk.client import GreenfieldClient
from greenfield_sdk.config import initialize_from_env


async def run_with_client(client: GreenfieldClient, handler: Callable, *args, **kwargs) -> int:
    """Run an async handler and close the client afterwards."""
    async with client:
        return await handler(client, *args, **kwargs)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point for greenfield command."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    initialize_from_env()

    if not args.command:
        create_parser().print_help()
        return 0

    if args.command == "config":
        if args.config_action == "get":
            return cli_handlers.handle_config_get(args.section, args.key)
        elif args.config_action == "set":
            return cli_handlers.handle_config_set(args.section, args.key, args.value)
        elif args.config_action == "list":
            return cli_handlers.handle_config_list()
        elif args.config_action == "reset":
            return cli_handlers.handle_config_reset()
        error("No config action specified")
        return 1

    client = cli_handlers.create_client(args)

    try:
        if args.command == "hash":
            return asyncio.run(
                run_with_client(
                    client,
                    cli_handlers.handle_hash,
                    args.file_path,
                    segment_size=args.segment_size,
                    data_shards=args.data_shards,
                    parity_shards=args.parity_shards,
                    replica=args.replica,
                    offline=args.offline,
                    as_json=args.json,
                )
            )
        elif args.command == "params":
            return asyncio.run(run_with_client(client, cli_handlers.handle_params))
    except KeyboardInterrupt:
        warning("Operation cancelled by user")
        return 130

    error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
