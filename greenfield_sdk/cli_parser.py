#!/usr/bin/env python3
"""
Command Line Interface argument parser for Greenfield SDK.

This module provides the argument parsing functionality for the Greenfield CLI,
defining all available commands, subcommands, and their respective arguments.
"""

import argparse


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="greenfield",
        description="Greenfield SDK Command Line Interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  # Compute the hash roots of a file using the chain's redundancy params
  greenfield hash photo.jpg

  # Compute them offline with explicit params
  greenfield hash photo.jpg --segment-size 16777216 --data-shards 4 --parity-shards 2

  # Compute them for a replicated object, using configured params
  greenfield hash photo.jpg --replica --offline

  # Show the chain's redundancy params
  greenfield params

  # Point the CLI at another chain endpoint
  greenfield config set chain rest_url https://gnfd-testnet-fullnode-tendermint-us.bnbchain.org
""",
    )

    parser.add_argument(
        "--rest-url",
        help="Chain REST endpoint (default: from config)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    add_hash_command(subparsers)
    add_params_command(subparsers)
    add_config_commands(subparsers)

    return parser


def add_hash_command(subparsers):
    """Add the hash command to the parser."""
    hash_parser = subparsers.add_parser(
        "hash", help="Compute the integrity hash roots of a file"
    )
    hash_parser.add_argument("file_path", help="Path to the file to hash")
    hash_parser.add_argument(
        "--segment-size", type=int, help="Segment size in bytes"
    )
    hash_parser.add_argument(
        "--data-shards", type=int, help="Number of data shards"
    )
    hash_parser.add_argument(
        "--parity-shards", type=int, help="Number of parity shards"
    )
    hash_parser.add_argument(
        "--replica",
        action="store_true",
        help="Hash as a replicated object instead of erasure coded",
    )
    hash_parser.add_argument(
        "--offline",
        action="store_true",
        help="Use configured redundancy params instead of querying the chain",
    )
    hash_parser.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )


def add_params_command(subparsers):
    """Add the params command to the parser."""
    subparsers.add_parser("params", help="Show the chain redundancy parameters")


def add_config_commands(subparsers):
    """Add configuration commands to the parser."""
    config_parser = subparsers.add_parser(
        "config", help="Manage Greenfield SDK configuration"
    )
    config_subparsers = config_parser.add_subparsers(
        dest="config_action", help="Configuration action"
    )

    get_parser = config_subparsers.add_parser("get", help="Get a configuration value")
    get_parser.add_argument(
        "section", help="Configuration section (chain, redundancy, cli)"
    )
    get_parser.add_argument("key", help="Configuration key")

    set_parser = config_subparsers.add_parser("set", help="Set a configuration value")
    set_parser.add_argument(
        "section", help="Configuration section (chain, redundancy, cli)"
    )
    set_parser.add_argument("key", help="Configuration key")
    set_parser.add_argument("value", help="Configuration value")

    config_subparsers.add_parser("list", help="List all configuration values")
    config_subparsers.add_parser("reset", help="Reset configuration to default values")


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = create_parser()
    return parser.parse_args(argv)
