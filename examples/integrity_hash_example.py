#!/usr/bin/env python3
"""
Integrity Hash Example for Greenfield SDK.

This example computes the per-shard hash roots of a file, shows that a
segment can be rebuilt from any data_shards of its pieces, and builds the
MsgCreateObject that would be signed and broadcast.

Requirements:
    - greenfield SDK (pip install -e .)
"""

import argparse
import asyncio
import os
import random
import sys

from greenfield_sdk import (
    GreenfieldClient,
    RedundancyConfig,
    compute_integrity_hash,
    encode_segment,
    format_size,
    reconstruct_segment,
)


def reconstruction_demo(segment: bytes, data_shards: int, parity_shards: int):
    """Drop parity_shards random pieces and rebuild the segment from the rest."""
    pieces = encode_segment(segment, data_shards, parity_shards)
    survivors = sorted(random.sample(range(len(pieces)), data_shards))
    rebuilt = reconstruct_segment(
        {i: pieces[i] for i in survivors}, data_shards, parity_shards, len(segment)
    )
    print(f"Rebuilt first segment from shards {survivors}: {rebuilt == segment}")


async def main_async(args) -> int:
    redundancy = RedundancyConfig(
        segment_size=args.segment_size,
        data_shards=args.data_shards,
        parity_shards=args.parity_shards,
    )

    print(f"File: {args.file} ({format_size(os.path.getsize(args.file))})")
    with open(args.file, "rb") as f:
        result = compute_integrity_hash(
            f, redundancy.segment_size, redundancy.data_shards, redundancy.parity_shards
        )

    print(f"Total size: {result.total_size}")
    for index, root in enumerate(result.hex_roots()):
        print(f"  shard {index}: {root}")

    with open(args.file, "rb") as f:
        first_segment = f.read(redundancy.segment_size)
    if first_segment and redundancy.parity_shards:
        reconstruction_demo(first_segment, redundancy.data_shards, redundancy.parity_shards)

    if args.bucket and args.address:
        async with GreenfieldClient(address=args.address) as client:
            with open(args.file, "rb") as f:
                msg = await client.build_create_object_msg(
                    args.bucket, os.path.basename(args.file), f, redundancy=redundancy
                )
        print(msg.to_amino_json())

    return 0


def main():
    parser = argparse.ArgumentParser(description="Greenfield integrity hash example")
    parser.add_argument("file", help="File to hash")
    parser.add_argument("--segment-size", type=int, default=16 * 1024 * 1024)
    parser.add_argument("--data-shards", type=int, default=4)
    parser.add_argument("--parity-shards", type=int, default=2)
    parser.add_argument("--bucket", help="Bucket name for the example MsgCreateObject")
    parser.add_argument("--address", help="Creator address for the example MsgCreateObject")
    args = parser.parse_args()

    if not os.path.isfile(args.file):
        print(f"File not found: {args.file}")
        return 1

    return asyncio.run(main_async(args))


if __name__ == "__main__":
    sys.exit(main())
