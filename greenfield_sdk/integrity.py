"""
Integrity hash computation for Greenfield objects.

Every object created on chain carries one checksum per storage shard. This
module computes them from the raw payload:

1. The payload is split into fixed-size segments (the last may be shorter).
2. Each segment is encoded into data_shards + parity_shards pieces, either
   with the Reed-Solomon code or, for replicated objects, as verbatim copies.
3. Each shard index keeps a running SHA-256 over its pieces in segment order;
   the finalized digests are the hash roots.

Storage providers recompute the root of the shard they hold and compare it
with the on-chain value, so the output must be bit-exact for identical input
and parameters.
"""

import asyncio
import base64
import hashlib
import io
import logging
import threading
from concurrent.futures import Executor
from enum import Enum
from typing import Any, BinaryIO, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from greenfield_sdk.erasure_coding import ReedSolomonCodec, validate_shard_counts
from greenfield_sdk.errors import (
    GreenfieldError,
    GreenfieldHashCancelledError,
    GreenfieldInvalidConfigError,
    GreenfieldMissingInputError,
    GreenfieldReadError,
)

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "sha256"
HASH_SIZE = 32
EMPTY_HASH = hashlib.sha256(b"").digest()

Reader = Union[BinaryIO, bytes, bytearray, memoryview]
ProgressCallback = Callable[[str, int, int], None]


class RedundancyType(str, Enum):
    """How an object's shards are derived from its segments."""

    EC = "REDUNDANCY_EC_TYPE"
    REPLICA = "REDUNDANCY_REPLICA_TYPE"


class RedundancyConfig(BaseModel):
    """Redundancy parameters, as published in the chain's storage params."""

    model_config = ConfigDict(frozen=True)

    segment_size: int
    data_shards: int
    parity_shards: int

    @property
    def total_shards(self) -> int:
        return self.data_shards + self.parity_shards

    def ensure_valid(self) -> None:
        """
        Raises:
            GreenfieldInvalidConfigError: If the parameters can't be used for hashing
        """
        if self.segment_size <= 0:
            raise GreenfieldInvalidConfigError(
                f"Invalid redundancy parameters: segment size must be positive, got {self.segment_size}"
            )
        validate_shard_counts(self.data_shards, self.parity_shards)


class IntegrityResult(BaseModel):
    """Hash roots (ordered by shard index) and total size of a payload."""

    model_config = ConfigDict(frozen=True)

    hash_roots: Tuple[bytes, ...]
    total_size: int

    def hex_roots(self) -> List[str]:
        return [root.hex() for root in self.hash_roots]

    def base64_roots(self) -> List[str]:
        """Roots as they appear in the JSON form of an on-chain message."""
        return [base64.b64encode(root).decode("utf-8") for root in self.hash_roots]


def _as_reader(reader: Any) -> BinaryIO:
    if reader is None:
        raise GreenfieldMissingInputError(
            "Failed to compute hash of payload: reader is None"
        )
    if isinstance(reader, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(reader))
    if not hasattr(reader, "read"):
        raise TypeError(
            f"Expected a readable binary stream or bytes, got {type(reader).__name__}"
        )
    return reader


def _read_segment(reader: BinaryIO, segment_size: int) -> bytes:
    """Read up to segment_size bytes, retrying short reads until EOF."""
    buffer = bytearray()
    while len(buffer) < segment_size:
        try:
            chunk = reader.read(segment_size - len(buffer))
        except GreenfieldError:
            raise
        except Exception as e:
            raise GreenfieldReadError(f"Failed to read content stream: {e}") from e
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise GreenfieldReadError(
                f"Content stream returned {type(chunk).__name__}, expected bytes; "
                "open the stream in binary mode"
            )
        if not chunk:
            break
        buffer += chunk
    return bytes(buffer)


def iter_segments(reader: Reader, segment_size: int) -> Iterator[bytes]:
    """
    Lazily split a stream into segments of segment_size bytes.

    The stream is consumed once, in order. The last segment may be shorter;
    an empty stream yields nothing.

    Args:
        reader: A readable binary stream, or raw bytes
        segment_size: Size of every segment but the last

    Yields:
        bytes: The next segment

    Raises:
        GreenfieldReadError: If a read fails; the partial segment is discarded
    """
    if segment_size <= 0:
        raise GreenfieldInvalidConfigError(
            f"Invalid redundancy parameters: segment size must be positive, got {segment_size}"
        )
    stream = _as_reader(reader)

    while True:
        segment = _read_segment(stream, segment_size)
        if not segment:
            return
        yield segment
        if len(segment) < segment_size:
            return


class RootHasher:
    """One independent SHA-256 accumulator per shard index."""

    def __init__(self, shard_count: int):
        if shard_count < 1:
            raise GreenfieldInvalidConfigError(
                f"Shard count must be at least 1, got {shard_count}"
            )
        self._hashers = [hashlib.sha256() for _ in range(shard_count)]
        self._roots: Optional[Tuple[bytes, ...]] = None

    @property
    def shard_count(self) -> int:
        return len(self._hashers)

    def update(self, pieces: Sequence[bytes], executor: Optional[Executor] = None) -> None:
        """
        Feed one segment's pieces, one per shard index.

        Args:
            pieces: Exactly shard_count pieces, ordered by shard index
            executor: Optional executor to update the accumulators in parallel.
                All updates complete before this method returns.
        """
        if self._roots is not None:
            raise RuntimeError("RootHasher has already been finalized")
        if len(pieces) != len(self._hashers):
            raise ValueError(
                f"Expected {len(self._hashers)} pieces, got {len(pieces)}"
            )

        if executor is None:
            for hasher, piece in zip(self._hashers, pieces):
                hasher.update(piece)
            return

        futures = [
            executor.submit(hasher.update, piece)
            for hasher, piece in zip(self._hashers, pieces)
        ]
        for future in futures:
            future.result()

    def finalize(self) -> Tuple[bytes, ...]:
        if self._roots is None:
            self._roots = tuple(hasher.digest() for hasher in self._hashers)
        return self._roots


class _HashJob:
    """State of one hashing call: segment source, encoder and accumulators."""

    def __init__(
        self,
        reader: Reader,
        config: RedundancyConfig,
        redundancy_type: RedundancyType,
        executor: Optional[Executor],
    ):
        self.config = config
        self.redundancy_type = redundancy_type
        self.executor = executor
        self.codec = None
        if redundancy_type == RedundancyType.EC:
            self.codec = ReedSolomonCodec(config.data_shards, config.parity_shards)
        self.hasher = RootHasher(config.total_shards)
        self.segments = iter_segments(reader, config.segment_size)
        self.segment_count = 0
        self.total_size = 0

    def encode(self, segment: bytes) -> List[bytes]:
        if self.codec is None:
            return [segment] * self.config.total_shards
        return self.codec.encode(segment)

    def step(self) -> bool:
        """Process the next segment. Returns False once the stream is exhausted."""
        segment = next(self.segments, None)
        if segment is None:
            return False

        self.hasher.update(self.encode(segment), self.executor)
        self.segment_count += 1
        self.total_size += len(segment)
        logger.debug(
            f"Hashed segment {self.segment_count} ({len(segment)} bytes, {self.total_size} total)"
        )
        return True

    def result(self) -> IntegrityResult:
        return IntegrityResult(
            hash_roots=self.hasher.finalize(), total_size=self.total_size
        )


def _prepare(
    reader: Reader,
    segment_size: int,
    data_shards: int,
    parity_shards: int,
    redundancy_type: Union[RedundancyType, str],
    executor: Optional[Executor],
) -> _HashJob:
    if reader is None:
        raise GreenfieldMissingInputError(
            "Failed to compute hash of payload: reader is None"
        )

    try:
        config = RedundancyConfig(
            segment_size=segment_size,
            data_shards=data_shards,
            parity_shards=parity_shards,
        )
        redundancy_type = RedundancyType(redundancy_type)
    except (ValidationError, ValueError) as e:
        raise GreenfieldInvalidConfigError(f"Invalid redundancy parameters: {e}") from e
    config.ensure_valid()

    logger.debug(
        f"Computing integrity hash: segment_size={segment_size}, "
        f"data_shards={data_shards}, parity_shards={parity_shards}, "
        f"type={redundancy_type.value}"
    )
    return _HashJob(reader, config, redundancy_type, executor)


def compute_integrity_hash(
    reader: Reader,
    segment_size: int,
    data_shards: int,
    parity_shards: int,
    redundancy_type: Union[RedundancyType, str] = RedundancyType.EC,
    executor: Optional[Executor] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> IntegrityResult:
    """
    Compute the per-shard hash roots and total size of a payload.

    Args:
        reader: Readable binary stream (or raw bytes) holding the payload
        segment_size: Segment size in bytes
        data_shards: Number of data shards
        parity_shards: Number of parity shards
        redundancy_type: Erasure coded (default) or replicated
        executor: Optional executor for hashing shards of a segment in parallel
        cancel_event: Optional event checked before each segment is read
        progress_callback: Optional callback (stage_name, segments_done, bytes_done)

    Returns:
        IntegrityResult: data_shards + parity_shards hash roots and the payload size

    Raises:
        GreenfieldMissingInputError: If reader is None
        GreenfieldInvalidConfigError: If the parameters are invalid; raised
            before any byte is read
        GreenfieldReadError: If reading the stream fails
        GreenfieldHashCancelledError: If cancel_event is set
    """
    job = _prepare(reader, segment_size, data_shards, parity_shards, redundancy_type, executor)

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise GreenfieldHashCancelledError(
                f"Integrity hash cancelled after {job.segment_count} segments"
            )
        if not job.step():
            break
        if progress_callback:
            progress_callback("Hashing segments", job.segment_count, job.total_size)

    result = job.result()
    logger.debug(
        f"Integrity hash complete: {job.segment_count} segments, {result.total_size} bytes"
    )
    return result


async def compute_integrity_hash_async(
    reader: Reader,
    segment_size: int,
    data_shards: int,
    parity_shards: int,
    redundancy_type: Union[RedundancyType, str] = RedundancyType.EC,
    executor: Optional[Executor] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> IntegrityResult:
    """
    Async variant of compute_integrity_hash.

    Each segment is read, encoded and hashed in the loop's default executor.
    Cancelling the awaiting task stops the computation at the next segment
    boundary: the segment in flight is finished before CancelledError
    propagates, so the reader is never touched after the task ends.
    """
    job = _prepare(reader, segment_size, data_shards, parity_shards, redundancy_type, executor)
    loop = asyncio.get_running_loop()

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise GreenfieldHashCancelledError(
                f"Integrity hash cancelled after {job.segment_count} segments"
            )
        step = loop.run_in_executor(None, job.step)
        try:
            more = await asyncio.shield(step)
        except asyncio.CancelledError:
            await asyncio.wait([step])
            if not step.cancelled() and step.exception() is not None:
                logger.debug(f"Segment step failed during cancellation: {step.exception()}")
            logger.debug(
                f"Integrity hash cancelled after {job.segment_count} segments"
            )
            raise
        if not more:
            break
        if progress_callback:
            progress_callback("Hashing segments", job.segment_count, job.total_size)

    return job.result()
