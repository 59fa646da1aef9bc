"""
Erasure Coding module for Greenfield SDK.

Provides Reed-Solomon erasure coding over GF(2^8) for splitting a segment into
data and parity pieces, and for rebuilding a segment from any `data_shards`
of those pieces.

The generator matrix is the systematic Vandermonde construction used by the
storage providers: a (data + parity) x data Vandermonde matrix with entries
r^c, multiplied by the inverse of its top data x data block. Changing the
field polynomial or the matrix construction breaks verification of every
object already stored, so both are pinned under GENERATOR_MATRIX_VERSION.
"""

import logging
from functools import lru_cache
from typing import List, Mapping, Sequence, Tuple, Union

from greenfield_sdk.errors import (
    GreenfieldInvalidConfigError,
    GreenfieldReconstructionError,
)

logger = logging.getLogger(__name__)

GENERATOR_MATRIX_VERSION = "vandermonde-gf256-v1"
FIELD_POLYNOMIAL = 0x11D
MAX_TOTAL_SHARDS = 256

BytesLike = Union[bytes, bytearray, memoryview]
Matrix = Tuple[Tuple[int, ...], ...]


def _build_tables() -> Tuple[List[int], List[int]]:
    exp_table = [0] * 510
    log_table = [0] * 256
    x = 1
    for i in range(255):
        exp_table[i] = x
        log_table[x] = i
        x <<= 1
        if x & 0x100:
            x ^= FIELD_POLYNOMIAL
    # Doubled so gf_mul never needs a modulo
    for i in range(255, 510):
        exp_table[i] = exp_table[i - 255]
    return exp_table, log_table


_EXP_TABLE, _LOG_TABLE = _build_tables()


def gf_mul(a: int, b: int) -> int:
    """Multiply two field elements."""
    if a == 0 or b == 0:
        return 0
    return _EXP_TABLE[_LOG_TABLE[a] + _LOG_TABLE[b]]


def gf_div(a: int, b: int) -> int:
    """Divide two field elements."""
    if b == 0:
        raise ZeroDivisionError("division by zero in GF(256)")
    if a == 0:
        return 0
    return _EXP_TABLE[(_LOG_TABLE[a] - _LOG_TABLE[b]) % 255]


def gf_exp(a: int, n: int) -> int:
    """Raise a field element to a non-negative integer power (0^0 == 1)."""
    if n == 0:
        return 1
    if a == 0:
        return 0
    return _EXP_TABLE[(_LOG_TABLE[a] * n) % 255]


# _MUL_TABLES[c] maps every byte x to c * x, for use with bytes.translate
_MUL_TABLES = [bytes(gf_mul(c, x) for x in range(256)) for c in range(256)]


def _mat_mul(a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]) -> List[List[int]]:
    result = []
    for row in a:
        out = []
        for c in range(len(b[0])):
            value = 0
            for k, coef in enumerate(row):
                value ^= gf_mul(coef, b[k][c])
            out.append(value)
        result.append(out)
    return result


def _mat_invert(matrix: Sequence[Sequence[int]]) -> List[List[int]]:
    """Invert a square matrix with Gauss-Jordan elimination."""
    n = len(matrix)
    work = [
        list(row) + [1 if i == r else 0 for i in range(n)]
        for r, row in enumerate(matrix)
    ]

    for col in range(n):
        pivot = next((r for r in range(col, n) if work[r][col]), None)
        if pivot is None:
            raise GreenfieldReconstructionError("Matrix is singular")
        work[col], work[pivot] = work[pivot], work[col]

        scale = gf_div(1, work[col][col])
        work[col] = [gf_mul(v, scale) for v in work[col]]

        for r in range(n):
            factor = work[r][col]
            if r != col and factor:
                work[r] = [v ^ gf_mul(factor, p) for v, p in zip(work[r], work[col])]

    return [row[n:] for row in work]


def validate_shard_counts(data_shards: int, parity_shards: int) -> None:
    """
    Check that a (data, parity) pair can be encoded.

    Raises:
        GreenfieldInvalidConfigError: If data_shards < 1, parity_shards < 0 or
            the total exceeds MAX_TOTAL_SHARDS
    """
    if data_shards < 1:
        raise GreenfieldInvalidConfigError(
            f"Invalid redundancy parameters: data shards must be at least 1, got {data_shards}"
        )
    if parity_shards < 0:
        raise GreenfieldInvalidConfigError(
            f"Invalid redundancy parameters: parity shards cannot be negative, got {parity_shards}"
        )
    if data_shards + parity_shards > MAX_TOTAL_SHARDS:
        raise GreenfieldInvalidConfigError(
            f"Invalid redundancy parameters: {data_shards} + {parity_shards} shards "
            f"exceeds the maximum of {MAX_TOTAL_SHARDS}"
        )


@lru_cache(maxsize=64)
def generator_matrix(data_shards: int, parity_shards: int) -> Matrix:
    """
    Build the systematic encoding matrix for a (data, parity) pair.

    Returns:
        Matrix: (data_shards + parity_shards) rows of data_shards coefficients.
            The first data_shards rows form the identity matrix.
    """
    validate_shard_counts(data_shards, parity_shards)
    total = data_shards + parity_shards

    vandermonde = [[gf_exp(r, c) for c in range(data_shards)] for r in range(total)]
    top_inverse = _mat_invert(vandermonde[:data_shards])
    matrix = _mat_mul(vandermonde, top_inverse)

    logger.debug(
        f"Built {GENERATOR_MATRIX_VERSION} generator matrix for {data_shards}+{parity_shards}"
    )
    return tuple(tuple(row) for row in matrix)


def _combine(coefficients: Sequence[int], pieces: Sequence[bytes], length: int) -> bytes:
    """Sum of coefficient * piece over the field, byte by byte."""
    acc = 0
    for coef, piece in zip(coefficients, pieces):
        if coef == 0:
            continue
        if coef != 1:
            piece = piece.translate(_MUL_TABLES[coef])
        acc ^= int.from_bytes(piece, "big")
    return acc.to_bytes(length, "big")


def piece_size(segment_length: int, data_shards: int) -> int:
    """Length of every piece produced for a segment of segment_length bytes."""
    return -(-segment_length // data_shards)


def split_segment(segment: BytesLike, data_shards: int) -> List[bytes]:
    """
    Split a segment into data_shards equal contiguous slices.

    The segment is padded with trailing zero bytes up to a multiple of
    data_shards.
    """
    segment = bytes(segment)
    size = piece_size(len(segment), data_shards)
    padded = segment + b"\x00" * (size * data_shards - len(segment))
    return [padded[i * size : (i + 1) * size] for i in range(data_shards)]


class ReedSolomonCodec:
    """Reed-Solomon encoder/decoder for a fixed (data, parity) pair."""

    def __init__(self, data_shards: int, parity_shards: int):
        self.data_shards = data_shards
        self.parity_shards = parity_shards
        self.matrix = generator_matrix(data_shards, parity_shards)

    @property
    def total_shards(self) -> int:
        return self.data_shards + self.parity_shards

    def encode(self, segment: BytesLike) -> List[bytes]:
        """
        Encode one segment into data and parity pieces.

        Args:
            segment: The segment bytes

        Returns:
            List[bytes]: total_shards pieces, each of
                ceil(len(segment) / data_shards) bytes. Pieces 0..data_shards-1
                are the data pieces, the rest are parity.
        """
        if self.data_shards == 1:
            # Every generator row is [1]: each piece is the segment itself
            return [bytes(segment)] * self.total_shards

        data_pieces = split_segment(segment, self.data_shards)
        size = len(data_pieces[0])
        parity_pieces = [
            _combine(self.matrix[self.data_shards + i], data_pieces, size)
            for i in range(self.parity_shards)
        ]
        return data_pieces + parity_pieces

    def reconstruct(self, pieces: Mapping[int, BytesLike], segment_length: int) -> bytes:
        """
        Rebuild a segment from any data_shards of its pieces.

        Args:
            pieces: Mapping of shard index to piece bytes
            segment_length: Length of the original segment (to strip padding)

        Returns:
            bytes: The original segment

        Raises:
            GreenfieldReconstructionError: If there are not enough pieces, an
                index is out of range or the piece lengths don't match
        """
        for index in pieces:
            if not 0 <= index < self.total_shards:
                raise GreenfieldReconstructionError(
                    f"Shard index {index} out of range for {self.total_shards} shards"
                )

        if len(pieces) < self.data_shards:
            raise GreenfieldReconstructionError(
                f"Not enough pieces to reconstruct: have {len(pieces)}, need {self.data_shards}"
            )

        expected_size = piece_size(segment_length, self.data_shards)
        chosen = sorted(pieces)[: self.data_shards]
        chosen_pieces = [bytes(pieces[i]) for i in chosen]
        for index, piece in zip(chosen, chosen_pieces):
            if len(piece) != expected_size:
                raise GreenfieldReconstructionError(
                    f"Piece {index} has {len(piece)} bytes, expected {expected_size}"
                )

        if chosen == list(range(self.data_shards)):
            data_pieces = chosen_pieces
        else:
            decode_matrix = _mat_invert([self.matrix[i] for i in chosen])
            data_pieces = [
                _combine(row, chosen_pieces, expected_size) for row in decode_matrix
            ]

        return b"".join(data_pieces)[:segment_length]


def encode_segment(segment: BytesLike, data_shards: int, parity_shards: int) -> List[bytes]:
    """Encode a segment with the erasure code for (data_shards, parity_shards)."""
    return ReedSolomonCodec(data_shards, parity_shards).encode(segment)


def reconstruct_segment(
    pieces: Mapping[int, BytesLike],
    data_shards: int,
    parity_shards: int,
    segment_length: int,
) -> bytes:
    """Rebuild a segment from any data_shards of its (index -> piece) pieces."""
    return ReedSolomonCodec(data_shards, parity_shards).reconstruct(pieces, segment_length)
