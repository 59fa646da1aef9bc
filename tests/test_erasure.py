"""
Tests for the Reed-Solomon erasure coding module.

Covers field arithmetic, the pinned generator matrix, segment splitting and
reconstruction from every subset of data_shards pieces.
"""

import itertools

import pytest

from greenfield_sdk.erasure_coding import (
    GENERATOR_MATRIX_VERSION,
    ReedSolomonCodec,
    encode_segment,
    generator_matrix,
    gf_div,
    gf_exp,
    gf_mul,
    reconstruct_segment,
    split_segment,
    validate_shard_counts,
)
from greenfield_sdk.errors import (
    GreenfieldInvalidConfigError,
    GreenfieldReconstructionError,
)

from tests.conftest import make_payload


class TestFieldArithmetic:
    def test_multiplication_reduces_by_field_polynomial(self):
        """x * 0x80 overflows and is reduced by 0x11D."""
        assert gf_mul(2, 0x80) == 0x1D
        assert gf_mul(3, 0x80) == 0x9D

    def test_multiplication_by_zero_and_one(self):
        for value in (0, 1, 0x53, 0xFF):
            assert gf_mul(value, 0) == 0
            assert gf_mul(value, 1) == value

    def test_division_inverts_multiplication(self):
        for a in range(1, 256, 7):
            for b in range(1, 256, 11):
                assert gf_div(gf_mul(a, b), b) == a

    def test_division_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            gf_div(5, 0)

    def test_exponentiation(self):
        assert gf_exp(0, 0) == 1
        assert gf_exp(0, 3) == 0
        assert gf_exp(2, 8) == 0x1D
        assert gf_exp(7, 1) == 7


class TestGeneratorMatrix:
    def test_version_is_pinned(self):
        assert GENERATOR_MATRIX_VERSION == "vandermonde-gf256-v1"

    def test_two_plus_one_matrix(self):
        """Hand-derived: Vandermonde rows [1,0],[1,1],[1,2] times inverse of the top block."""
        assert generator_matrix(2, 1) == ((1, 0), (0, 1), (3, 2))

    @pytest.mark.parametrize("data_shards,parity_shards", [(1, 5), (4, 2), (6, 3), (16, 4)])
    def test_top_block_is_identity(self, data_shards, parity_shards):
        matrix = generator_matrix(data_shards, parity_shards)
        assert len(matrix) == data_shards + parity_shards
        for r in range(data_shards):
            assert matrix[r] == tuple(1 if c == r else 0 for c in range(data_shards))

    def test_single_data_shard_rows_are_all_ones(self):
        assert generator_matrix(1, 3) == ((1,), (1,), (1,), (1,))

    @pytest.mark.parametrize(
        "data_shards,parity_shards", [(0, 2), (-1, 1), (2, -1), (200, 57)]
    )
    def test_invalid_shard_counts(self, data_shards, parity_shards):
        with pytest.raises(GreenfieldInvalidConfigError):
            generator_matrix(data_shards, parity_shards)

    def test_maximum_total_shards(self):
        validate_shard_counts(250, 6)
        with pytest.raises(GreenfieldInvalidConfigError, match="exceeds the maximum"):
            validate_shard_counts(250, 7)


class TestEncoding:
    def test_known_parity_bytes(self):
        assert encode_segment(b"\x01\x00", 2, 1) == [b"\x01", b"\x00", b"\x03"]
        assert encode_segment(b"\x00\x01", 2, 1) == [b"\x00", b"\x01", b"\x02"]
        assert encode_segment(b"\x80\x00", 2, 1) == [b"\x80", b"\x00", b"\x9d"]

    def test_split_pads_with_zero_bytes(self):
        assert split_segment(b"abcde", 4) == [b"ab", b"cd", b"e\x00", b"\x00\x00"]

    def test_piece_lengths(self):
        pieces = encode_segment(make_payload(1001), 4, 2)
        assert len(pieces) == 6
        assert all(len(piece) == 251 for piece in pieces)

    def test_data_pieces_are_contiguous_slices(self):
        segment = make_payload(1024)
        pieces = encode_segment(segment, 4, 2)
        assert b"".join(pieces[:4]) == segment

    def test_zero_parity_returns_data_pieces_only(self):
        segment = make_payload(100)
        pieces = encode_segment(segment, 4, 0)
        assert len(pieces) == 4
        assert pieces == split_segment(segment, 4)

    def test_single_data_shard_copies_segment(self):
        segment = make_payload(333)
        pieces = encode_segment(segment, 1, 3)
        assert pieces == [segment] * 4

    def test_encoding_is_linear(self):
        """Parity of a XOR b equals parity(a) XOR parity(b)."""
        a = make_payload(64, seed=1)
        b = make_payload(64, seed=2)
        combined = bytes(x ^ y for x, y in zip(a, b))

        parity_a = encode_segment(a, 4, 3)[4:]
        parity_b = encode_segment(b, 4, 3)[4:]
        parity_combined = encode_segment(combined, 4, 3)[4:]

        for pa, pb, pc in zip(parity_a, parity_b, parity_combined):
            assert bytes(x ^ y for x, y in zip(pa, pb)) == pc

    def test_accepts_bytearray_and_memoryview(self):
        segment = make_payload(40)
        expected = encode_segment(segment, 4, 2)
        assert encode_segment(bytearray(segment), 4, 2) == expected
        assert encode_segment(memoryview(segment), 4, 2) == expected


class TestReconstruction:
    @pytest.mark.parametrize("data_shards,parity_shards", [(2, 1), (4, 2), (3, 3)])
    def test_any_data_shards_pieces_rebuild_segment(self, data_shards, parity_shards):
        segment = make_payload(517)
        codec = ReedSolomonCodec(data_shards, parity_shards)
        pieces = codec.encode(segment)

        for subset in itertools.combinations(range(codec.total_shards), data_shards):
            available = {index: pieces[index] for index in subset}
            assert codec.reconstruct(available, len(segment)) == segment

    def test_extra_pieces_are_ignored(self):
        segment = make_payload(100)
        pieces = encode_segment(segment, 4, 2)
        available = dict(enumerate(pieces))
        assert reconstruct_segment(available, 4, 2, len(segment)) == segment

    def test_replicated_piece_rebuilds_segment(self):
        segment = make_payload(77)
        pieces = encode_segment(segment, 1, 2)
        assert reconstruct_segment({2: pieces[2]}, 1, 2, len(segment)) == segment

    def test_not_enough_pieces(self):
        pieces = encode_segment(make_payload(100), 4, 2)
        with pytest.raises(GreenfieldReconstructionError, match="Not enough pieces"):
            reconstruct_segment({0: pieces[0], 5: pieces[5]}, 4, 2, 100)

    def test_index_out_of_range(self):
        pieces = encode_segment(make_payload(100), 4, 2)
        available = {i: pieces[i] for i in range(4)}
        available[6] = pieces[0]
        with pytest.raises(GreenfieldReconstructionError, match="out of range"):
            reconstruct_segment(available, 4, 2, 100)

    def test_piece_length_mismatch(self):
        pieces = encode_segment(make_payload(100), 4, 2)
        available = {i: pieces[i] for i in range(1, 5)}
        available[1] = available[1][:-1]
        with pytest.raises(GreenfieldReconstructionError, match="expected 25"):
            reconstruct_segment(available, 4, 2, 100)

    def test_reconstruction_error_is_invalid_config(self):
        assert issubclass(GreenfieldReconstructionError, GreenfieldInvalidConfigError)
