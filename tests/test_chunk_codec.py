"""Tests for chunk splitting and joining."""

import io
import os

import pytest

from common.chunk_codec import (
    chunk_count,
    compute_checksum,
    iter_split,
    join,
    split,
    verify_checksum,
)


class ShortReadStream(io.BytesIO):
    """BytesIO that never returns more than a few bytes per read."""

    def read(self, size=-1):
        return super().read(min(size, 3) if size and size > 0 else 3)


class TestSplit:
    @pytest.mark.parametrize("length", [0, 1, 9, 10, 11, 99, 100, 101])
    def test_join_of_split_restores_payload(self, length):
        data = os.urandom(length)
        assert join(split(data, 10)) == data

    def test_chunk_lengths(self):
        chunks = split(b"x" * 45, 19)
        assert [len(c) for c in chunks] == [19, 19, 7]

    def test_exact_multiple_has_no_short_tail(self):
        chunks = split(b"a" * 40, 20)
        assert [len(c) for c in chunks] == [20, 20]

    def test_single_chunk_when_smaller_than_max(self):
        assert split(b"hello", 100) == [b"hello"]

    def test_empty_payload_yields_no_chunks(self):
        assert split(b"", 10) == []

    def test_deterministic(self):
        data = os.urandom(1000)
        assert split(data, 64) == split(data, 64)

    @pytest.mark.parametrize("bad_size", [0, -1])
    def test_rejects_non_positive_chunk_size(self, bad_size):
        with pytest.raises(ValueError):
            split(b"data", bad_size)


class TestIterSplit:
    def test_matches_split(self):
        data = os.urandom(257)
        assert list(iter_split(io.BytesIO(data), 50)) == split(data, 50)

    def test_fills_chunks_across_short_reads(self):
        data = bytes(range(40))
        chunks = list(iter_split(ShortReadStream(data), 16))
        assert [len(c) for c in chunks] == [16, 16, 8]
        assert join(chunks) == data

    def test_empty_stream(self):
        assert list(iter_split(io.BytesIO(b""), 8)) == []

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            list(iter_split(io.BytesIO(b"data"), 0))


def test_join_empty():
    assert join([]) == b""


def test_join_preserves_given_order():
    assert join([b"c", b"a", b"b"]) == b"cab"


@pytest.mark.parametrize(
    "total,max_size,expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (45, 19, 3)],
)
def test_chunk_count(total, max_size, expected):
    assert chunk_count(total, max_size) == expected


def test_checksum_is_sha256_hex():
    assert compute_checksum(b"abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert verify_checksum(b"abc", compute_checksum(b"abc"))
    assert not verify_checksum(b"abd", compute_checksum(b"abc"))
