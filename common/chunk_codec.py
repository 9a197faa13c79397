"""Splitting and joining of byte payloads into ordered, fixed-size chunks."""

import hashlib
from typing import BinaryIO, Iterable, Iterator, List


def _check_chunk_size(max_chunk_size: int) -> None:
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")


def chunk_count(total_size: int, max_chunk_size: int) -> int:
    """
    Number of chunks a payload of total_size bytes splits into.

    Args:
        total_size: Payload length in bytes
        max_chunk_size: Maximum chunk length in bytes

    Returns:
        ceil(total_size / max_chunk_size)
    """
    _check_chunk_size(max_chunk_size)
    return -(-total_size // max_chunk_size)


def split(data: bytes, max_chunk_size: int) -> List[bytes]:
    """
    Split data into consecutive chunks of max_chunk_size bytes.

    Every chunk except possibly the last has exactly max_chunk_size bytes.
    No padding is added, so an empty payload yields no chunks.

    Args:
        data: Payload to split
        max_chunk_size: Maximum chunk length in bytes

    Returns:
        Ordered list of chunks

    Raises:
        ValueError: If max_chunk_size is not positive
    """
    _check_chunk_size(max_chunk_size)
    view = memoryview(data)
    return [
        bytes(view[offset:offset + max_chunk_size])
        for offset in range(0, len(data), max_chunk_size)
    ]


def iter_split(stream: BinaryIO, max_chunk_size: int) -> Iterator[bytes]:
    """
    Stream chunks from a binary file object, holding one chunk in memory.

    Short reads are accumulated so that each yielded chunk is full unless
    the stream is exhausted; the output is identical to split() applied to
    the stream's full contents.

    Args:
        stream: Readable binary stream positioned at the payload start
        max_chunk_size: Maximum chunk length in bytes

    Yields:
        Chunks in stream order

    Raises:
        ValueError: If max_chunk_size is not positive
    """
    _check_chunk_size(max_chunk_size)

    while True:
        buffer = bytearray()
        while len(buffer) < max_chunk_size:
            piece = stream.read(max_chunk_size - len(buffer))
            if not piece:
                break
            buffer.extend(piece)

        if not buffer:
            return

        yield bytes(buffer)

        if len(buffer) < max_chunk_size:
            return


def join(chunks: Iterable[bytes]) -> bytes:
    """
    Concatenate chunks in the given order, without framing or padding.
    """
    return b"".join(chunks)


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def verify_checksum(data: bytes, expected: str) -> bool:
    return compute_checksum(data) == expected
