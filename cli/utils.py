"""Utility functions for CLI operations."""

import sys
from typing import BinaryIO

from cli.constants import GREEN, RESET


class ProgressReader:
    """Binary stream wrapper that reports read progress on stdout."""

    def __init__(self, stream: BinaryIO, total_size: int, label: str):
        self._stream = stream
        self.total_size = total_size
        self.label = label
        self._done = 0
        self._finished = False

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size if size > 0 else 65536)
        if chunk:
            self._done += len(chunk)
            show_progress(self.label, self._done, self.total_size)
        elif not self._finished:
            self._finished = True
            finish_progress()
        return chunk


def show_progress(label: str, done: int, total: int) -> None:
    """Rewrite the current stdout line with a progress report."""
    if total > 0:
        progress = (done / total) * 100
        sys.stdout.write(
            f"\r{label}: {format_file_size(done)} / {format_file_size(total)} ({GREEN}{progress:.1f}%{RESET})"
        )
    else:
        sys.stdout.write(f"\r{label}: {format_file_size(done)}")
    sys.stdout.flush()


def finish_progress() -> None:
    sys.stdout.write('\n')
    sys.stdout.flush()


def clear_progress() -> None:
    sys.stdout.write('\r' + ' ' * 100 + '\r')
    sys.stdout.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = size_bytes / 1024.0
    for unit in ['KiB', 'MiB', 'GiB', 'TiB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
