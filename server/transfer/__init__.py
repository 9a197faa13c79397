"""Chunked transfer core: uploader, downloader and their outcome types."""

from server.transfer.downloader import TransferDownloader
from server.transfer.outcome import DownloadOutcome, TransferErrorKind, UploadOutcome
from server.transfer.uploader import TransferUploader

__all__ = [
    "TransferDownloader",
    "TransferUploader",
    "DownloadOutcome",
    "UploadOutcome",
    "TransferErrorKind",
]
