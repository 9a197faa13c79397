"""Project-wide constants (chunk thresholds, blob store limits, preview types)."""

MIB: int = 1024 * 1024

MAX_SINGLE_BLOB_SIZE_BYTES: int = 40 * MIB  # payloads above this are chunked
CHUNK_SIZE_BYTES: int = 19 * MIB  # below the backend's ~20 MiB per-call ceiling

DEFAULT_UPLOAD_CONCURRENCY: int = 3
DEFAULT_BLOB_STORE_TIMEOUT_SECONDS: float = 300.0

TELEGRAM_API_BASE: str = "https://api.telegram.org"

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif")
VIDEO_EXTENSIONS = ("mp4", "webm", "avi", "mov")
