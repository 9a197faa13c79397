"""Utility helper functions for the server."""

import uuid
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional

from common.constants import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def infer_preview_type(original_name: str) -> Optional[str]:
    """
    Guess how a client can preview a file from its extension.

    Args:
        original_name: Filename as uploaded

    Returns:
        "image", "video", or None when no inline preview applies
    """
    if "." not in original_name:
        return None
    extension = original_name.rsplit(".", 1)[1].lower()
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension in VIDEO_EXTENSIONS:
        return "video"
    return None


def sanitize_filename(filename: Optional[str]) -> str:
    """
    Strip any client-side directory components from an uploaded filename.

    Returns:
        Bare filename, or an empty string if nothing usable remains
    """
    if not filename:
        return ""
    name = PureWindowsPath(PurePosixPath(filename).name).name
    return name.strip()


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header value for filename.
    """
    from urllib.parse import quote

    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f'attachment; filename="{ascii_name}"; filename*=UTF-8\'\'{quote(filename)}'
