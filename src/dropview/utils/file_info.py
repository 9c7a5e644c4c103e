"""File metadata, content types and size formatting."""

from __future__ import annotations

import mimetypes
import stat
from datetime import datetime, timezone
from pathlib import Path

UNKNOWN_TYPE = "application/octet-stream"

# Types the platform tables often miss or disagree on.
_EXTRA_TYPES: dict[str, str] = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".mkd": "text/markdown",
    ".mdx": "text/markdown",
    ".jsonl": "application/jsonl",
    ".geojson": "application/geo+json",
    ".webp": "image/webp",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".m4v": "video/mp4",
}

_TYPE_LABELS: dict[str, str] = {
    "application/pdf": "PDF document",
    "image/jpeg": "JPEG image",
    "image/png": "PNG image",
    "image/gif": "GIF image",
    "image/bmp": "BMP image",
    "image/webp": "WebP image",
    "text/markdown": "Markdown",
    "application/json": "JSON",
}


def human_size(size: int | float) -> str:
    """Convert bytes to human-readable string."""
    for unit in ("B", "K", "M", "G", "T"):
        if abs(size) < 1024:
            if unit == "B":
                return f"{int(size)}{unit}"
            return f"{size:.1f}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def guess_content_type(name: str) -> str:
    """Content-type hint from a file name."""
    ext = Path(name).suffix.lower()
    if ext in _EXTRA_TYPES:
        return _EXTRA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or UNKNOWN_TYPE


def type_label(content_type: str) -> str:
    """Short label for a content type ("PNG image", "text/x-python")."""
    return _TYPE_LABELS.get(content_type, content_type)


def format_mtime(timestamp: float) -> str:
    return (
        datetime.fromtimestamp(timestamp, tz=timezone.utc)
        .astimezone()
        .strftime("%Y-%m-%d %H:%M:%S")
    )


def file_metadata(path: Path) -> dict[str, str]:
    """Extract metadata dict for display."""
    info: dict[str, str] = {
        "Name": path.name,
        "Path": str(path.resolve()),
        "Type": guess_content_type(path.name),
    }
    try:
        st = path.stat()
    except OSError:
        info["error"] = "Cannot read file metadata"
        return info

    info.update({
        "Size": human_size(st.st_size),
        "Size (bytes)": f"{st.st_size:,}",
        "Modified": format_mtime(st.st_mtime),
        "Permissions": stat.filemode(st.st_mode),
    })
    return info
