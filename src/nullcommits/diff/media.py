"""
Media file detection.

Images, video and audio assets are listed by name in the assembled diff
instead of being diffed. The decision is made from the file extension
alone so that it is cheap and deterministic; file content is never
inspected.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath


class FileKind(Enum):
    """Kind of a staged file as far as diff rendering is concerned."""

    MEDIA = "media"
    CODE = "code"


MEDIA_EXTENSIONS = frozenset(
    {
        # images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff", ".webp",
        ".ico", ".svg", ".heic", ".heif", ".avif", ".psd", ".raw",
        # video
        ".mp4", ".mov", ".avi", ".mkv", ".webm", ".wmv", ".flv", ".m4v",
        ".mpg", ".mpeg", ".3gp",
        # audio
        ".mp3", ".wav", ".flac", ".aac", ".ogg", ".oga", ".m4a", ".wma",
        ".aiff", ".opus", ".mid", ".midi",
    }
)


def classify_path(file_path: str) -> FileKind:
    """Return :attr:`FileKind.MEDIA` for media assets, :attr:`FileKind.CODE` otherwise.

    Git always reports paths with forward slashes, so the suffix is taken
    from a POSIX path. The comparison is case-insensitive.
    """
    suffix = PurePosixPath(file_path).suffix.lower()
    if suffix in MEDIA_EXTENSIONS:
        return FileKind.MEDIA
    return FileKind.CODE


def is_media(file_path: str) -> bool:
    return classify_path(file_path) is FileKind.MEDIA
