"""Open log sources by path, picking the right reader for the content."""

from __future__ import annotations

import os
import stat

from logsource.base import LogFile
from logsource.cached_stream import CachedStreamReader
from logsource.compressed import ZstdLogFile
from logsource.gzip_file import GzipLogFile
from logsource.mock import MockLogFile
from logsource.text_file import TextLogFile

__all__ = ["new_text_file", "new_mock_file"]


def _open_regular_file(path: str | os.PathLike) -> LogFile:
    """Open a regular file as zstd, gzip or plain text, in that order of preference."""
    try:
        return ZstdLogFile.from_path(path)
    except (OSError, ValueError):
        pass
    try:
        return GzipLogFile.from_path(path)
    except (OSError, ValueError):
        pass
    return TextLogFile.from_path(path)


def new_text_file(path: str | os.PathLike | None = None) -> LogFile:
    """Open the log at path, or stream from stdin when path is None.

    Regular files are opened with random access, decompressing zstd or gzip
    content when recognised. Anything else, such as a named pipe, is read as a
    stream and cached in memory. Raises OSError if the path cannot be opened.
    """
    if path is None:
        return CachedStreamReader(None)
    mode = os.stat(path).st_mode
    if stat.S_ISREG(mode):
        return _open_regular_file(path)
    return CachedStreamReader.from_path(path)


def new_mock_file(fill: str, size: int, chunk_size: int) -> MockLogFile:
    """A synthetic log of ``fill`` repeated to ``size`` bytes, read in chunks of ``chunk_size``."""
    return MockLogFile(fill, size, chunk_size)