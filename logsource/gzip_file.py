"""Reader of gzip-compressed log files."""

from __future__ import annotations

import gzip
import os
from typing import BinaryIO

from logsource.cached_stream import CachedStreamReader

GZIP_MAGIC = b"\x1f\x8b"


class GzipLogFile(CachedStreamReader):
    """A gzip file decompressed as a stream and cached in memory."""

    @staticmethod
    def is_recognized(file: BinaryIO) -> bool:
        """True if the next bytes of file are the gzip magic number."""
        return file.read(len(GZIP_MAGIC)) == GZIP_MAGIC

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> GzipLogFile:
        """Open a gzip file; raise OSError if it does not look like one."""
        with open(path, "rb") as probe:
            if not cls.is_recognized(probe):
                raise OSError("Unrecognized file type")
        return cls._from_source(gzip.open(path, "rb"), owns_source=True)