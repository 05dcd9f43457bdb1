"""Seekable readers for text, zstd, gzip, in-memory and streamed log sources."""

__version__ = "0.1.0"