# logsource

Seekable, random-access readers for log data, whatever the log is stored in:

- plain text files: `logsource.text_file.TextLogFile`
- zstd-compressed files: `logsource.compressed.ZstdLogFile` (built on `CompressedFile`).
  Files made of several frames that record their decompressed size can be seeked by
  decoding only the frame that holds the target offset.
- gzip-compressed files: `logsource.gzip_file.GzipLogFile`, decompressed as a stream in a
  background thread and kept in memory
- pipes and standard input: `logsource.cached_stream.CachedStreamReader`, which keeps
  everything received in memory so earlier offsets can be revisited
- in-memory data: `logsource.cursor.CursorLogFile`, and synthetic repeating content for
  tests: `logsource.mock.MockLogFile`

Every reader implements the interface of `logsource.base.LogFile`: `len()`, `read`,
`seek`, `tell`, `fill_buf`/`consume`, `poll` and `is_open` for live sources,
`wait_for_end`, and the line helpers `read_until`, `read_line_at`, `find_lines` and `chunk`.

## Installation

```
pip install logsource
```

## Opening a log

`logsource.opener.new_text_file` picks a reader for what it is given. A regular file is
tried as zstd, then gzip, and otherwise read as text. Anything else, such as a named
pipe, is read as a stream. With no path it reads standard input.

```python
from logsource.opener import new_text_file

log = new_text_file("app.log.zst")
print(log.read_line_at(0))          # first line, newline kept, invalid UTF-8 replaced
offsets = log.find_lines(0, 4096)   # 0, then the offset after each LF up to the range end
start, end = log.chunk(100_000)     # a 1 MiB window around offset 100000
```

While a zstd file still has frames of unknown size, `len()` is an estimate and seeking
relative to the end raises `OSError`.

## Live streams

```python
from logsource.cached_stream import CachedStreamReader

stream = CachedStreamReader.from_path("/tmp/my-fifo")
stream.wait_for_end()               # block until the writer closes the pipe
print(len(stream), "bytes received")
```

Reads never wait long: reading past the data received so far returns a short read.
`poll()` collects whatever has arrived and returns the new length.

## Search criteria

```python
from logsource.search import SearchType

match = SearchType.parse("ERROR|WARN")
skip_debug = SearchType.parse("!DEBUG")        # a leading "!" negates the pattern
match.matches("2024-01-01 ERROR disk full")    # True
SearchType.parse("").matches("anything")       # True: an empty search matches all
```

An invalid expression raises `re.error`. `logsource.search.trim_newline` strips one
trailing LF from a line before matching.

## Test data

```python
from logsource.cursor import CursorLogFile
from logsource.opener import new_mock_file

numbers = CursorLogFile.from_values(range(10))   # "0\n1\n...9\n"
log = new_mock_file("filler\n", 7 * 6000, 100)   # 6000 identical lines
```

## What it does not do

This package reads bytes and lines; it is not a log viewer. It has no command-line
tool, no screen, and no persistent line index: `SearchType` tests single lines, and
building an index of matching lines across a file is left to the caller.

## Running the tests

```
pip install -e ".[test]"
pytest
```