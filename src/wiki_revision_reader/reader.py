from __future__ import annotations

import logging
import sys
from typing import Sequence

from .sources import ByteSource, SourceFactory, open_source
from .splits import FileSplit
from .tags import NO_MATCH, MatchProgress

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
UNBOUNDED_END = sys.maxsize


class BoundarySafeReader:
    """Forward-only byte reader over one split of a dump file.

    ``position`` is counted by hand because decompressing streams cannot
    report file offsets. For plain files it is the absolute file offset; for
    compressed files it is the offset into the decompressed data and ``end``
    is unbounded.
    """

    def __init__(
        self,
        source: ByteSource,
        start: int,
        end: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}.")
        self.source = source
        self.start = start
        self.end = end
        self.position = start
        self.buffer = bytearray()
        self.chunk_size = chunk_size
        self._chunk = b""
        self._offset = 0
        self._closed = False

    @classmethod
    def open(
        cls,
        split: FileSplit,
        source_factory: SourceFactory = open_source,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "BoundarySafeReader":
        """Open the byte source for ``split`` positioned at the split start."""
        source = source_factory(split.path)
        if source.compressed:
            if split.start != 0:
                LOGGER.warning(
                    "Compressed split of %s starts at %d; decompressing from byte 0 "
                    "and scanning the whole stream",
                    split.path,
                    split.start,
                )
            return cls(source, start=0, end=UNBOUNDED_END, chunk_size=chunk_size)
        try:
            source.stream.seek(split.start)
        except Exception:
            source.close()
            raise
        return cls(source, start=split.start, end=split.end, chunk_size=chunk_size)

    @property
    def progress(self) -> float:
        """Fraction of the window consumed; exceeds 1.0 while draining past the end."""
        if self.end <= self.start:
            return 1.0
        return (self.position - self.start) / (self.end - self.start)

    def reset_buffer(self, seed: bytes = b"") -> None:
        """Clear the accumulation buffer, optionally seeding it."""
        self.buffer.clear()
        self.buffer += seed

    def read_until_match(
        self,
        patterns: Sequence[bytes],
        *,
        accumulate: bool,
        bounded: bool,
    ) -> int:
        """Read until one of ``patterns`` completes and return its index.

        Consumed bytes are appended to ``buffer`` when ``accumulate`` is set.
        When ``bounded`` is set the search gives up once the window end has
        been reached and no pattern is partially matched, so a tag straddling
        the end still completes. Returns NO_MATCH on exhaustion or end of
        stream.
        """
        progress = MatchProgress(patterns)
        buffer = self.buffer
        while True:
            if bounded and self.position >= self.end and not progress.in_progress:
                return NO_MATCH
            if self._offset >= len(self._chunk) and not self._fill():
                return NO_MATCH
            byte = self._chunk[self._offset]
            self._offset += 1
            self.position += 1
            if accumulate:
                buffer.append(byte)
            matched = progress.advance(byte)
            if matched != NO_MATCH:
                return matched

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self.source.close()

    def __enter__(self) -> "BoundarySafeReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def _fill(self) -> bool:
        self._chunk = self.source.stream.read(self.chunk_size)
        self._offset = 0
        return bool(self._chunk)
