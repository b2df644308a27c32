from __future__ import annotations

import bz2
import gzip
import logging
import lzma
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable

from .errors import SourceOpenError

LOGGER = logging.getLogger(__name__)

_COMPRESSED_OPENERS: dict[str, Callable[[Path], IO[bytes]]] = {
    ".bz2": lambda path: bz2.open(path, "rb"),
    ".gz": lambda path: gzip.open(path, "rb"),
    ".xz": lambda path: lzma.open(path, "rb"),
    ".lzma": lambda path: lzma.open(path, "rb"),
}


@dataclass(slots=True)
class ByteSource:
    """A binary stream over a dump file.

    Compressed sources always start at byte zero of the decompressed data and
    cannot seek cheaply; plain sources are seekable.
    """

    stream: IO[bytes]
    compressed: bool
    path: str

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


SourceFactory = Callable[[str], ByteSource]


def is_compressed_path(path: str | Path) -> bool:
    """Return True when the file suffix names a supported compression codec."""
    return Path(path).suffix.lower() in _COMPRESSED_OPENERS


def open_source(path: str | Path) -> ByteSource:
    """Open ``path`` as a ByteSource, decompressing by suffix when needed."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceOpenError(f"Dump file not found: {file_path}")
    opener = _COMPRESSED_OPENERS.get(file_path.suffix.lower())
    try:
        if opener is not None:
            LOGGER.info("Reading compressed file %s", file_path)
            return ByteSource(opener(file_path), compressed=True, path=str(file_path))
        LOGGER.info("Reading uncompressed file %s", file_path)
        return ByteSource(file_path.open("rb"), compressed=False, path=str(file_path))
    except OSError as exc:
        raise SourceOpenError(f"Unable to open dump file {file_path}: {exc}") from exc
