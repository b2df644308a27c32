from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .sources import is_compressed_path


@dataclass(frozen=True, slots=True)
class FileSplit:
    """A byte-range window ``[start, start + length)`` of one dump file."""

    path: str
    start: int
    length: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Split start must be non-negative, got {self.start}.")
        if self.length < 0:
            raise ValueError(f"Split length must be non-negative, got {self.length}.")

    @property
    def end(self) -> int:
        return self.start + self.length


def plan_splits(path: str | Path, split_size: int) -> List[FileSplit]:
    """Cover a file with ordered, non-overlapping splits of at most ``split_size`` bytes.

    Compressed files are never split: every reader has to decompress them from
    the first byte, so a single split spans the whole file.
    """
    if split_size <= 0:
        raise ValueError(f"split_size must be positive, got {split_size}.")
    file_path = Path(path)
    size = file_path.stat().st_size
    if size == 0:
        return []
    if is_compressed_path(file_path):
        return [FileSplit(path=str(file_path), start=0, length=size)]

    splits: List[FileSplit] = []
    start = 0
    while start < size:
        length = min(split_size, size - start)
        splits.append(FileSplit(path=str(file_path), start=start, length=length))
        start += length
    return splits
