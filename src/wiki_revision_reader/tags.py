from __future__ import annotations

from typing import Iterable, Sequence, Tuple

PAGE_START = b"<page>"
PAGE_END = b"</page>"
REVISION_START = b"<revision>"
REVISION_END = b"</revision>"

# Searched together while inside a page; index order is the reporting order.
REVISION_OR_PAGE_END: Tuple[bytes, ...] = (REVISION_START, PAGE_END)
REVISION_INDEX = 0
PAGE_END_INDEX = 1

NO_MATCH = -1


class MatchProgress:
    """Per-search progress counters for a fixed set of byte patterns.

    A new instance is created for every search so no state leaks between
    unrelated searches. A mismatch resets the counter to zero and the byte
    that broke the match is not re-tested, so ``<<page>`` does not match. That
    is exact for patterns that do not overlap themselves (true of every
    framing tag), since a tag never follows a bare `<` in well-formed XML.
    """

    __slots__ = ("patterns", "counts")

    def __init__(self, patterns: Sequence[bytes]) -> None:
        if not patterns:
            raise ValueError("At least one pattern is required.")
        if any(not pattern for pattern in patterns):
            raise ValueError("Patterns must be non-empty byte strings.")
        self.patterns = tuple(patterns)
        self.counts = [0] * len(self.patterns)

    @property
    def in_progress(self) -> bool:
        """True while any pattern has matched a proper prefix."""
        return any(self.counts)

    def advance(self, byte: int) -> int:
        """Consume one byte and return the completed pattern index or NO_MATCH."""
        counts = self.counts
        for index, pattern in enumerate(self.patterns):
            count = counts[index]
            if byte == pattern[count]:
                count += 1
                if count == len(pattern):
                    counts[index] = 0
                    return index
            else:
                count = 0
            counts[index] = count
        return NO_MATCH


def find_first_match(patterns: Sequence[bytes], data: Iterable[int]) -> Tuple[int, int]:
    """Return (pattern index, bytes consumed) for the first completed pattern.

    Returns (NO_MATCH, bytes consumed) when the data runs out first.
    """
    progress = MatchProgress(patterns)
    consumed = 0
    for byte in data:
        consumed += 1
        matched = progress.advance(byte)
        if matched != NO_MATCH:
            return matched, consumed
    return NO_MATCH, consumed
