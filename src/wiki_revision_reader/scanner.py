"""
Split-aware scanner that turns a byte-range window of a MediaWiki XML dump
into ``(key, Revision)`` records.

A page belongs to the split whose ``[start, end)`` range holds the first byte
of its ``<page>`` tag. Once a page has started, the scanner keeps reading past
the split end until the page closes, so every revision is produced by exactly
one split of a covering, non-overlapping partition with no coordination
between workers.

Matching is done on raw bytes. The dumps escape ``<`` inside text, so the
framing tags cannot appear inside content; an unescaped lookalike would break
framing.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, Optional, Tuple

from .errors import SnippetParseError
from .extract import parse_page_header, parse_revision
from .models import Page, Revision
from .reader import DEFAULT_CHUNK_SIZE, BoundarySafeReader
from .sources import SourceFactory, open_source
from .splits import FileSplit
from .tags import (
    NO_MATCH,
    PAGE_END,
    PAGE_END_INDEX,
    PAGE_START,
    REVISION_END,
    REVISION_INDEX,
    REVISION_OR_PAGE_END,
    REVISION_START,
)

LOGGER = logging.getLogger(__name__)

Record = Tuple[str, Revision]


class ScanState(Enum):
    SEEKING_PAGE = "seeking_page"
    IN_PAGE = "in_page"


class ScanOutcome(Enum):
    """Why a scan stopped producing records."""

    RUNNING = "running"
    EXHAUSTED = "exhausted"
    PAGE_NOT_TERMINATED = "page_not_terminated"
    REVISION_NOT_TERMINATED = "revision_not_terminated"

    @property
    def is_failure(self) -> bool:
        return self in (
            ScanOutcome.PAGE_NOT_TERMINATED,
            ScanOutcome.REVISION_NOT_TERMINATED,
        )


class RevisionScanner:
    """Two-state machine producing revision records from one split."""

    def __init__(self, reader: BoundarySafeReader, path: str | None = None) -> None:
        self.reader = reader
        self.path = path if path is not None else reader.source.path
        self.state = ScanState.SEEKING_PAGE
        self.outcome = ScanOutcome.RUNNING
        self.pages_started = 0
        self.revisions_emitted = 0
        self.revisions_skipped = 0
        self._page: Page | None = None
        self._page_unusable = False
        self._page_start = -1

    @classmethod
    def open(
        cls,
        split: FileSplit,
        source_factory: SourceFactory = open_source,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "RevisionScanner":
        reader = BoundarySafeReader.open(split, source_factory, chunk_size)
        return cls(reader, path=split.path)

    @property
    def progress(self) -> float:
        return self.reader.progress

    def __iter__(self) -> Iterator[Record]:
        return self.records()

    def records(self) -> Iterator[Record]:
        """Yield every record of the split, closing the source when done."""
        try:
            while True:
                record = self.next_record()
                if record is None:
                    return
                yield record
        finally:
            self.close()

    def next_record(self) -> Optional[Record]:
        """Return the next ``(key, revision)`` pair or None when the scan is over."""
        if self.outcome is not ScanOutcome.RUNNING:
            return None
        reader = self.reader
        while True:
            if self.state is ScanState.SEEKING_PAGE:
                if not self._seek_page():
                    LOGGER.debug(
                        "No page start found within split of %s ending at %d",
                        self.path,
                        reader.end,
                    )
                    self.outcome = ScanOutcome.EXHAUSTED
                    return None

            matched = reader.read_until_match(
                REVISION_OR_PAGE_END, accumulate=True, bounded=False
            )
            if matched == PAGE_END_INDEX:
                # Only path back to the top of the loop.
                self._end_page()
                continue
            if matched != REVISION_INDEX:
                LOGGER.error(
                    "No end tag for page starting at position %d in file %s",
                    self._page_start,
                    self.path,
                )
                self.outcome = ScanOutcome.PAGE_NOT_TERMINATED
                return None

            if self._page is None and not self._page_unusable:
                self._read_page_header()

            revision_start = reader.position - len(REVISION_START)
            reader.reset_buffer(REVISION_START)
            if reader.read_until_match(
                (REVISION_END,), accumulate=True, bounded=False
            ) == NO_MATCH:
                LOGGER.error(
                    "No end tag for revision starting at position %d in file %s",
                    revision_start,
                    self.path,
                )
                self.outcome = ScanOutcome.REVISION_NOT_TERMINATED
                return None

            snippet = bytes(reader.buffer)
            reader.reset_buffer()
            revision = self._read_revision(snippet, revision_start)
            if revision is None:
                self.revisions_skipped += 1
                continue
            self.revisions_emitted += 1
            return revision.key, revision

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> "RevisionScanner":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def _seek_page(self) -> bool:
        reader = self.reader
        reader.reset_buffer()
        if reader.read_until_match((PAGE_START,), accumulate=False, bounded=True) == NO_MATCH:
            return False
        self._page_start = reader.position - len(PAGE_START)
        self.pages_started += 1
        self.state = ScanState.IN_PAGE
        LOGGER.debug("Page start is at %d", self._page_start)
        return True

    def _end_page(self) -> None:
        self.state = ScanState.SEEKING_PAGE
        self._page = None
        self._page_unusable = False

    def _read_page_header(self) -> None:
        header = bytes(self.reader.buffer[: -len(REVISION_START)])
        try:
            self._page = parse_page_header(PAGE_START + header + PAGE_END)
        except SnippetParseError as exc:
            LOGGER.error(
                "Error reading page header starting at position %d in file %s: %s",
                self._page_start,
                self.path,
                exc,
            )
            self._page_unusable = True

    def _read_revision(self, snippet: bytes, revision_start: int) -> Revision | None:
        if self._page_unusable:
            LOGGER.warning(
                "Skipping revision at position %d in file %s: page header at %d "
                "could not be read",
                revision_start,
                self.path,
                self._page_start,
            )
            return None
        try:
            return parse_revision(snippet, self._page)
        except SnippetParseError as exc:
            page_id = self._page.page_id if self._page is not None else None
            LOGGER.error(
                "Error reading revision at position %d in page %s of file %s: %s",
                revision_start,
                page_id,
                self.path,
                exc,
            )
            return None


def scan_split(
    split: FileSplit,
    source_factory: SourceFactory = open_source,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[Record]:
    """Yield every ``(key, revision)`` record owned by ``split``."""
    scanner = RevisionScanner.open(split, source_factory, chunk_size)
    yield from scanner.records()
