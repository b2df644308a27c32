from __future__ import annotations


class WikiRevisionReaderError(RuntimeError):
    """Base class for errors raised by wiki_revision_reader."""


class SnippetParseError(WikiRevisionReaderError):
    """Raised when a captured page or revision snippet cannot be parsed."""


class SourceOpenError(WikiRevisionReaderError):
    """Raised when a dump file cannot be opened as a byte source."""


class ConfigError(WikiRevisionReaderError, ValueError):
    """Raised when configuration values are invalid."""
