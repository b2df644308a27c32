"""
wiki_revision_reader turns byte-range splits of MediaWiki XML dumps into
revision records that can be processed by independent workers.
"""

from __future__ import annotations

from .config import ReaderConfig, config_from_dict, config_from_yaml, load_config
from .errors import (
    ConfigError,
    SnippetParseError,
    SourceOpenError,
    WikiRevisionReaderError,
)
from .extract import parse_page_header, parse_revision
from .models import Contributor, Page, Revision
from .pipeline import iter_revisions, process_dump, process_split
from .scanner import RevisionScanner, ScanOutcome, scan_split
from .splits import FileSplit, plan_splits

__all__ = [
    "ConfigError",
    "Contributor",
    "FileSplit",
    "Page",
    "ReaderConfig",
    "Revision",
    "RevisionScanner",
    "ScanOutcome",
    "SnippetParseError",
    "SourceOpenError",
    "WikiRevisionReaderError",
    "config_from_dict",
    "config_from_yaml",
    "iter_revisions",
    "load_config",
    "parse_page_header",
    "parse_revision",
    "plan_splits",
    "process_dump",
    "process_split",
    "scan_split",
]

__version__ = "0.1.0"
