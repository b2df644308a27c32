from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

from wiki_revision_reader.scanner import scan_split
from wiki_revision_reader.sources import ByteSource
from wiki_revision_reader.splits import FileSplit

DATA_DIR = Path(__file__).parent / "data"
DUMP2 = DATA_DIR / "dump2.xml"

# Byte offsets of the framing tags in dump2.xml.
PAGE1_START = 2605
PAGE1_END = 3602
PAGE2_START = 3605


def collect(path: Path | str, start: int, length: int, **kwargs) -> list:
    """Scan one split and return its (key, revision) records."""
    return list(scan_split(FileSplit(path=str(path), start=start, length=length), **kwargs))


def collect_keys(path: Path | str, start: int, length: int, **kwargs) -> List[str]:
    return [key for key, _ in collect(path, start, length, **kwargs)]


def memory_factory(
    data: bytes, compressed: bool = False
) -> Tuple[Callable[[str], ByteSource], List[ByteSource]]:
    """Return a source factory over in-memory bytes plus the list of opened sources."""
    opened: List[ByteSource] = []

    def factory(path: str) -> ByteSource:
        source = ByteSource(io.BytesIO(data), compressed=compressed, path=path)
        opened.append(source)
        return source

    return factory, opened


def revision_xml(
    revision_id: int,
    parent_id: int | None = None,
    text: str = "",
    username: str = "Editor",
) -> str:
    parent = f"<parentid>{parent_id}</parentid>" if parent_id is not None else ""
    return (
        "    <revision>\n"
        f"      <id>{revision_id}</id>{parent}\n"
        "      <timestamp>2010-01-01T00:00:00Z</timestamp>\n"
        f"      <contributor><username>{username}</username><id>7</id></contributor>\n"
        "      <model>wikitext</model><format>text/x-wiki</format>\n"
        f'      <text xml:space="preserve" bytes="{len(text.encode("utf-8"))}">{text}</text>\n'
        "    </revision>\n"
    )


def build_dump(pages: Sequence[Tuple[int, str, Sequence[str]]]) -> bytes:
    """Build a dump from (page_id, title, revision bodies) tuples.

    Revision ids are ``page_id * 100 + n`` with parent links between siblings.
    """
    parts = ['<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.10/">\n']
    parts.append("  <siteinfo><sitename>Test</sitename></siteinfo>\n")
    for page_id, title, bodies in pages:
        parts.append(f"  <page>\n    <title>{title}</title>\n    <ns>0</ns>\n")
        parts.append(f"    <id>{page_id}</id>\n")
        parent: int | None = None
        for n, body in enumerate(bodies, start=1):
            revision_id = page_id * 100 + n
            parts.append(revision_xml(revision_id, parent, body))
            parent = revision_id
        parts.append("  </page>\n")
    parts.append("</mediawiki>\n")
    return "".join(parts).encode("utf-8")


def expected_keys(pages: Sequence[Tuple[int, str, Sequence[str]]]) -> List[str]:
    return [
        f"{page_id}_{page_id * 100 + n}"
        for page_id, _, bodies in pages
        for n in range(1, len(bodies) + 1)
    ]
