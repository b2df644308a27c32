from __future__ import annotations

import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Callable, Dict, Type, TypeVar

from .errors import SnippetParseError
from .models import Contributor, Page, Revision

REDIRECT_MARKER = "#redirect"
STUB_MARKER = "stub}}"
DELETED = "deleted"

_FieldT = TypeVar("_FieldT", bound=Enum)


class PageField(Enum):
    TITLE = "title"
    ID = "id"
    NAMESPACE = "ns"
    RESTRICTIONS = "restrictions"
    REDIRECT = "redirect"


class RevisionField(Enum):
    ID = "id"
    PARENT_ID = "parentid"
    TIMESTAMP = "timestamp"
    CONTRIBUTOR = "contributor"
    MINOR = "minor"
    COMMENT = "comment"
    TEXT = "text"
    SHA1 = "sha1"
    MODEL = "model"
    FORMAT = "format"
    # Recognized but carries nothing the Revision keeps.
    ORIGIN = "origin"


class ContributorField(Enum):
    USERNAME = "username"
    ID = "id"
    IP = "ip"


def parse_page_header(snippet: str | bytes) -> Page:
    """Parse a ``<page>`` snippet holding only header fields into a Page."""
    root = _parse_root(snippet, "page")
    values: Dict[str, Any] = {}
    for child in root:
        field = _lookup(PageField, child.tag)
        if field is None:
            continue
        if field is PageField.TITLE:
            values["title"] = _text(child)
        elif field is PageField.ID:
            values["page_id"] = _text(child)
        elif field is PageField.NAMESPACE:
            values["namespace"] = _text(child)
        elif field is PageField.RESTRICTIONS:
            values["restrictions"] = _text(child)
        elif field is PageField.REDIRECT:
            values["redirects_to"] = child.attrib.get("title")
    return Page(**values)


def parse_revision(snippet: str | bytes, page: Page | None) -> Revision:
    """Parse a ``<revision>`` snippet into a Revision attached to ``page``."""
    root = _parse_root(snippet, "revision")
    revision = Revision(page=page)
    for child in root:
        field = _lookup(RevisionField, child.tag)
        if field is None:
            continue
        _REVISION_HANDLERS.get(field, _ignore)(revision, child)
    return revision


def parse_contributor(element: ET.Element) -> Contributor | None:
    """Return the contributor described by a ``<contributor>`` element."""
    values: Dict[str, str] = {}
    for child in element:
        field = _lookup(ContributorField, child.tag)
        if field is None:
            continue
        if field is ContributorField.USERNAME:
            values["username"] = _text(child)
        elif field is ContributorField.ID:
            values["user_id"] = _text(child)
        elif field is ContributorField.IP:
            values["ip"] = _text(child)
    if "ip" in values:
        return Contributor(ip=values["ip"])
    if not values:
        return None
    return Contributor(username=values.get("username"), user_id=values.get("user_id"))


def _read_id(revision: Revision, element: ET.Element) -> None:
    revision.revision_id = _text(element)


def _read_parent_id(revision: Revision, element: ET.Element) -> None:
    revision.parent_revision_id = _text(element)


def _read_timestamp(revision: Revision, element: ET.Element) -> None:
    revision.timestamp = _text(element)


def _read_contributor(revision: Revision, element: ET.Element) -> None:
    revision.contributor_deleted = element.attrib.get(DELETED) == DELETED
    revision.contributor = parse_contributor(element)


def _read_minor(revision: Revision, element: ET.Element) -> None:
    revision.minor = True


def _read_comment(revision: Revision, element: ET.Element) -> None:
    revision.comment_deleted = element.attrib.get(DELETED) == DELETED
    revision.comment = _text(element)


def _read_text(revision: Revision, element: ET.Element) -> None:
    markup = element.text or ""
    revision.raw_markup = markup
    revision.text_deleted = element.attrib.get(DELETED) == DELETED
    declared = element.attrib.get("bytes")
    if declared is not None:
        try:
            revision.declared_content_length = int(declared)
        except ValueError as exc:
            raise SnippetParseError(
                f"Non-numeric bytes attribute on <text>: {declared!r}"
            ) from exc
    revision.is_metadata_only = revision.declared_content_length > 0 and not markup
    revision.is_redirect = markup[: len(REDIRECT_MARKER)].lower() == REDIRECT_MARKER
    revision.is_stub = STUB_MARKER in markup


def _read_sha1(revision: Revision, element: ET.Element) -> None:
    revision.sha1 = _text(element)


def _read_model(revision: Revision, element: ET.Element) -> None:
    revision.content_model = _text(element)


def _read_format(revision: Revision, element: ET.Element) -> None:
    revision.content_format = _text(element)


def _ignore(revision: Revision, element: ET.Element) -> None:
    return None


_REVISION_HANDLERS: Dict[RevisionField, Callable[[Revision, ET.Element], None]] = {
    RevisionField.ID: _read_id,
    RevisionField.PARENT_ID: _read_parent_id,
    RevisionField.TIMESTAMP: _read_timestamp,
    RevisionField.CONTRIBUTOR: _read_contributor,
    RevisionField.MINOR: _read_minor,
    RevisionField.COMMENT: _read_comment,
    RevisionField.TEXT: _read_text,
    RevisionField.SHA1: _read_sha1,
    RevisionField.MODEL: _read_model,
    RevisionField.FORMAT: _read_format,
}


def _parse_root(snippet: str | bytes, expected_tag: str) -> ET.Element:
    try:
        root = ET.fromstring(snippet)
    except ET.ParseError as exc:
        raise SnippetParseError(f"Unable to parse <{expected_tag}> snippet: {exc}") from exc
    if _local_name(root.tag) != expected_tag:
        raise SnippetParseError(
            f"Expected <{expected_tag}> snippet, found <{_local_name(root.tag)}>"
        )
    return root


def _lookup(kind: Type[_FieldT], tag: str) -> _FieldT | None:
    try:
        return kind(_local_name(tag))
    except ValueError:
        return None


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[-1]


def _text(element: ET.Element) -> str:
    return element.text or ""
