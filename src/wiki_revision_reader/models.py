from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .render import render_plain_text


@dataclass(frozen=True, slots=True)
class Page:
    """Header fields of a wiki page, shared by every revision of that page."""

    page_id: str | None = None
    title: str | None = None
    namespace: str | None = None
    restrictions: str | None = None
    redirects_to: str | None = None


@dataclass(frozen=True, slots=True)
class Contributor:
    """Author of a revision: a registered editor or an anonymous IP."""

    username: str | None = None
    user_id: str | None = None
    ip: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.ip is not None


@dataclass(slots=True)
class Revision:
    """One historical version of a page."""

    page: Page | None = None
    revision_id: str | None = None
    parent_revision_id: str | None = None
    timestamp: str | None = None
    contributor: Contributor | None = None
    comment: str | None = None
    minor: bool = False
    sha1: str | None = None
    content_model: str | None = None
    content_format: str | None = None
    raw_markup: str = ""
    # -1 when the dump does not declare a byte length for the body.
    declared_content_length: int = -1
    is_redirect: bool = False
    is_stub: bool = False
    is_metadata_only: bool = False
    text_deleted: bool = False
    contributor_deleted: bool = False
    comment_deleted: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.raw_markup

    @property
    def key(self) -> str:
        """Record key: page id and revision id joined by an underscore."""
        page_id = self.page.page_id if self.page is not None else None
        return f"{page_id}_{self.revision_id}"

    def rendered_text(self) -> str:
        """Return the page title followed by the body rendered as plain text."""
        title = self.page.title if self.page is not None else None
        return render_plain_text(title, self.raw_markup)

    def to_dict(self, include_text: bool = False) -> dict[str, Any]:
        """Flatten the revision and its page into a JSON-serializable mapping."""
        page = self.page or Page()
        contributor = self.contributor or Contributor()
        payload: dict[str, Any] = {
            "key": self.key,
            "page_id": page.page_id,
            "title": page.title,
            "namespace": page.namespace,
            "restrictions": page.restrictions,
            "redirects_to": page.redirects_to,
            "revision_id": self.revision_id,
            "parent_revision_id": self.parent_revision_id,
            "timestamp": self.timestamp,
            "username": contributor.username,
            "user_id": contributor.user_id,
            "ip": contributor.ip,
            "comment": self.comment,
            "minor": self.minor,
            "sha1": self.sha1,
            "content_model": self.content_model,
            "content_format": self.content_format,
            "declared_content_length": self.declared_content_length,
            "is_redirect": self.is_redirect,
            "is_stub": self.is_stub,
            "is_metadata_only": self.is_metadata_only,
            "text_deleted": self.text_deleted,
            "contributor_deleted": self.contributor_deleted,
            "comment_deleted": self.comment_deleted,
            "raw_markup": self.raw_markup,
        }
        if include_text:
            payload["text"] = self.rendered_text()
        return payload
