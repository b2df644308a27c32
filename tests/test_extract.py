import pytest

from wiki_revision_reader.errors import SnippetParseError
from wiki_revision_reader.extract import parse_page_header, parse_revision
from wiki_revision_reader.models import Contributor, Page

PAGE_SNIPPET = """<page>
    <title>AccessibleComputing</title>
    <ns>0</ns>
    <id>10</id>
    <redirect title="Computer accessibility" />
    <unknown>ignored</unknown>
</page>"""

REVISION_SNIPPET = """<revision>
      <id>862220</id>
      <parentid>233192</parentid>
      <timestamp>2002-02-25T15:43:11Z</timestamp>
      <contributor>
        <username>Conversion script</username>
        <id>0</id>
      </contributor>
      <minor />
      <comment>Automated conversion</comment>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text xml:space="preserve" bytes="57">#REDIRECT [[Computer accessibility]] {{R from CamelCase}}</text>
      <sha1>i8pwco22fwt12yp12x29wc065ded2bh</sha1>
    </revision>"""


def test_parse_page_header_reads_known_fields():
    page = parse_page_header(PAGE_SNIPPET)
    assert page == Page(
        page_id="10",
        title="AccessibleComputing",
        namespace="0",
        restrictions=None,
        redirects_to="Computer accessibility",
    )


def test_parse_page_header_reads_restrictions():
    page = parse_page_header(
        b"<page><title>Main Page</title><ns>0</ns><id>15580374</id>"
        b"<restrictions>edit=sysop:move=sysop</restrictions></page>"
    )
    assert page.restrictions == "edit=sysop:move=sysop"
    assert page.redirects_to is None


def test_parse_revision_reads_all_fields():
    page = parse_page_header(PAGE_SNIPPET)
    revision = parse_revision(REVISION_SNIPPET, page)

    assert revision.page is page
    assert revision.revision_id == "862220"
    assert revision.parent_revision_id == "233192"
    assert revision.timestamp == "2002-02-25T15:43:11Z"
    assert revision.contributor == Contributor(username="Conversion script", user_id="0")
    assert not revision.contributor.is_anonymous
    assert revision.minor is True
    assert revision.comment == "Automated conversion"
    assert revision.content_model == "wikitext"
    assert revision.content_format == "text/x-wiki"
    assert revision.sha1 == "i8pwco22fwt12yp12x29wc065ded2bh"
    assert revision.raw_markup.startswith("#REDIRECT")
    assert revision.declared_content_length == 57
    assert revision.is_redirect
    assert not revision.is_stub
    assert not revision.is_metadata_only
    assert revision.key == "10_862220"


def test_anonymous_contributor_has_only_ip():
    revision = parse_revision(
        "<revision><id>19746</id><contributor><ip>140.232.153.45</ip></contributor>"
        "</revision>",
        None,
    )
    assert revision.contributor == Contributor(ip="140.232.153.45")
    assert revision.contributor.is_anonymous
    assert revision.contributor.username is None
    assert revision.contributor.user_id is None


def test_declared_length_with_empty_body_is_metadata_only():
    revision = parse_revision(
        '<revision><id>233192</id><text xml:space="preserve" bytes="124" /></revision>',
        None,
    )
    assert revision.is_metadata_only
    assert revision.declared_content_length == 124
    assert revision.raw_markup == ""
    assert revision.is_empty


def test_zero_declared_length_is_not_metadata_only():
    revision = parse_revision('<revision><text bytes="0" /></revision>', None)
    assert revision.declared_content_length == 0
    assert not revision.is_metadata_only


def test_missing_fields_default_to_empty_values():
    revision = parse_revision("<revision><comment>only a comment</comment></revision>", None)
    assert revision.revision_id is None
    assert revision.timestamp is None
    assert revision.contributor is None
    assert revision.declared_content_length == -1
    assert revision.raw_markup == ""
    assert not revision.minor
    assert not revision.is_metadata_only
    assert revision.key == "None_None"


def test_redirect_marker_is_case_insensitive_prefix():
    lower = parse_revision("<revision><text>#redirect [[Target]]</text></revision>", None)
    mixed = parse_revision("<revision><text>#Redirect [[Target]]</text></revision>", None)
    inner = parse_revision("<revision><text>See #REDIRECT</text></revision>", None)
    assert lower.is_redirect
    assert mixed.is_redirect
    assert not inner.is_redirect


def test_stub_marker_detected_anywhere_in_body():
    revision = parse_revision(
        "<revision><text>Some article.\n{{Politics-stub}}</text></revision>", None
    )
    assert revision.is_stub


def test_escaped_markup_is_decoded_once():
    revision = parse_revision(
        "<revision><text>a &lt;page&gt; tag &amp;amp; more</text></revision>", None
    )
    assert revision.raw_markup == "a <page> tag &amp; more"


def test_deleted_markers_are_recorded():
    revision = parse_revision(
        '<revision><id>1</id><contributor deleted="deleted" />'
        '<comment deleted="deleted" /><text deleted="deleted" /></revision>',
        None,
    )
    assert revision.contributor is None
    assert revision.contributor_deleted
    assert revision.comment_deleted
    assert revision.text_deleted
    assert revision.comment == ""


def test_non_numeric_declared_length_is_a_parse_error():
    with pytest.raises(SnippetParseError):
        parse_revision('<revision><text bytes="lots">x</text></revision>', None)


def test_malformed_snippet_is_a_parse_error():
    with pytest.raises(SnippetParseError):
        parse_revision("<revision><id>1</revision>", None)
    with pytest.raises(SnippetParseError):
        parse_page_header("<page><title>A & B</title></page>")


def test_wrong_root_element_is_a_parse_error():
    with pytest.raises(SnippetParseError):
        parse_page_header("<revision><id>1</id></revision>")
