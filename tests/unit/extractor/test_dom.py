"""
Unit tests for DOM helpers and the document index.
"""

import pytest
from bs4 import BeautifulSoup

from articlecore.extractor.dom import (
    DocumentIndex,
    content_root,
    describe,
    has_content,
    is_empty,
    is_hidden,
    is_video_embed,
    link_density,
    own_text,
    parse_document,
)
from articlecore.extractor.errors import MalformedInputError


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestParseDocument:
    """Test cases for parse_document."""

    def test_parses_string(self):
        soup = parse_document("<p>Hello</p>")
        assert soup.p.get_text() == "Hello"

    def test_parses_bytes(self):
        soup = parse_document("<p>Café</p>".encode("utf-8"))
        assert soup.p.get_text() == "Café"

    def test_copies_parsed_tree(self):
        original = soup_of("<div><p>Hello</p></div>")
        copied = parse_document(original)
        copied.p.decompose()
        assert original.p is not None

    def test_copies_tag(self):
        original = soup_of("<div><p>Hello</p></div>")
        copied = parse_document(original.div)
        assert copied.div is not original.div
        assert copied.p.get_text() == "Hello"

    @pytest.mark.parametrize("document", ["", "   \n", b"", "just some text", 42, None])
    def test_rejects_unusable_input(self, document):
        with pytest.raises(MalformedInputError):
            parse_document(document)


class TestTextMeasures:
    """Test cases for text and link measurements."""

    def test_own_text_skips_stop_tags(self):
        soup = soup_of("<div>Intro <b>bold</b><p>Nested paragraph</p> outro</div>")
        assert own_text(soup.div, ["p"]) == "Intro bold outro"

    def test_link_density(self):
        soup = soup_of('<p>abcd <a href="/x">efgh</a></p>')
        # "abcd efgh" is 9 characters, 4 of them linked
        assert link_density(soup.p) == pytest.approx(4 / 9)

    def test_link_density_of_empty_tag(self):
        assert link_density(soup_of("<p></p>").p) == 0.0


class TestPredicates:
    """Test cases for node predicates."""

    @pytest.mark.parametrize(
        "html",
        [
            '<div style="display: none">x</div>',
            '<div style="color: red; visibility:hidden">x</div>',
            "<div hidden>x</div>",
        ],
    )
    def test_hidden(self, html):
        assert is_hidden(soup_of(html).div)

    def test_visible(self):
        assert not is_hidden(soup_of('<div style="display: block">x</div>').div)

    def test_video_embed(self):
        assert is_video_embed(soup_of('<iframe src="https://www.youtube.com/embed/abc"></iframe>').iframe)
        assert not is_video_embed(soup_of('<iframe src="https://ads.example.com/slot"></iframe>').iframe)

    def test_empty(self):
        assert is_empty(soup_of("<div><span> </span></div>").div)
        assert not is_empty(soup_of('<div><img src="a.png"></div>').div)
        assert not is_empty(soup_of("<div>text</div>").div)

    def test_structural_tags_never_empty(self):
        assert not is_empty(soup_of("<table><tr><td></td></tr></table>").td)
        assert not is_empty(soup_of("<p><br></p>").br)
        assert not is_empty(soup_of('<video><source src="v.mp4"><track src="v.vtt"></video>').source)
        assert not is_empty(soup_of('<video><source src="v.mp4"><track src="v.vtt"></video>').track)
        assert not is_empty(soup_of('<object><param name="movie" value="m.swf"></object>').param)

    def test_has_content(self):
        assert has_content(soup_of("<div><p>text</p></div>").div)
        assert has_content(soup_of('<div><video src="v.mp4"></video></div>').div)
        assert not has_content(soup_of("<div><p> </p></div>").div)


class TestDocumentIndex:
    """Test cases for DocumentIndex."""

    def test_preorder_positions(self):
        soup = soup_of("<body><div><p>a</p><p>b</p></div><section></section></body>")
        index = DocumentIndex.build(content_root(soup))

        assert [n.name for n in index.nodes] == ["body", "div", "p", "p", "section"]
        assert index.parent_of(0) is None
        assert index.parent_of(2) == 1
        assert index.ancestors(3) == (1, 0)

    def test_identity_not_equality(self):
        soup = soup_of("<body><p>same</p><p>same</p></body>")
        first, second = soup.find_all("p")
        index = DocumentIndex.build(soup.body)

        assert first == second
        assert index.position(first) != index.position(second)

    def test_foreign_node(self):
        index = DocumentIndex.build(soup_of("<body><p>a</p></body>").body)
        stranger = soup_of("<p>a</p>").p

        assert stranger not in index
        with pytest.raises(KeyError):
            index.position(stranger)


class TestDescribe:
    """Test cases for describe."""

    def test_label(self):
        soup = soup_of('<div id="main" class="post body">x</div>')
        assert describe(soup.div) == "div#main.post.body"
