"""
DOM helpers shared by the extraction stages.

Parsing into an owned BeautifulSoup tree, text measurement, the empty-node
predicate, and the arena index used for ancestor lookups during scoring.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import PreformattedString
from bs4.formatter import HTMLFormatter

from .errors import MalformedInputError

WHITESPACE_PATTERN = re.compile(r"\s+")

HIDDEN_STYLE_PATTERN = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)

VIDEO_EMBED_PATTERN = re.compile(
    r"//(www\.)?((dailymotion|youtube|youtube-nocookie|player\.vimeo|v\.qq)\.com"
    r"|(archive|upload\.wikimedia)\.org|player\.twitch\.tv)",
    re.IGNORECASE,
)

BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "dialog",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "tbody",
        "thead",
        "tfoot",
        "tr",
        "td",
        "th",
        "ul",
    }
)

MEDIA_TAGS = frozenset({"img", "picture", "video", "audio", "embed", "object", "iframe", "svg", "canvas"})

# Never removed for being empty. Void and media-child elements carry no text.
EMPTY_EXEMPT_TAGS = frozenset(
    {"html", "head", "body", "title", "br", "hr", "td", "th", "source", "track", "param", "area", "wbr", "col"}
)

PRESERVE_WHITESPACE_TAGS = frozenset({"pre", "code", "textarea"})

DOCUMENT_ROOT_NAMES = frozenset({"html", "body", BeautifulSoup.ROOT_TAG_NAME})

# Escapes only &, < and >; void elements render as <img src="..."> without a slash.
HTML_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)


def normalize_space(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def text_of(tag: Tag) -> str:
    return normalize_space(tag.get_text())


def link_density(tag: Tag) -> float:
    """Share of the tag's visible text that sits inside <a> elements."""
    total = len(text_of(tag))
    if total == 0:
        return 0.0
    linked = sum(len(text_of(a)) for a in tag.find_all("a"))
    return min(1.0, linked / total)


def own_text(tag: Tag, stop_tags: Iterable[str]) -> str:
    """Text of ``tag`` excluding anything inside nested ``stop_tags`` elements."""
    stop = frozenset(stop_tags)
    parts: List[str] = []
    stack: List[Any] = list(reversed(tag.contents))
    while stack:
        node = stack.pop()
        if isinstance(node, Tag):
            if node.name in stop:
                continue
            stack.extend(reversed(node.contents))
        elif isinstance(node, NavigableString):
            parts.append(str(node))
    return normalize_space("".join(parts))


def is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden"):
        return True
    style = tag.get("style")
    return bool(style) and HIDDEN_STYLE_PATTERN.search(str(style)) is not None


def is_video_embed(tag: Tag) -> bool:
    src = tag.get("src") or ""
    return VIDEO_EMBED_PATTERN.search(str(src)) is not None


def is_empty(tag: Tag) -> bool:
    """True when the element has no visible text and no media descendant."""
    if tag.name in EMPTY_EXEMPT_TAGS:
        return False
    return not has_content(tag)


def has_content(tag: Tag) -> bool:
    """True when the element shows text or holds media."""
    if tag.name in MEDIA_TAGS or text_of(tag):
        return True
    return tag.find(list(MEDIA_TAGS)) is not None


def remove_markup_strings(root: Tag) -> int:
    """Remove comments, doctypes, CDATA and processing instructions under ``root``."""
    strings = [s for s in root.find_all(string=True) if isinstance(s, PreformattedString)]
    for string in strings:
        string.extract()
    return len(strings)


def live(tags: Iterable[Tag]) -> Iterator[Tag]:
    """Skip tags destroyed by an earlier ``decompose`` of an ancestor."""
    for tag in tags:
        if not tag.decomposed:
            yield tag


def remove_empty_elements(root: Tag) -> int:
    """Remove empty descendants of ``root`` bottom-up. Returns the count removed."""
    removed = 0
    for tag in reversed(root.find_all(True)):
        if tag.decomposed:
            continue
        if is_empty(tag):
            tag.decompose()
            removed += 1
    return removed


def parse_document(document: Any, parser: str = "html.parser") -> BeautifulSoup:
    """
    Return an owned BeautifulSoup tree for ``document``.

    Strings and bytes are parsed; parsed trees are deep-copied so the caller's
    tree is never mutated.

    Raises:
        MalformedInputError: If the input is not markup or holds no element.
    """
    if isinstance(document, BeautifulSoup):
        soup = copy.copy(document)
    elif isinstance(document, Tag):
        if document.decomposed:
            raise MalformedInputError("Input element has been decomposed")
        soup = BeautifulSoup("", parser)
        soup.append(copy.copy(document))
    elif isinstance(document, (str, bytes)):
        if not document.strip():
            raise MalformedInputError("HTML document is empty")
        soup = BeautifulSoup(document, parser)
    else:
        raise MalformedInputError(f"Unsupported document type: {type(document).__name__}")

    if soup.find(True) is None:
        raise MalformedInputError("HTML document contains no elements")
    return soup


def content_root(soup: BeautifulSoup) -> Tag:
    """The subtree scoring runs over: <body>, else <html>, else the document."""
    return soup.body or soup.find("html") or soup


def is_document_root(tag: Tag) -> bool:
    return tag.name in DOCUMENT_ROOT_NAMES


def render_outer(tag: Tag) -> str:
    return tag.decode(formatter=HTML_FORMATTER)


def render_inner(tag: Tag) -> str:
    return tag.decode_contents(formatter=HTML_FORMATTER)


def describe(tag: Tag) -> str:
    """Short CSS-like label such as ``div#main.post.body``."""
    label = tag.name
    ident = tag.get("id")
    if ident:
        label += f"#{ident}"
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for name in classes:
        label += f".{name}"
    return label


@dataclass
class DocumentIndex:
    """
    Arena of the elements under a root in document pre-order.

    Positions are the node identities used by the score table; parent
    lookups go through ``parents`` instead of walking the tree.
    """

    root: Tag
    nodes: List[Tag] = field(default_factory=list)
    parents: List[int] = field(default_factory=list)
    _positions: Dict[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, root: Tag) -> DocumentIndex:
        index = cls(root=root)
        stack: List[Tuple[Tag, int]] = [(root, -1)]
        while stack:
            node, parent = stack.pop()
            position = len(index.nodes)
            index.nodes.append(node)
            index.parents.append(parent)
            index._positions[id(node)] = position
            children = [child for child in node.contents if isinstance(child, Tag)]
            for child in reversed(children):
                stack.append((child, position))
        return index

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node: object) -> bool:
        return id(node) in self._positions and self.nodes[self._positions[id(node)]] is node

    def position(self, node: Tag) -> int:
        if node not in self:
            raise KeyError(f"{describe(node)} is not part of this document index")
        return self._positions[id(node)]

    def parent_of(self, position: int) -> Optional[int]:
        parent = self.parents[position]
        return parent if parent >= 0 else None

    def ancestors(self, position: int) -> Tuple[int, ...]:
        """Ancestor positions, nearest first."""
        chain: List[int] = []
        parent = self.parents[position]
        while parent >= 0:
            chain.append(parent)
            parent = self.parents[parent]
        return tuple(chain)
