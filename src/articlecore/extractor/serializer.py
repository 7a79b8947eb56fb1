"""
Title extraction and HTML serialization of the sanitized content.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .dom import normalize_space, render_inner, render_outer, text_of
from .errors import SerializationError
from .models import Article

logger = structlog.get_logger(__name__)

# Separators between an article title and a site name, e.g. "Story | Site".
TITLE_SEPARATOR_PATTERN = re.compile(r"\s+(?:\||-|–|—|»|/|\\|::)\s+")

HEADING_TAGS = ["h1", "h2", "h3"]

# Roots serialized by their children only.
CONTAINER_TAGS = frozenset({"div", "article", "section", "main", "body", "html", BeautifulSoup.ROOT_TAG_NAME})


def first_heading(root: Tag) -> Optional[str]:
    heading = root.find(HEADING_TAGS)
    if heading is None:
        return None
    return text_of(heading) or None


def clean_title(raw: str, heading: Optional[str] = None) -> str:
    """Strip a trailing site name from a document title.

    A segment equal to the content's first heading wins outright; otherwise
    everything after the last separator is dropped.
    """
    title = normalize_space(raw)
    separators = list(TITLE_SEPARATOR_PATTERN.finditer(title))
    if not separators:
        return title

    if heading:
        wanted = heading.casefold()
        for segment in TITLE_SEPARATOR_PATTERN.split(title):
            if segment.strip().casefold() == wanted:
                return segment.strip()

    head = title[: separators[-1].start()].strip()
    return head or title


def extract_title(document: Optional[BeautifulSoup], root: Optional[Tag] = None) -> str:
    """Title of the article: cleaned <title>, else the first heading, else ""."""
    heading = first_heading(root) if root is not None else None
    title_tag = document.find("title") if document is not None else None
    if title_tag is not None:
        raw = text_of(title_tag)
        if raw:
            return clean_title(raw, heading)
    return heading or ""


class ArticleSerializer:
    """Turns the sanitized subtree into an immutable Article."""

    def serialize(self, root: Tag, document: Optional[BeautifulSoup] = None) -> Article:
        """Build the Article for ``root``.

        Raises:
            SerializationError: If the tree holds a node the serializer cannot render
        """
        title = extract_title(document, root)
        content = self.render(root)
        logger.debug("article_serialized", title=title, content_length=len(content))
        return Article(title=title, content=content)

    def render(self, root: Tag) -> str:
        self._check_nodes(root)
        try:
            if root.name in CONTAINER_TAGS:
                return render_inner(root)
            return render_outer(root)
        except (TypeError, ValueError, AttributeError) as e:
            raise SerializationError(f"Failed to serialize <{root.name}>: {e}") from e

    @staticmethod
    def _check_nodes(root: Tag) -> None:
        for node in root.descendants:
            if isinstance(node, Tag):
                continue
            if isinstance(node, PreformattedString) or not isinstance(node, NavigableString):
                raise SerializationError(f"Unexpected {type(node).__name__} node in sanitized content")
