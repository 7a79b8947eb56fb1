"""
Document cleaning ahead of scoring.
"""

from __future__ import annotations

from typing import Any

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from articlecore.config.config import PreprocessConfig

from .dom import (
    BLOCK_TAGS,
    PRESERVE_WHITESPACE_TAGS,
    WHITESPACE_PATTERN,
    is_hidden,
    is_video_embed,
    live,
    parse_document,
    remove_empty_elements,
    remove_markup_strings,
)
from .keywords import KeywordTable

logger = structlog.get_logger(__name__)


class Preprocessor:
    """Strips non-content markup and normalizes the tree before scoring."""

    def __init__(
        self,
        config: PreprocessConfig | None = None,
        keywords: KeywordTable | None = None,
        *,
        parser: str = "html.parser",
    ) -> None:
        self.config = config or PreprocessConfig()
        self.keywords = keywords
        self.parser = parser

    def process(self, document: Any) -> BeautifulSoup:
        """Return a cleaned, owned copy of ``document``.

        Args:
            document: HTML string/bytes or a parsed BeautifulSoup tree

        Returns:
            A new BeautifulSoup tree; the input is left untouched

        Raises:
            MalformedInputError: If the input is not a usable tree
        """
        soup = parse_document(document, self.parser)

        stats = {
            "markup": remove_markup_strings(soup),
            "junk": self._remove_junk(soup),
            "hidden": self._remove_hidden(soup),
        }
        self._normalize_whitespace(soup)
        stats["empty"] = remove_empty_elements(soup)
        stats["unwrapped"] = self._unwrap_wrappers(soup) if self.config.unwrap_single_child_divs else 0

        logger.debug("document_preprocessed", **stats)
        return soup

    def _remove_junk(self, soup: BeautifulSoup) -> int:
        removed = 0
        for tag in live(soup.find_all(self.config.remove_tags)):
            tag.decompose()
            removed += 1
        for iframe in live(soup.find_all("iframe")):
            if not is_video_embed(iframe):
                iframe.decompose()
                removed += 1
        return removed

    def _remove_hidden(self, soup: BeautifulSoup) -> int:
        removed = 0
        for tag in live(soup.find_all(True)):
            if is_hidden(tag):
                tag.decompose()
                removed += 1
        return removed

    def _normalize_whitespace(self, soup: BeautifulSoup) -> None:
        for string in list(soup.find_all(string=True)):
            if type(string) is not NavigableString:
                continue
            if string.find_parent(list(PRESERVE_WHITESPACE_TAGS)) is not None:
                continue
            text = str(string)
            if not text.strip():
                if self._touches_block(string):
                    string.extract()
                elif text != " ":
                    string.replace_with(NavigableString(" "))
                continue
            collapsed = WHITESPACE_PATTERN.sub(" ", text)
            if collapsed != text:
                string.replace_with(NavigableString(collapsed))

    @staticmethod
    def _touches_block(string: NavigableString) -> bool:
        """Whitespace next to a block boundary renders as nothing."""
        parent = string.parent
        previous = string.previous_sibling
        following = string.next_sibling
        for sibling in (previous, following):
            if isinstance(sibling, Tag) and sibling.name in BLOCK_TAGS:
                return True
        at_edge = previous is None or following is None
        return at_edge and (parent is None or parent.name in BLOCK_TAGS or parent.name in ("body", "html", "head"))

    def _unwrap_wrappers(self, soup: BeautifulSoup) -> int:
        unwrapped = 0
        for div in reversed(soup.find_all("div")):
            if self._is_redundant_wrapper(div):
                div.unwrap()
                unwrapped += 1
        return unwrapped

    def _is_redundant_wrapper(self, div: Tag) -> bool:
        children = [c for c in div.contents if isinstance(c, Tag)]
        if len(children) != 1 or children[0].name not in BLOCK_TAGS:
            return False
        if any(isinstance(c, NavigableString) and c.strip() for c in div.contents):
            return False
        # Keep wrappers whose class/id carries a scoring signal
        return not (self.keywords and self.keywords.match(div))
