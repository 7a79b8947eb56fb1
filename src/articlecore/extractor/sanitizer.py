"""
Sanitization of the selected content.

Works on a deep copy of the selection: drops forms, ads, share widgets and
link farms, strips presentational and event-handler attributes, resolves
relative URLs against the base URL, and removes whatever is left empty.
Passes repeat until nothing changes, so sanitizing sanitized output is a
no-op.
"""

from __future__ import annotations

import copy
import re
from typing import Union
from urllib.parse import urljoin, urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from articlecore.config.config import SanitizerConfig, ScoringConfig

from .dom import (
    MEDIA_TAGS,
    is_hidden,
    is_video_embed,
    link_density,
    live,
    remove_empty_elements,
    remove_markup_strings,
    render_inner,
    text_of,
)
from .errors import InvalidBaseURLError
from .keywords import KeywordCategory, KeywordTable
from .models import Selection

logger = structlog.get_logger(__name__)

URL_ATTRIBUTES = {
    "href": ("a", "area"),
    "src": ("img", "video", "audio", "source", "iframe", "embed", "track"),
    "poster": ("video",),
}
SRCSET_TAGS = ("img", "source")
LAZY_ATTRIBUTES = (("data-src", "src"), ("data-srcset", "srcset"))
UNRESOLVED_SCHEMES = ("data:", "mailto:", "tel:", "javascript:")

# One srcset candidate: URL, optional density or width descriptor, then a comma or the end.
# URLs may contain commas themselves (e.g. "w_200,h_100" transformation paths).
SRCSET_ENTRY_PATTERN = re.compile(r"(\S+)(\s+[\d.]+[xw])?(\s*(?:,|$))")

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def validate_base_url(base_url: str) -> str:
    """Return ``base_url`` if it is an absolute URL.

    Raises:
        InvalidBaseURLError: If it has no scheme or host
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise InvalidBaseURLError("A base URL is required")
    parsed = urlparse(base_url.strip())
    if not parsed.scheme or not parsed.netloc:
        raise InvalidBaseURLError(f"Base URL must be absolute: {base_url!r}")
    return base_url.strip()


class ContentSanitizer:
    """Removes non-content markup from the selected subtree."""

    def __init__(
        self,
        config: SanitizerConfig | None = None,
        scoring_keywords: KeywordTable | None = None,
        *,
        scoring: ScoringConfig | None = None,
        parser: str = "html.parser",
    ) -> None:
        self.config = config or SanitizerConfig()
        self.scoring = scoring or ScoringConfig()
        self.scoring_keywords = scoring_keywords or KeywordTable.for_scoring(self.scoring)
        self.keywords = KeywordTable.for_sanitizer(self.config)
        self.parser = parser

    def sanitize(self, content: Union[Selection, Tag], base_url: str) -> Tag:
        """Return a sanitized copy of ``content``.

        Args:
            content: A selection from the selector, or any element
            base_url: Absolute URL used to resolve relative links

        Returns:
            The root of the sanitized working copy
        """
        base = validate_base_url(base_url)
        root = self._working_copy(content)

        passes = 0
        while True:
            passes += 1
            if not self._clean_pass(root, base):
                break
        logger.debug("content_sanitized", passes=passes)
        return root

    def sanitize_html(self, html: str, base_url: str) -> str:
        """Sanitize an HTML fragment and return it serialized."""
        fragment = BeautifulSoup(html, self.parser)
        container = fragment.new_tag("div")
        for node in list(fragment.contents):
            container.append(node.extract())
        fragment.append(container)
        return render_inner(self.sanitize(container, base_url))

    def _working_copy(self, content: Union[Selection, Tag]) -> Tag:
        soup = BeautifulSoup("", self.parser)
        if isinstance(content, Selection):
            if content.synthetic:
                root = soup.new_tag("div")
                for node in content.nodes:
                    root.append(self._copy_node(soup, node))
            else:
                root = self._copy_node(soup, content.nodes[0])
        else:
            root = self._copy_node(soup, content)
        soup.append(root)
        return root

    @staticmethod
    def _copy_node(soup: BeautifulSoup, node: Tag) -> Tag:
        # A whole document cannot be nested inside another; copy its children instead
        if isinstance(node, BeautifulSoup):
            wrapper = soup.new_tag("div")
            for child in node.contents:
                wrapper.append(copy.copy(child))
            return wrapper
        return copy.copy(node)

    def _clean_pass(self, root: Tag, base_url: str) -> int:
        changes = remove_markup_strings(root)
        changes += self._remove_tags(root)
        changes += self._remove_keyword_blocks(root)
        changes += self._clean_conditionally(root)
        changes += self._clean_attributes(root)
        changes += self._fix_lazy_images(root)
        changes += self._resolve_urls(root, base_url)
        changes += remove_empty_elements(root)
        return changes

    def _remove_tags(self, root: Tag) -> int:
        removed = 0
        for tag in live(root.find_all(self.config.remove_tags)):
            tag.decompose()
            removed += 1
        for iframe in live(root.find_all("iframe")):
            if not is_video_embed(iframe):
                iframe.decompose()
                removed += 1
        # Page mastheads; an article header holding its heading is content
        for header in live(root.find_all("header")):
            if header.find(HEADING_TAGS) is None:
                header.decompose()
                removed += 1
        # Must run before style attributes are stripped
        for tag in live(root.find_all(True)):
            if is_hidden(tag):
                tag.decompose()
                removed += 1
        return removed

    def _remove_keyword_blocks(self, root: Tag) -> int:
        removed = 0
        for tag in live(root.find_all(True)):
            categories = self.keywords.match(tag)
            if not categories:
                continue
            if KeywordCategory.AD in categories:
                tag.decompose()
                removed += 1
            elif len(text_of(tag)) < self.config.social_max_text_length:
                tag.decompose()
                removed += 1
        return removed

    def _clean_conditionally(self, root: Tag) -> int:
        removed = 0
        for tag in reversed(root.find_all(self.config.conditional_tags)):
            if tag.decomposed:
                continue
            if self._is_junk_block(tag):
                tag.decompose()
                removed += 1
        return removed

    def _is_junk_block(self, tag: Tag) -> bool:
        text = text_of(tag)
        commas = sum(text.count(ch) for ch in self.scoring.comma_chars)
        if commas >= self.config.max_commas:
            return False

        density = link_density(tag)
        if density > self.config.link_density_threshold:
            return True

        weight = self.scoring_keywords.class_weight(tag, self.scoring.keyword_bonus, self.scoring.keyword_penalty)
        if weight < 0 and density > self.config.negative_link_density_threshold:
            return True

        # Short link snippets such as "Read more" or "Related: ..."
        if tag.name in ("div", "section") and len(text) < self.config.min_block_text_length and density > 0:
            return tag.find(list(MEDIA_TAGS)) is None
        return False

    def _clean_attributes(self, root: Tag) -> int:
        changes = 0
        strip = set(self.config.strip_attributes)
        for tag in [root, *root.find_all(True)]:
            doomed = [name for name in tag.attrs if name in strip or name.lower().startswith("on")]
            for name in doomed:
                del tag[name]
                changes += 1

        for link in root.find_all("a"):
            href = str(link.get("href") or "").strip().lower()
            if href.startswith("javascript:"):
                link.unwrap()
                changes += 1
        return changes

    def _fix_lazy_images(self, root: Tag) -> int:
        changes = 0
        for img in root.find_all(["img", "source"]):
            for lazy, real in LAZY_ATTRIBUTES:
                if img.get(lazy) and not img.get(real):
                    img[real] = img[lazy]
                    changes += 1
        return changes

    def _resolve_urls(self, root: Tag, base_url: str) -> int:
        changes = 0
        for attribute, tag_names in URL_ATTRIBUTES.items():
            for tag in root.find_all(list(tag_names)):
                value = tag.get(attribute)
                if value is None:
                    continue
                resolved = self._absolutize(str(value), base_url)
                if resolved != value:
                    tag[attribute] = resolved
                    changes += 1

        for tag in root.find_all(list(SRCSET_TAGS)):
            srcset = tag.get("srcset")
            if not srcset:
                continue
            resolved = self._absolutize_srcset(str(srcset), base_url)
            if resolved != srcset:
                tag["srcset"] = resolved
                changes += 1
        return changes

    @staticmethod
    def _absolutize(value: str, base_url: str) -> str:
        url = value.strip()
        if not url or url.startswith("#") or url.lower().startswith(UNRESOLVED_SCHEMES):
            return value
        if urlparse(url).scheme:
            return value
        return urljoin(base_url, url)

    def _absolutize_srcset(self, srcset: str, base_url: str) -> str:
        return SRCSET_ENTRY_PATTERN.sub(
            lambda m: self._absolutize(m.group(1), base_url) + (m.group(2) or "") + m.group(3),
            srcset,
        )
