"""
Data models for extraction results.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from bs4 import BeautifulSoup, Tag

from .dom import normalize_space


@dataclass(slots=True, frozen=True)
class Article:
    """Extracted article: a title and sanitized content HTML."""

    title: str
    content: str

    @property
    def text(self) -> str:
        """Plain-text rendering of the content."""
        if not self.content:
            return ""
        return normalize_space(BeautifulSoup(self.content, "html.parser").get_text(" "))

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content}

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


@dataclass(slots=True, frozen=True, eq=False)
class Candidate:
    """A scored node and its scoring ancestor chain (nearest first)."""

    position: int
    node: Tag
    score: float
    ancestors: Tuple[int, ...]


@dataclass(slots=True, frozen=True, eq=False)
class Selection:
    """
    The content picked by the selector.

    ``nodes`` are in document order. When ``synthetic`` is set they are
    merged siblings that the sanitizer wraps in a fresh container.
    """

    candidate: Candidate
    nodes: Tuple[Tag, ...]
    synthetic: bool = False

    @property
    def score(self) -> float:
        return self.candidate.score
