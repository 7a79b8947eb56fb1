"""
Content scoring over the cleaned document.

Every eligible block with enough text of its own earns a content score from
its length and comma count. That score is credited in full to the block's
parent and in half to its grandparent, so containers of several good
paragraphs outscore any single paragraph. Nodes pick up their tag weight and
class/id weight the first time they enter the table, and final scores are
scaled down by link density.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from articlecore.config.config import ScoringConfig, SelectionConfig

from .dom import DocumentIndex, content_root, link_density, own_text
from .keywords import KeywordTable
from .models import Candidate

logger = structlog.get_logger(__name__)


class ScoreTable:
    """Node position -> content score for one extraction run."""

    def __init__(self, index: DocumentIndex) -> None:
        self.index = index
        self._scores: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, node: object) -> bool:
        return node in self.index and self.index.position(node) in self._scores  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        """(position, score) pairs in document order."""
        for position in sorted(self._scores):
            yield position, self._scores[position]

    def get(self, node: Tag, default: Optional[float] = None) -> Optional[float]:
        if node not in self.index:
            return default
        return self._scores.get(self.index.position(node), default)

    def score_of(self, node: Tag) -> float:
        score = self.get(node)
        if score is None:
            raise KeyError(f"node <{node.name}> has no score")
        return score

    def has_position(self, position: int) -> bool:
        return position in self._scores

    def set_position(self, position: int, score: float) -> None:
        self._scores[position] = score

    def add_to_position(self, position: int, amount: float) -> None:
        self._scores[position] += amount

    def position_score(self, position: int) -> float:
        return self._scores[position]

    def candidate(self, node: Tag) -> Candidate:
        position = self.index.position(node)
        return Candidate(
            position=position,
            node=node,
            score=self._scores[position],
            ancestors=self.index.ancestors(position),
        )

    def candidates(self) -> List[Candidate]:
        """All scored nodes, best first; ties keep document order."""
        ordered = sorted(self._scores.items(), key=lambda item: (-item[1], item[0]))
        return [
            Candidate(
                position=position,
                node=self.index.nodes[position],
                score=score,
                ancestors=self.index.ancestors(position),
            )
            for position, score in ordered
        ]


class CandidateScorer:
    """Builds the score table for a cleaned document."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        keywords: KeywordTable | None = None,
        *,
        landmark_tags: Iterable[str] | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.keywords = keywords or KeywordTable.for_scoring(self.config)
        self._eligible = frozenset(self.config.eligible_tags)
        self._landmarks = frozenset(SelectionConfig().landmark_tags if landmark_tags is None else landmark_tags)

    def score(self, soup: BeautifulSoup | Tag) -> ScoreTable:
        """Score the content root of ``soup``. The tree is only read."""
        root = content_root(soup) if isinstance(soup, BeautifulSoup) else soup
        index = DocumentIndex.build(root)
        table = ScoreTable(index)

        in_landmark = self._landmark_flags(index)
        scored = 0
        for position, node in enumerate(index.nodes):
            if node.name not in self._eligible:
                continue
            content = self.content_score(node)
            if content is None:
                continue
            scored += 1
            self._credit(table, position, content, 1.0)
            parent = index.parent_of(position)
            if parent is None or not self._may_credit(in_landmark, position, parent):
                continue
            self._credit(table, parent, content, self.config.parent_weight)
            grandparent = index.parent_of(parent)
            if grandparent is not None and self._may_credit(in_landmark, position, grandparent):
                self._credit(table, grandparent, content, self.config.grandparent_weight)

        if self.config.scale_by_link_density:
            for position, score in list(table):
                density = link_density(index.nodes[position])
                table.set_position(position, score * (1.0 - density))

        logger.debug("document_scored", nodes=len(index), scored=scored, entries=len(table))
        return table

    def content_score(self, node: Tag) -> Optional[float]:
        """Score earned by the node's own text, or None if it has too little."""
        text = own_text(node, self._eligible)
        if len(text) < self.config.min_text_length:
            return None
        commas = sum(text.count(ch) for ch in self.config.comma_chars)
        length_points = min(len(text) // self.config.length_divisor, self.config.length_cap)
        return self.config.base_score + commas * self.config.comma_bonus + length_points

    def initial_score(self, node: Tag) -> float:
        """Tag weight plus class/id weight, applied once per node."""
        tag_weight = self.config.tag_weights.get(node.name, 0.0)
        return tag_weight + self.keywords.class_weight(
            node, self.config.keyword_bonus, self.config.keyword_penalty
        )

    def _landmark_flags(self, index: DocumentIndex) -> List[bool]:
        """Per position: is the node a landmark or inside one. Parents precede children."""
        flags: List[bool] = []
        for position, node in enumerate(index.nodes):
            parent = index.parent_of(position)
            flags.append(node.name in self._landmarks or (parent is not None and flags[parent]))
        return flags

    @staticmethod
    def _may_credit(in_landmark: List[bool], position: int, ancestor: int) -> bool:
        # Landmark text never lifts the containers around the landmark
        return in_landmark[ancestor] or not in_landmark[position]

    def _credit(self, table: ScoreTable, position: int, content: float, weight: float) -> None:
        if not table.has_position(position):
            table.set_position(position, self.initial_score(table.index.nodes[position]))
        table.add_to_position(position, content * weight)
