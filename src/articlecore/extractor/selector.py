"""
Top-candidate selection and sibling merging.
"""

from __future__ import annotations

import re
from typing import List, Optional

import structlog
from bs4 import Tag

from articlecore.config.config import SelectionConfig

from .dom import describe, is_document_root, link_density, text_of
from .errors import NoCandidateFound
from .keywords import KeywordCategory, KeywordTable
from .models import Candidate, Selection
from .scorer import ScoreTable

logger = structlog.get_logger(__name__)

SENTENCE_END_PATTERN = re.compile(r"\.( |$)")


class CandidateSelector:
    """Picks the node most likely to hold the article body."""

    def __init__(self, config: SelectionConfig | None = None, keywords: KeywordTable | None = None) -> None:
        self.config = config or SelectionConfig()
        self.keywords = keywords
        self._landmarks = frozenset(self.config.landmark_tags)

    def select(self, table: ScoreTable) -> Selection:
        """Choose the top candidate and merge qualifying siblings.

        Raises:
            NoCandidateFound: If nothing scores at least ``min_candidate_score``
        """
        candidates = [c for c in table.candidates() if not self._in_landmark(table, c)]
        if not candidates:
            raise NoCandidateFound("No content-bearing node found")

        best = candidates[0]
        if best.score < self.config.min_candidate_score:
            raise NoCandidateFound(
                f"Best candidate {describe(best.node)} scored {best.score:.2f}, "
                f"below the minimum of {self.config.min_candidate_score:.2f}",
                best_score=best.score,
            )

        if best.position == 0 or is_document_root(best.node):
            best = self._descend_from_root(table, best)

        selection = self._merge_siblings(table, best)
        logger.debug(
            "candidate_selected",
            node=describe(best.node),
            score=round(best.score, 3),
            merged=len(selection.nodes),
            synthetic=selection.synthetic,
        )
        return selection

    def _in_landmark(self, table: ScoreTable, candidate: Candidate) -> bool:
        if candidate.node.name in self._landmarks:
            return True
        nodes = table.index.nodes
        return any(nodes[p].name in self._landmarks for p in candidate.ancestors)

    def _descend_from_root(self, table: ScoreTable, root: Candidate) -> Candidate:
        """Replace a whole-document winner by its dominant child, if any."""
        scored: List[Candidate] = []
        for child in root.node.find_all(True, recursive=False):
            if child.name in self._landmarks:
                continue
            score = table.get(child)
            if score is not None and score > 0:
                scored.append(table.candidate(child))
        if not scored:
            return root

        total = sum(c.score for c in scored)
        top = max(scored, key=lambda c: (c.score, -c.position))
        if top.score >= self.config.dominant_child_share * total:
            logger.debug("descended_from_root", child=describe(top.node), share=round(top.score / total, 3))
            return top
        return root

    def _merge_siblings(self, table: ScoreTable, best: Candidate) -> Selection:
        parent = best.node.parent
        if parent is None or best.position == 0:
            return Selection(candidate=best, nodes=(best.node,))

        threshold = max(self.config.sibling_score_floor, best.score * self.config.sibling_threshold)
        top_classes = self._class_value(best.node)

        merged: List[Tag] = []
        for sibling in parent.find_all(True, recursive=False):
            if sibling is best.node:
                merged.append(sibling)
                continue
            if self._qualifies(table, sibling, best, threshold, top_classes):
                merged.append(sibling)

        if len(merged) == 1:
            return Selection(candidate=best, nodes=(best.node,))
        return Selection(candidate=best, nodes=tuple(merged), synthetic=True)

    def _qualifies(
        self,
        table: ScoreTable,
        sibling: Tag,
        best: Candidate,
        threshold: float,
        top_classes: Optional[str],
    ) -> bool:
        if not self._content_like(sibling):
            return False

        score = table.get(sibling)
        if score is not None:
            bonus = 0.0
            if top_classes and self._class_value(sibling) == top_classes:
                bonus = best.score * self.config.same_class_bonus
            if score + bonus >= threshold:
                return True

        if sibling.name != "p":
            return False
        text = text_of(sibling)
        density = link_density(sibling)
        if len(text) > self.config.min_paragraph_length:
            return density < self.config.max_sibling_link_density
        return bool(text) and density == 0 and SENTENCE_END_PATTERN.search(text) is not None

    def _content_like(self, node: Tag) -> bool:
        if node.name in self._landmarks or node.name == "form":
            return False
        if self.keywords is not None and KeywordCategory.NEGATIVE in self.keywords.match(node):
            return False
        return link_density(node) < self.config.max_sibling_link_density

    @staticmethod
    def _class_value(node: Tag) -> Optional[str]:
        classes = node.get("class")
        if not classes:
            return None
        if isinstance(classes, (list, tuple)):
            return " ".join(classes)
        return str(classes)
