"""
ArticleExtractor: the linear Preprocess -> Score -> Select -> Sanitize ->
Serialize pipeline.
"""

from __future__ import annotations

import time
from typing import Any, List, Optional
from uuid import uuid4

import structlog
from structlog.contextvars import bound_contextvars

from articlecore.config.config import ExtractionConfig

from .dom import describe, has_content
from .errors import ExtractionError, NoCandidateFound
from .keywords import KeywordTable
from .models import Article, Candidate
from .preprocessor import Preprocessor
from .sanitizer import ContentSanitizer, validate_base_url
from .scorer import CandidateScorer
from .selector import CandidateSelector
from .serializer import ArticleSerializer

logger = structlog.get_logger(__name__)


class ArticleExtractor:
    """
    Extracts the main article from an HTML document.

    The extractor holds configuration only. Each call works on its own copy
    of the document, so one instance may be shared and called reentrantly.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None) -> None:
        """
        Initialize the extractor and its stages.

        Args:
            config: Pipeline configuration, defaults if omitted
        """
        self.config = config or ExtractionConfig()
        self.keywords = KeywordTable.for_scoring(self.config.scoring)
        self.logger = logger.bind(component="ArticleExtractor")

        self.preprocessor = Preprocessor(self.config.preprocess, self.keywords, parser=self.config.parser)
        self.scorer = CandidateScorer(
            self.config.scoring, self.keywords, landmark_tags=self.config.selection.landmark_tags
        )
        self.selector = CandidateSelector(self.config.selection, self.keywords)
        self.sanitizer = ContentSanitizer(
            self.config.sanitizer,
            self.keywords,
            scoring=self.config.scoring,
            parser=self.config.parser,
        )
        self.serializer = ArticleSerializer()

    def extract(self, document: Any, base_url: str) -> Article:
        """
        Run the full pipeline over ``document``.

        Args:
            document: HTML string/bytes or a parsed BeautifulSoup tree
            base_url: Absolute URL used to resolve relative links

        Returns:
            The extracted Article

        Raises:
            InvalidBaseURLError: If ``base_url`` is not absolute
            MalformedInputError: If ``document`` is not a usable tree
            NoCandidateFound: If nothing looks like article content
            SerializationError: On an internal serializer failure
        """
        base = validate_base_url(base_url)
        start_time = time.perf_counter()

        with bound_contextvars(run_id=uuid4().hex[:12], base_url=base):
            try:
                soup = self.preprocessor.process(document)
                table = self.scorer.score(soup)
                selection = self.selector.select(table)
                root = self.sanitizer.sanitize(selection, base)
                if not has_content(root):
                    raise NoCandidateFound(
                        f"Nothing left of {describe(selection.candidate.node)} after sanitizing",
                        best_score=selection.candidate.score,
                    )
                article = self.serializer.serialize(root, soup)
            except ExtractionError as e:
                self.logger.info("extraction_failed", error_type=type(e).__name__, error=str(e))
                raise

            self.logger.debug(
                "extraction_completed",
                title=article.title,
                content_length=len(article.content),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
        return article

    def candidates(self, document: Any, limit: int = 10) -> List[Candidate]:
        """
        Score ``document`` and return its best candidates without selecting.

        Landmark filtering and sibling merging are not applied; this is a
        view of the raw score table for tuning.
        """
        soup = self.preprocessor.process(document)
        table = self.scorer.score(soup)
        return table.candidates()[: max(limit, 0)]


def extract(document: Any, base_url: str, *, config: Optional[ExtractionConfig] = None) -> Article:
    """Extract the article from ``document`` with a one-off extractor."""
    return ArticleExtractor(config).extract(document, base_url)
