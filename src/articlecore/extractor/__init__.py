"""
Heuristic main-article extraction.

The pipeline cleans the document, scores block-level nodes for content,
picks the best-scoring subtree (merging sibling content blocks), sanitizes
it and serializes it with a title:

    from articlecore.extractor import extract

    article = extract(html, "https://example.com/post")
    print(article.title)
"""

from .errors import (
    ExtractionError,
    InvalidBaseURLError,
    MalformedInputError,
    NoCandidateFound,
    SerializationError,
)
from .keywords import KeywordCategory, KeywordTable
from .models import Article, Candidate, Selection
from .pipeline import ArticleExtractor, extract
from .preprocessor import Preprocessor
from .sanitizer import ContentSanitizer
from .scorer import CandidateScorer, ScoreTable
from .selector import CandidateSelector
from .serializer import ArticleSerializer, extract_title

__all__ = [
    "Article",
    "ArticleExtractor",
    "ArticleSerializer",
    "Candidate",
    "CandidateScorer",
    "CandidateSelector",
    "ContentSanitizer",
    "ExtractionError",
    "InvalidBaseURLError",
    "KeywordCategory",
    "KeywordTable",
    "MalformedInputError",
    "NoCandidateFound",
    "Preprocessor",
    "ScoreTable",
    "Selection",
    "SerializationError",
    "extract",
    "extract_title",
]
