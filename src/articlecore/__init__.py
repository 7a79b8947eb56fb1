"""
ArticleCore - Heuristic main-article extraction for HTML documents.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import ExtractionConfig
from .extractor import (
    Article,
    ArticleExtractor,
    ExtractionError,
    InvalidBaseURLError,
    MalformedInputError,
    NoCandidateFound,
    SerializationError,
    extract,
)
from .observability import configure_default_logging

configure_default_logging()

__all__ = [
    "__version__",
    "configure_default_logging",
    "Article",
    "ArticleExtractor",
    "ExtractionConfig",
    "ExtractionError",
    "InvalidBaseURLError",
    "MalformedInputError",
    "NoCandidateFound",
    "SerializationError",
    "extract",
]
