"""
Exception types raised by the extraction pipeline.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for article extraction failures."""

    pass


class MalformedInputError(ExtractionError):
    """Raised when the input cannot be treated as an HTML tree."""

    pass


class NoCandidateFound(ExtractionError):
    """Raised when no node scored above the minimum candidate threshold."""

    def __init__(self, message: str, *, best_score: float | None = None) -> None:
        super().__init__(message)
        self.best_score = best_score


class SerializationError(ExtractionError):
    """Raised when the serializer meets a tree it cannot render."""

    pass


class InvalidBaseURLError(ExtractionError, ValueError):
    """Raised when the base URL used for link resolution is not absolute."""

    pass
