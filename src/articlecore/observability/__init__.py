"""Logging setup for ArticleCore."""

from .logging import configure_default_logging, configure_logging

__all__ = ["configure_default_logging", "configure_logging"]
