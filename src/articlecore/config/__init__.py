"""Configuration models for ArticleCore."""

from .config import (
    ExtractionConfig,
    LoggingConfig,
    PreprocessConfig,
    SanitizerConfig,
    ScoringConfig,
    SelectionConfig,
    Settings,
    find_config_file,
    load_settings,
    settings,
)

__all__ = [
    "ExtractionConfig",
    "LoggingConfig",
    "PreprocessConfig",
    "SanitizerConfig",
    "ScoringConfig",
    "SelectionConfig",
    "Settings",
    "find_config_file",
    "load_settings",
    "settings",
]
