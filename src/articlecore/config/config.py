"""
Configuration management for ArticleCore using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Collection, Dict, List, Literal, Optional, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# Keywords of at least this length also match as token prefixes.
PREFIX_MATCH_MIN_LENGTH = 4


def _normalize_keywords(values: List[str]) -> List[str]:
    cleaned = [v.strip().lower() for v in values if v and v.strip()]
    # Preserve order, drop duplicates
    return list(dict.fromkeys(cleaned))


def _matches_as_prefix(keyword: str, exact_only: Collection[str] = ()) -> bool:
    return len(keyword) >= PREFIX_MATCH_MIN_LENGTH and keyword not in exact_only


def _keywords_collide(a: str, b: str, exact_only: Collection[str] = ()) -> bool:
    if a == b:
        return True
    if _matches_as_prefix(a, exact_only) and b.startswith(a):
        return True
    return _matches_as_prefix(b, exact_only) and a.startswith(b)


# --- Nested Configuration Models ---


class PreprocessConfig(BaseModel):
    """Configuration for the document cleaning stage."""

    remove_tags: List[str] = Field(
        default=["script", "style", "noscript", "link", "template"],
        description="Elements dropped together with their content before scoring.",
    )
    unwrap_single_child_divs: bool = Field(
        default=True, description="Flatten div wrappers that hold a single block child and no text."
    )


class ScoringConfig(BaseModel):
    """Heuristic constants for the candidate scorer."""

    eligible_tags: List[str] = Field(
        default=["p", "div", "article", "section", "pre", "td"],
        description="Block-level containers that receive a content score of their own.",
    )
    min_text_length: int = Field(default=25, ge=0, description="Minimum own-text length for a node to be scored.")
    base_score: float = Field(default=1.0, description="Points awarded to every scored node.")
    length_divisor: int = Field(default=100, gt=0, description="Characters per length point.")
    length_cap: int = Field(default=3, ge=0, description="Maximum number of length points.")
    comma_bonus: float = Field(default=1.0, ge=0, description="Bonus per comma in the node's own text.")
    comma_chars: str = Field(default=",，", min_length=1, description="Characters counted as commas.")
    parent_weight: float = Field(default=1.0, ge=0, description="Share of a node score credited to its parent.")
    grandparent_weight: float = Field(
        default=0.5, ge=0, description="Share of a node score credited to its grandparent."
    )
    tag_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "article": 10.0,
            "section": 10.0,
            "div": 5.0,
            "pre": 3.0,
            "td": 3.0,
            "blockquote": 3.0,
            "address": -3.0,
            "ol": -3.0,
            "ul": -3.0,
            "dl": -3.0,
            "dd": -3.0,
            "dt": -3.0,
            "li": -3.0,
            "h1": -5.0,
            "h2": -5.0,
            "h3": -5.0,
            "h4": -5.0,
            "h5": -5.0,
            "h6": -5.0,
            "th": -5.0,
            "form": -25.0,
            "aside": -25.0,
            "nav": -25.0,
            "footer": -25.0,
            "header": -25.0,
        },
        description="Initial score applied to a node when it first enters the score table.",
    )
    keyword_bonus: float = Field(default=25.0, ge=0, description="Bonus when class/id hits a positive keyword.")
    keyword_penalty: float = Field(default=25.0, ge=0, description="Penalty when class/id hits a negative keyword.")
    positive_keywords: List[str] = Field(
        default=[
            "article",
            "body",
            "content",
            "entry",
            "hentry",
            "main",
            "page",
            "post",
            "text",
            "blog",
            "story",
        ]
    )
    negative_keywords: List[str] = Field(
        default=[
            "ad",
            "ads",
            "advert",
            "banner",
            "combx",
            "comment",
            "contact",
            "footer",
            "footnote",
            "masthead",
            "meta",
            "outbrain",
            "pager",
            "pagination",
            "promo",
            "related",
            "scroll",
            "share",
            "shoutbox",
            "sidebar",
            "skyscraper",
            "social",
            "sponsor",
            "shopping",
            "tags",
            "taboola",
            "tool",
            "widget",
        ]
    )
    exact_match_keywords: List[str] = Field(
        default=["main", "page", "post", "text"],
        description="Keywords that only match whole tokens, never as a prefix.",
    )
    scale_by_link_density: bool = Field(
        default=True, description="Multiply final scores by (1 - link density)."
    )

    @field_validator("eligible_tags")
    @classmethod
    def validate_eligible_tags(cls, v: List[str]) -> List[str]:
        """Ensure at least one tag is scored."""
        tags = _normalize_keywords(v)
        if not tags:
            raise ValueError("eligible_tags must contain at least one tag")
        return tags

    @field_validator("positive_keywords", "negative_keywords", "exact_match_keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        return _normalize_keywords(v)

    @model_validator(mode="after")
    def check_keyword_overlap(self) -> "ScoringConfig":
        """A keyword may not count as both a bonus and a penalty."""
        for pos in self.positive_keywords:
            for neg in self.negative_keywords:
                if _keywords_collide(pos, neg, self.exact_match_keywords):
                    raise ValueError(f"keyword {pos!r} collides with negative keyword {neg!r}")
        return self


class SelectionConfig(BaseModel):
    """Configuration for picking and widening the top candidate."""

    min_candidate_score: float = Field(
        default=5.0, description="Best score below this means the page is not an article."
    )
    sibling_threshold: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Fraction of the top score a sibling needs to be merged."
    )
    sibling_score_floor: float = Field(default=10.0, ge=0, description="Absolute minimum score for a merged sibling.")
    same_class_bonus: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Top-score fraction granted to siblings sharing the top class."
    )
    max_sibling_link_density: float = Field(default=0.25, ge=0.0, le=1.0)
    min_paragraph_length: int = Field(
        default=80, ge=0, description="Sibling paragraphs longer than this are merged when not link-heavy."
    )
    dominant_child_share: float = Field(
        default=0.75,
        ge=0.0,
        le=1.0,
        description="Share of the body's child scores a single child needs to replace the body.",
    )
    landmark_tags: List[str] = Field(
        default=["nav", "header", "footer", "aside"],
        description="Nodes inside these elements are never selected.",
    )


class SanitizerConfig(BaseModel):
    """Configuration for cleaning the selected content."""

    remove_tags: List[str] = Field(
        default=[
            "form",
            "input",
            "button",
            "select",
            "textarea",
            "fieldset",
            "nav",
            "aside",
            "footer",
            "script",
            "style",
            "noscript",
            "link",
            "template",
        ]
    )
    ad_keywords: List[str] = Field(
        default=["ad", "ads", "adsense", "advert", "advertisement", "sponsor", "sponsored", "promo", "banner"]
    )
    social_keywords: List[str] = Field(default=["share", "sharing", "social", "sharethis", "addthis"])
    social_max_text_length: int = Field(
        default=500, ge=0, description="Share/social blocks with less text than this are dropped."
    )
    conditional_tags: List[str] = Field(default=["div", "section", "ul", "ol", "table"])
    max_commas: int = Field(
        default=10, ge=0, description="Blocks with at least this many commas are never conditionally removed."
    )
    link_density_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    negative_link_density_threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    min_block_text_length: int = Field(default=25, ge=0)
    strip_attributes: List[str] = Field(
        default=["style", "align", "bgcolor", "background", "valign", "hspace", "vspace", "frame", "rules"]
    )

    @field_validator("ad_keywords", "social_keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        return _normalize_keywords(v)


class ExtractionConfig(BaseModel):
    """Configuration for the whole extraction pipeline."""

    parser: Literal["html.parser", "lxml"] = Field(
        default="html.parser", description="BeautifulSoup tree builder used for HTML strings."
    )
    preprocess: PreprocessConfig = Field(default_factory=PreprocessConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    log_level: str = Field(default="WARNING", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Settings(BaseSettings):
    project_name: str = "ArticleCore"
    version: str = "0.1.0"
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="ARTICLECORE_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Settings:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for name in ("articlecore.yaml", "articlecore.yml"):
        path = current_dir / name
        if path.is_file():
            return path
    return None


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from an explicit file, a discovered file, or defaults."""
    config_path = path or find_config_file()
    if config_path is None:
        log.info("No config file found. Using default settings.")
        return Settings()
    return Settings.from_yaml(config_path)


# --- Lazy Configuration Loader ---


class LazySettings:
    """
    A proxy for the Settings object that delays its loading and validation
    until an attribute is first accessed.
    """

    _settings: ClassVar[Settings | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._settings is None:
            with self.__class__._lock:
                if self.__class__._settings is None:
                    self.__class__._settings = self._load_with_fallback()
        return getattr(self.__class__._settings, name)

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._settings = None

    def _load_with_fallback(self) -> Settings:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Settings.from_yaml(config_path)
            except (ValidationError, yaml.YAMLError, OSError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        return Settings()


# --- Global Settings Instance ---
settings: "Settings" = cast("Settings", LazySettings())
