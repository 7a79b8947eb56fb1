"""
Table-driven class/id keyword matching.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

from bs4 import Tag

from articlecore.config.config import PREFIX_MATCH_MIN_LENGTH, SanitizerConfig, ScoringConfig

TOKEN_SPLIT_PATTERN = re.compile(r"[\s\-_]+")


class KeywordCategory(Enum):
    """What a class/id keyword says about the element carrying it."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    AD = "ad"
    SOCIAL = "social"


def attribute_tokens(tag: Tag) -> List[str]:
    """Lowercased tokens of the tag's ``class`` and ``id`` values."""
    values: List[str] = []
    classes = tag.get("class")
    if isinstance(classes, (list, tuple)):
        values.extend(str(c) for c in classes)
    elif classes:
        values.append(str(classes))
    ident = tag.get("id")
    if ident:
        values.append(str(ident))

    tokens: List[str] = []
    for value in values:
        tokens.extend(t for t in TOKEN_SPLIT_PATTERN.split(value.lower()) if t)
    return tokens


class KeywordTable:
    """
    Maps keywords to categories.

    A token matches a keyword when it is equal to it, or, for keywords of
    four or more characters, when it starts with it ("comments" matches
    "comment"). Short keywords such as "ad" and those listed in
    ``exact_only`` ("page", so "pagination" stays negative) only match exactly.
    """

    def __init__(self, mapping: Mapping[str, KeywordCategory], exact_only: Iterable[str] = ()) -> None:
        self._exact: Dict[str, KeywordCategory] = {k.lower(): v for k, v in mapping.items()}
        skip = {k.lower() for k in exact_only}
        self._prefixes: Tuple[Tuple[str, KeywordCategory], ...] = tuple(
            sorted(
                (k, v) for k, v in self._exact.items() if len(k) >= PREFIX_MATCH_MIN_LENGTH and k not in skip
            )
        )

    @classmethod
    def from_groups(
        cls, groups: Mapping[KeywordCategory, Iterable[str]], exact_only: Iterable[str] = ()
    ) -> KeywordTable:
        mapping: Dict[str, KeywordCategory] = {}
        for category, keywords in groups.items():
            for keyword in keywords:
                mapping[keyword.lower()] = category
        return cls(mapping, exact_only)

    @classmethod
    def for_scoring(cls, config: ScoringConfig) -> KeywordTable:
        return cls.from_groups(
            {
                KeywordCategory.POSITIVE: config.positive_keywords,
                KeywordCategory.NEGATIVE: config.negative_keywords,
            },
            config.exact_match_keywords,
        )

    @classmethod
    def for_sanitizer(cls, config: SanitizerConfig) -> KeywordTable:
        return cls.from_groups(
            {
                KeywordCategory.AD: config.ad_keywords,
                KeywordCategory.SOCIAL: config.social_keywords,
            }
        )

    def __len__(self) -> int:
        return len(self._exact)

    def categorize(self, token: str) -> FrozenSet[KeywordCategory]:
        found = set()
        exact = self._exact.get(token)
        if exact is not None:
            found.add(exact)
        for keyword, category in self._prefixes:
            if token.startswith(keyword):
                found.add(category)
        return frozenset(found)

    def match(self, tag: Tag) -> FrozenSet[KeywordCategory]:
        """Every category hit by at least one class/id token of ``tag``."""
        found: set[KeywordCategory] = set()
        for token in attribute_tokens(tag):
            found |= self.categorize(token)
        return frozenset(found)

    def class_weight(self, tag: Tag, bonus: float, penalty: float) -> float:
        """One bonus and one penalty at most, however many keywords match."""
        categories = self.match(tag)
        weight = 0.0
        if KeywordCategory.POSITIVE in categories:
            weight += bonus
        if KeywordCategory.NEGATIVE in categories:
            weight -= penalty
        return weight
