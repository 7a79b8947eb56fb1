"""
Unit tests for the CandidateScorer and ScoreTable.
"""

import pytest
from bs4 import BeautifulSoup
from hypothesis import given, settings
from hypothesis import strategies as st

from articlecore.config import ScoringConfig
from articlecore.extractor.scorer import CandidateScorer

# 150 characters, no commas: 1 base point + 1 length point
LONG_TEXT = "a" * 150

NEUTRAL_CLASSES = ["wrapper", "col", "row", "inner", "x1", "layout"]
POSITIVE_CLASSES = ScoringConfig().positive_keywords
NEGATIVE_CLASSES = ScoringConfig().negative_keywords


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestContentScore:
    """Test cases for the per-node content score."""

    def setup_method(self):
        self.scorer = CandidateScorer()

    def test_short_text_is_not_scored(self):
        assert self.scorer.content_score(soup_of("<p>Too short.</p>").p) is None

    def test_length_points(self):
        assert self.scorer.content_score(soup_of(f"<p>{LONG_TEXT}</p>").p) == 2.0

    def test_length_points_are_capped(self):
        assert self.scorer.content_score(soup_of(f"<p>{'a' * 1000}</p>").p) == 4.0

    def test_comma_bonus(self):
        text = "x, " * 10
        assert self.scorer.content_score(soup_of(f"<p>{text}</p>").p) == 11.0

    def test_inline_text_counts(self):
        soup = soup_of(f"<p><span>{LONG_TEXT[:75]}</span><b>{LONG_TEXT[75:]}</b></p>")
        assert self.scorer.content_score(soup.p) == 2.0

    def test_custom_constants(self):
        scorer = CandidateScorer(ScoringConfig(length_divisor=50, length_cap=10, comma_bonus=0.5))
        assert scorer.content_score(soup_of(f"<p>{LONG_TEXT}, more</p>").p) == 1 + 0.5 + 3


class TestScorePropagation:
    """Test cases for score propagation and initial weights."""

    def setup_method(self):
        self.scorer = CandidateScorer()

    def test_parent_and_grandparent(self):
        soup = soup_of(f"<body><div><p>{LONG_TEXT}</p></div></body>")
        table = self.scorer.score(soup)

        assert table.score_of(soup.p) == 2.0
        assert table.score_of(soup.div) == 5.0 + 2.0
        assert table.score_of(soup.body) == 1.0

    def test_great_grandparent_gets_nothing(self):
        soup = soup_of(f"<body><section><div><p>{LONG_TEXT}</p></div></section></body>")
        table = self.scorer.score(soup)

        assert table.score_of(soup.section) == 10.0 + 1.0
        assert table.get(soup.body) is None

    def test_tag_weight(self):
        soup = soup_of(f"<body><article><p>{LONG_TEXT}</p></article></body>")
        assert self.scorer.score(soup).score_of(soup.article) == 12.0

    def test_negative_class_penalty(self):
        soup = soup_of(f'<body><div class="sidebar"><p>{LONG_TEXT}</p></div></body>')
        assert self.scorer.score(soup).score_of(soup.div) == 5.0 - 25.0 + 2.0

    def test_one_bonus_and_one_penalty_per_node(self):
        soup = soup_of(f'<body><div class="post content comments sidebar"><p>{LONG_TEXT}</p></div></body>')
        assert self.scorer.score(soup).score_of(soup.div) == 5.0 + 2.0

    def test_nested_blocks_do_not_count_twice(self):
        soup = soup_of(f"<body><div>{'b' * 150}<p>{LONG_TEXT}</p></div></body>")
        table = self.scorer.score(soup)

        # Own text point for the div plus full credit from its paragraph
        assert table.score_of(soup.div) == 5.0 + 2.0 + 2.0
        assert table.score_of(soup.p) == 2.0

    def test_wrapper_without_own_text_is_only_credited(self):
        soup = soup_of(f"<body><div>Short intro<p>{LONG_TEXT}</p></div></body>")
        assert self.scorer.score(soup).score_of(soup.div) == 7.0

    def test_link_density_scaling(self):
        soup = soup_of(f'<body><div><p><a href="/x">{LONG_TEXT}</a></p></div></body>')
        table = self.scorer.score(soup)

        assert table.score_of(soup.p) == 0.0
        assert table.score_of(soup.div) == 0.0

    def test_link_density_scaling_can_be_disabled(self):
        scorer = CandidateScorer(ScoringConfig(scale_by_link_density=False))
        soup = soup_of(f'<body><div><p><a href="/x">{LONG_TEXT}</a></p></div></body>')
        assert scorer.score(soup).score_of(soup.p) == 2.0

    def test_landmark_text_stays_inside_the_landmark(self):
        soup = soup_of(f"<body><footer><p>{LONG_TEXT}</p></footer></body>")
        table = self.scorer.score(soup)

        assert table.get(soup.footer) is not None
        assert table.get(soup.body) is None

    def test_credit_within_a_landmark(self):
        soup = soup_of(f'<body><div id="wrap"><nav><div><p>{LONG_TEXT}</p></div></nav></div></body>')
        table = self.scorer.score(soup)

        assert table.score_of(soup.nav.div) == 5.0 + 2.0
        assert table.get(soup.nav) is not None
        assert table.get(soup.find(id="wrap")) is None

    def test_landmark_tags_are_configurable(self):
        scorer = CandidateScorer(landmark_tags=[])
        soup = soup_of(f"<body><footer><p>{LONG_TEXT}</p></footer></body>")
        assert scorer.score(soup).score_of(soup.body) == 1.0

    def test_does_not_mutate_tree(self):
        soup = soup_of(f"<body><div><p>{LONG_TEXT}</p></div></body>")
        before = str(soup)
        self.scorer.score(soup)
        assert str(soup) == before


class TestScoreTable:
    """Test cases for ScoreTable."""

    def setup_method(self):
        self.scorer = CandidateScorer()

    def test_identical_nodes_have_separate_entries(self):
        soup = soup_of(f"<body><div><p>{LONG_TEXT}</p><p>{LONG_TEXT}</p></div></body>")
        table = self.scorer.score(soup)
        first, second = soup.find_all("p")

        assert len(table) == 4
        assert table.score_of(first) == table.score_of(second) == 2.0
        assert first in table and second in table

    def test_candidates_best_first_ties_in_document_order(self):
        soup = soup_of(f"<body><div><p>{LONG_TEXT}</p></div><div><p>{LONG_TEXT}</p></div></body>")
        candidates = self.scorer.score(soup).candidates()
        first, second = soup.find_all("div")

        assert candidates[0].node is first
        assert candidates[1].node is second
        assert candidates[0].ancestors == (0,)

    def test_unscored_node(self):
        soup = soup_of(f"<body><div><p>{LONG_TEXT}</p><span>x</span></div></body>")
        table = self.scorer.score(soup)

        assert table.get(soup.span) is None
        with pytest.raises(KeyError):
            table.score_of(soup.span)

    def test_deterministic(self, news_soup):
        first = list(self.scorer.score(news_soup))
        second = list(self.scorer.score(news_soup))
        assert first == second


def _div_score(classes: list[str]) -> float:
    soup = soup_of(f'<body><div class="{" ".join(classes)}"><p>{LONG_TEXT}, with a comma</p></div></body>')
    return CandidateScorer().score(soup).score_of(soup.div)


class TestKeywordMonotonicity:
    """Adding keywords moves a node's score in one direction only."""

    @settings(max_examples=50, deadline=None)
    @given(
        base=st.lists(st.sampled_from(NEUTRAL_CLASSES + NEGATIVE_CLASSES), max_size=3),
        extra=st.lists(st.sampled_from(POSITIVE_CLASSES), min_size=1, max_size=3),
    )
    def test_positive_keywords_never_lower_score(self, base, extra):
        assert _div_score(base + extra) >= _div_score(base)

    @settings(max_examples=50, deadline=None)
    @given(
        base=st.lists(st.sampled_from(NEUTRAL_CLASSES + POSITIVE_CLASSES), max_size=3),
        extra=st.lists(st.sampled_from(NEGATIVE_CLASSES), min_size=1, max_size=3),
    )
    def test_negative_keywords_never_raise_score(self, base, extra):
        assert _div_score(base + extra) <= _div_score(base)
