"""
Shared fixtures for ArticleCore tests.

Documents are kept small and hand-written so scores can be reasoned about:
a prose paragraph of 100-199 characters with two commas scores
1 (base) + 2 (commas) + 1 (length) = 4.
"""

from __future__ import annotations

import logging
from typing import Generator

import pytest
import structlog
from bs4 import BeautifulSoup

from articlecore.config import ExtractionConfig

BASE_URL = "https://example.com"

PROSE = [
    "The river rose slowly through the night, and by morning the lower fields were under water, so the farmers moved their cattle uphill.",
    "Engineers from the county arrived before noon, surveyed the old levee on foot, and agreed that the eastern wall had to be reinforced.",
    "Volunteers filled sandbags in the school parking lot, passed them hand to hand along a line, and stacked them against the weak spots.",
    "By evening the water had crested two feet below the top of the wall, close enough that nobody in town slept, not even the mayor.",
    "The next day the sun came out, the current slowed, and the first families walked back down the hill to look at what was left.",
    "Officials later said the response was quick, well organized, and cheaper than the repairs that a failed levee would have needed.",
]

MINIMAL_ARTICLE = (
    "<html><head><title>Foo | Site</title></head><body>"
    "<article><h1>Foo</h1><p>Hello world, this is a test.</p></article>"
    "</body></html>"
)

NAVIGATION_ONLY = (
    "<html><head><title>Index</title></head><body>"
    '<header><a href="/">Home</a></header>'
    '<nav><ul><li><a href="/news">News</a></li><li><a href="/sport">Sport</a></li></ul></nav>'
    "<footer>Copyright Example</footer>"
    "</body></html>"
)

NEWS_PAGE = f"""<!DOCTYPE html>
<html>
<head>
  <title>Sample Story Headline - Example News</title>
  <script>var tracker = 1;</script>
  <style>p {{ color: red; }}</style>
</head>
<body>
  <header class="masthead">
    <nav><a href="/">Home</a> <a href="/world">World</a> <a href="/sport">Sport</a></nav>
  </header>
  <!-- main content -->
  <div id="main">
    <article class="post">
      <h1>Sample Story Headline</h1>
      <p>{PROSE[0]}</p>
      <p>{PROSE[1]} See <a href="/related/levees">our levee explainer</a> for background.</p>
      <img src="/images/lead.jpg" alt="Flooded fields" onclick="zoom()" style="width:100%">
      <div class="share-buttons"><a href="https://twitter.com/share">Tweet</a></div>
      <p>{PROSE[2]}</p>
      <p style="display:none">Subscribe to read hidden teaser text that nobody should ever see.</p>
    </article>
    <aside class="sidebar">
      <ul>
        <li><a href="/most-read/1">Most read story one</a></li>
        <li><a href="/most-read/2">Most read story two</a></li>
      </ul>
    </aside>
  </div>
  <div id="comments" class="comments">
    <p>Great article, thanks for writing it, I really enjoyed reading it today.</p>
  </div>
  <footer><p>Copyright 2024 Example News. All rights reserved.</p></footer>
</body>
</html>
"""


def prose_div(paragraphs: list[str], attrs: str = "") -> str:
    """A div holding one <p> per paragraph."""
    inner = "".join(f"<p>{text}</p>" for text in paragraphs)
    return f"<div{attrs}>{inner}</div>"


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def minimal_article() -> str:
    return MINIMAL_ARTICLE


@pytest.fixture
def navigation_only() -> str:
    return NAVIGATION_ONLY


@pytest.fixture
def news_page() -> str:
    return NEWS_PAGE


@pytest.fixture
def two_part_article() -> str:
    """Two adjacent divs of three prose paragraphs each."""
    return (
        "<html><head><title>Two Parts</title></head><body>"
        + prose_div(PROSE[:3])
        + prose_div(PROSE[3:])
        + "</body></html>"
    )


@pytest.fixture
def news_soup(news_page: str) -> BeautifulSoup:
    return BeautifulSoup(news_page, "html.parser")


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig()


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Restore default logging after a test reconfigures it."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
