from __future__ import annotations

import re

from bs4 import BeautifulSoup

MAX_TEXT_CHARS = 12_000

# Removed together with their content before anything else
NOISE_TAGS = ("script", "style", "nav", "footer")
BLOCK_TAGS = ("br", "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr", "dt", "dd")

TAG_PATTERN = re.compile(r"<[^>]+>")
HORIZONTAL_SPACE_PATTERN = re.compile(r"[ \t]+")
LINE_EDGE_SPACE_PATTERN = re.compile(r"[ \t]*\n[ \t]*")
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n")


def _collapse_whitespace(text: str) -> str:
    text = HORIZONTAL_SPACE_PATTERN.sub(" ", text.replace("\xa0", " "))
    text = LINE_EDGE_SPACE_PATTERN.sub("\n", text)
    text = BLANK_LINES_PATTERN.sub("\n\n", text)
    return text.strip()


def html_to_text(html: str, max_chars: int = MAX_TEXT_CHARS) -> str:
    """Reduce a web page to plain text with its line structure kept.

    Entities are decoded by the parser. A decoded ``&lt;`` is rewritten to
    ``‹`` so the text never reads as markup. Truncation to ``max_chars`` is
    silent and happens last.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")
    for noisy in soup.find_all(NOISE_TAGS):
        noisy.decompose()
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before("\n")
        block.insert_after("\n")

    text = soup.get_text().replace("<", "‹")
    return _collapse_whitespace(text)[:max_chars]


def strip_tags(markup: str) -> str:
    """Remove inline markup from short fields such as a recipe name."""
    return TAG_PATTERN.sub("", markup or "")
