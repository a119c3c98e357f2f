"""Main-content extraction from raw HTML."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from pagevault.config import get_extract_config
from pagevault.models import ExtractionResult

logger = logging.getLogger(__name__)

NOISE_TAGS = ("script", "style", "nav", "footer", "header", "iframe", "noscript", "svg")
NOISE_SELECTORS = (".advertisement", ".ad", ".sidebar", ".cookie-banner", ".popup")

CONTENT_SELECTORS = (
    "main",
    "article",
    '[role="main"]',
    ".content",
    ".main-content",
    "#content",
    "#main",
    ".post-content",
    ".article-content",
    "body",
)

_WHITESPACE_RE = re.compile(r"\s+")
_NEWLINES_RE = re.compile(r"\n+")


def _strip_noise(soup: BeautifulSoup) -> None:
    """Remove chrome and ad containers in place."""
    matches = soup.find_all(list(NOISE_TAGS)) + soup.select(", ".join(NOISE_SELECTORS))
    for tag in matches:
        # Already gone if an ancestor matched first
        if tag.decomposed:
            continue
        tag.decompose()


def _body_text(soup: BeautifulSoup) -> str:
    root = soup.body if soup.body is not None else soup
    return root.get_text()


def select_main_text(soup: BeautifulSoup, threshold: int = 100) -> str:
    """Text of the first selector whose matches together exceed ``threshold``."""
    for selector in CONTENT_SELECTORS:
        matches = soup.select(selector)
        if not matches:
            continue
        text = "".join(el.get_text() for el in matches)
        if len(text) > threshold:
            logger.debug("Found content using selector: %s", selector)
            return text

    logger.debug("Using body text as fallback")
    return _body_text(soup)


def normalize_text(text: str) -> str:
    text = _WHITESPACE_RE.sub(" ", text)
    text = _NEWLINES_RE.sub("\n", text)
    return text.strip()


def _title(soup: BeautifulSoup) -> str:
    title = "".join(el.get_text() for el in soup.find_all("title")).strip()
    if title:
        return title
    h1 = soup.find("h1")
    if h1 is not None:
        title = h1.get_text().strip()
    return title or "Untitled"


def _description(soup: BeautifulSoup) -> str:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        tag = soup.find("meta", attrs=attrs)
        if tag is not None and tag.get("content"):
            return tag["content"]
    return ""


def extract(html: str, config: dict | None = None) -> ExtractionResult:
    """Convert an HTML document to normalized text with title and description."""
    cfg = get_extract_config(config)
    soup = BeautifulSoup(html, "html.parser")

    _strip_noise(soup)
    title = _title(soup)
    description = _description(soup)

    text = normalize_text(select_main_text(soup, cfg["selector_threshold"]))
    full_text = f"Title: {title}\n\nDescription: {description}\n\n{text}"
    limited = full_text[: cfg["max_chars"]]

    logger.info("Extracted %d characters", len(limited))
    return ExtractionResult(
        text=limited,
        title=title,
        description=description,
        word_count=len(limited.split()),
    )
