"""Scrape orchestrator: fetch, extract, validate."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from pagevault.config import get_extract_config
from pagevault.errors import FetchError, InsufficientContentError, InvalidURLError
from pagevault.extract import extract
from pagevault.fetcher import Fetcher
from pagevault.models import ExtractionResult, FetchRequest, RunState, ScrapeRun

logger = logging.getLogger(__name__)


def validate_url(url: str) -> FetchRequest:
    """Reject anything that is not an absolute http(s) URL with a host."""
    if not url or not isinstance(url, str):
        raise InvalidURLError("URL is required")
    try:
        parsed = urlparse(url.strip())
    except ValueError as exc:
        raise InvalidURLError(
            "Invalid URL format. Please include http:// or https://"
        ) from exc
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidURLError("Invalid URL format. Please include http:// or https://")
    return FetchRequest(url=url.strip())


async def scrape(
    url: str,
    config: dict | None = None,
    *,
    fetcher: Fetcher | None = None,
    run: ScrapeRun | None = None,
) -> ExtractionResult:
    """Fetch ``url`` and extract its main text.

    Raises InvalidURLError, FetchError or InsufficientContentError. Pass a
    ScrapeRun to observe the state transitions and per-profile attempts.
    """
    request = validate_url(url)
    run = run if run is not None else ScrapeRun(url=request.url)
    fetcher = fetcher if fetcher is not None else Fetcher(config)
    min_chars = get_extract_config(config)["min_content_chars"]

    logger.info("Starting scrape for %s", request.url)
    run.state = RunState.FETCHING
    try:
        html = await fetcher.fetch(request.url, attempts=run.attempts)
    except FetchError as exc:
        logger.error("Scraping error for %s: %s", request.url, exc.message)
        run.finish(RunState.FAILED, exc)
        raise

    run.state = RunState.EXTRACTING
    try:
        result = extract(html, config)
    except Exception as exc:
        logger.exception("Extraction failed for %s", request.url)
        run.finish(RunState.FAILED, exc)
        raise

    run.state = RunState.VALIDATING
    if len(result.text) < min_chars:
        exc = InsufficientContentError(len(result.text))
        logger.warning(
            "Only %d characters extracted from %s", len(result.text), request.url,
        )
        run.finish(RunState.FAILED, exc)
        raise exc

    run.finish(RunState.DONE)
    logger.info("Scraping completed for %s (%d words)", request.url, result.word_count)
    return result
