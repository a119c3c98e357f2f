"""Request handlers producing the JSON envelopes returned to clients.

Each handler takes the decoded request payload and returns
``(http_status, body)``. Routing and persistence live elsewhere.
"""

from __future__ import annotations

import logging

from pagevault import cipher
from pagevault.errors import (
    CryptoError,
    CryptoErrorKind,
    FetchError,
    InsufficientContentError,
    InvalidURLError,
)
from pagevault.fetcher import Fetcher
from pagevault.models import ScrapeSession
from pagevault.pipeline import scrape, validate_url

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 8

SCRAPE_SUGGESTIONS = [
    "Make sure the URL is correct and includes http:// or https://",
    "Some websites block automated scraping",
    "Try a different website (e.g., https://example.com)",
    "The website might require JavaScript rendering",
]


def _fail(status: int, error: str, **extra) -> tuple[int, dict]:
    return status, {"success": False, "error": error, **extra}


def check_passphrase(key: str) -> None:
    """Enforce the minimum passphrase length before encrypting."""
    if len(key) < MIN_KEY_LENGTH:
        raise CryptoError(
            CryptoErrorKind.SHORT_KEY,
            f"Key must be at least {MIN_KEY_LENGTH} characters",
        )


async def handle_scrape(
    payload: dict,
    config: dict | None = None,
    *,
    session: ScrapeSession | None = None,
    fetcher: Fetcher | None = None,
) -> tuple[int, dict]:
    url = payload.get("url")
    if not url:
        return _fail(400, "URL is required")

    try:
        result = await scrape(url, config, fetcher=fetcher)
    except InvalidURLError as exc:
        return _fail(400, str(exc))
    except InsufficientContentError as exc:
        return _fail(400, str(exc))
    except FetchError as exc:
        return _fail(
            500, exc.user_message,
            details=exc.message,
            suggestions=list(SCRAPE_SUGGESTIONS),
        )
    except Exception as exc:
        logger.exception("Unexpected scraping error for %s", url)
        return _fail(
            500, "Failed to scrape website",
            details=str(exc),
            suggestions=list(SCRAPE_SUGGESTIONS),
        )

    if session is not None:
        session.last_url = url
        session.last_result = result

    return 200, {"success": True, **result.to_dict(), "url": url}


async def handle_probe(
    payload: dict,
    config: dict | None = None,
    *,
    fetcher: Fetcher | None = None,
) -> tuple[int, dict]:
    url = payload.get("url")
    try:
        request = validate_url(url)
    except InvalidURLError as exc:
        return 200, {"success": False, "accessible": False, "error": str(exc)}

    fetcher = fetcher if fetcher is not None else Fetcher(config)
    probe = await fetcher.probe(request.url)
    if not probe.accessible:
        return 200, {"success": False, "accessible": False, "error": probe.error}
    return 200, {
        "success": True,
        "accessible": True,
        "status": probe.status,
        "headers": probe.headers,
    }


def handle_encrypt(payload: dict, *, session: ScrapeSession | None = None) -> tuple[int, dict]:
    text = payload.get("text") or (session.last_text if session else None)
    key = payload.get("key")
    if not text or not key:
        return _fail(400, "Text and key are required")
    if not isinstance(text, str) or not isinstance(key, str):
        return _fail(400, "Text and key must be strings")

    try:
        check_passphrase(key)
    except CryptoError as exc:
        return _fail(400, exc.message)

    encrypted = cipher.encrypt(text, key)
    if session is not None:
        session.last_encrypted = encrypted
    return 200, {"success": True, "encrypted": encrypted}


def handle_decrypt(payload: dict, *, session: ScrapeSession | None = None) -> tuple[int, dict]:
    text = payload.get("text") or (session.last_encrypted if session else None)
    key = payload.get("key")
    if not text or not key:
        return _fail(400, "Text and key are required")
    if not isinstance(text, str) or not isinstance(key, str):
        return _fail(400, "Text and key must be strings")

    try:
        decrypted = cipher.decrypt(text, key)
    except CryptoError as exc:
        logger.warning("Decryption error (%s)", exc.kind.value)
        return _fail(500, "Decryption failed", details=exc.message)
    return 200, {"success": True, "decrypted": decrypted}
