"""Tests for the request handlers."""

from __future__ import annotations

import httpx
import pytest

from pagevault.models import ExtractionResult, ScrapeSession
from pagevault.service import (
    SCRAPE_SUGGESTIONS,
    handle_decrypt,
    handle_encrypt,
    handle_probe,
    handle_scrape,
)

PAGE = (
    "<html><head><title>Docs</title>"
    '<meta name="description" content="Reference pages"></head>'
    "<body><article>" + "Documentation paragraph with plenty of words. " * 5
    + "</article></body></html>"
)


def _ok(request):
    return httpx.Response(200, text=PAGE)


@pytest.mark.asyncio
async def test_scrape_success(make_fetcher):
    session = ScrapeSession()
    status, body = await handle_scrape(
        {"url": "https://example.com/docs"},
        fetcher=make_fetcher(_ok),
        session=session,
    )
    assert status == 200
    assert body["success"] is True
    assert body["title"] == "Docs"
    assert body["description"] == "Reference pages"
    assert body["url"] == "https://example.com/docs"
    assert body["wordCount"] == len(body["text"].split())
    assert session.last_text == body["text"]
    assert session.last_url == "https://example.com/docs"


@pytest.mark.asyncio
async def test_scrape_missing_url():
    status, body = await handle_scrape({})
    assert status == 400
    assert body == {"success": False, "error": "URL is required"}


@pytest.mark.asyncio
async def test_scrape_invalid_url():
    status, body = await handle_scrape({"url": "example.com"})
    assert status == 400
    assert "http://" in body["error"]


@pytest.mark.asyncio
async def test_scrape_url_without_host_rejected_before_fetch(make_fetcher):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text=PAGE)

    status, body = await handle_scrape({"url": "http://:80"}, fetcher=make_fetcher(handler))
    assert status == 400
    assert body["success"] is False
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code,message",
    [
        (403, "Access forbidden. The website is blocking scraping requests."),
        (404, "Page not found (404). Please check the URL."),
        (429, "Too many requests. The website is rate limiting."),
        (502, "Failed to scrape website"),
    ],
)
async def test_scrape_http_errors(make_fetcher, status_code, message):
    def handler(request):
        return httpx.Response(status_code)

    status, body = await handle_scrape(
        {"url": "https://example.com"}, fetcher=make_fetcher(handler),
    )
    assert status == 500
    assert body["success"] is False
    assert body["error"] == message
    assert str(status_code) in body["details"]
    assert body["suggestions"] == SCRAPE_SUGGESTIONS


@pytest.mark.asyncio
async def test_scrape_timeout_message(make_fetcher):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    status, body = await handle_scrape(
        {"url": "https://example.com"}, fetcher=make_fetcher(handler),
    )
    assert status == 500
    assert body["error"].startswith("Request timed out")


@pytest.mark.asyncio
async def test_scrape_insufficient_content(make_fetcher):
    def handler(request):
        return httpx.Response(200, text="<html><body>tiny</body></html>")

    session = ScrapeSession()
    status, body = await handle_scrape(
        {"url": "https://example.com"}, fetcher=make_fetcher(handler), session=session,
    )
    assert status == 400
    assert body["error"].startswith("Could not extract meaningful content")
    assert session.last_result is None


@pytest.mark.asyncio
async def test_sessions_are_isolated(make_fetcher):
    first, second = ScrapeSession(), ScrapeSession()
    await handle_scrape(
        {"url": "https://example.com"}, fetcher=make_fetcher(_ok), session=first,
    )
    assert first.last_text
    assert second.last_text is None


@pytest.mark.asyncio
async def test_probe(make_fetcher):
    def handler(request):
        return httpx.Response(200, headers={"Server": "test"})

    status, body = await handle_probe(
        {"url": "https://example.com"}, fetcher=make_fetcher(handler),
    )
    assert status == 200
    assert body["accessible"] is True
    assert body["status"] == 200
    assert body["headers"]["server"] == "test"


@pytest.mark.asyncio
async def test_probe_failure(make_fetcher):
    def handler(request):
        return httpx.Response(503)

    status, body = await handle_probe(
        {"url": "https://example.com"}, fetcher=make_fetcher(handler),
    )
    assert body["success"] is False
    assert body["accessible"] is False
    assert body["error"]


@pytest.mark.asyncio
async def test_probe_invalid_url():
    status, body = await handle_probe({"url": "nope"})
    assert body["accessible"] is False


def test_encrypt_decrypt_round_trip():
    status, body = handle_encrypt({"text": "page text", "key": "longenough"})
    assert status == 200
    assert body["success"] is True

    status, body = handle_decrypt({"text": body["encrypted"], "key": "longenough"})
    assert status == 200
    assert body == {"success": True, "decrypted": "page text"}


def test_encrypt_requires_text_and_key():
    status, body = handle_encrypt({"text": "page text"})
    assert status == 400
    assert body["error"] == "Text and key are required"


def test_encrypt_short_key():
    status, body = handle_encrypt({"text": "page text", "key": "short"})
    assert status == 400
    assert "at least 8" in body["error"]


def test_encrypt_uses_session_text():
    session = ScrapeSession()
    status, body = handle_encrypt({"key": "longenough"}, session=session)
    assert status == 400

    session.last_result = ExtractionResult(
        text="Title: T\n\nDescription: \n\nbody", title="T", description="", word_count=5,
    )
    status, body = handle_encrypt({"key": "longenough"}, session=session)
    assert status == 200
    assert session.last_encrypted == body["encrypted"]

    status, body = handle_decrypt({"key": "longenough"}, session=session)
    assert body["decrypted"] == session.last_text


def test_decrypt_wrong_key():
    _, body = handle_encrypt({"text": "page text", "key": "longenough"})
    status, body = handle_decrypt({"text": body["encrypted"], "key": "different-key"})
    assert status == 500
    assert body["error"] == "Decryption failed"
    assert body["details"] == "Decryption failed. Invalid key or corrupted data."


def test_decrypt_malformed():
    status, body = handle_decrypt({"text": "not-a-blob", "key": "longenough"})
    assert status == 500
    assert body["details"] == "Decryption failed. Invalid key or corrupted data."
