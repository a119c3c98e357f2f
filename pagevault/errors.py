"""Error taxonomy for fetching, extraction and encryption."""

from __future__ import annotations

from enum import Enum


class PageVaultError(Exception):
    """Base class for all pagevault errors."""


class InvalidURLError(PageVaultError):
    """URL is malformed; raised before any network call."""


class FetchErrorKind(str, Enum):
    NOT_FOUND = "not_found"  # host does not resolve
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    FORBIDDEN = "forbidden"
    PAGE_NOT_FOUND = "page_not_found"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


FETCH_ERROR_MESSAGES = {
    FetchErrorKind.NOT_FOUND: "Website not found. Please check the URL.",
    FetchErrorKind.CONNECTION_REFUSED: "Connection refused. The website is not accessible.",
    FetchErrorKind.TIMEOUT: "Request timed out. The website is taking too long to respond.",
    FetchErrorKind.FORBIDDEN: "Access forbidden. The website is blocking scraping requests.",
    FetchErrorKind.PAGE_NOT_FOUND: "Page not found (404). Please check the URL.",
    FetchErrorKind.RATE_LIMITED: "Too many requests. The website is rate limiting.",
    FetchErrorKind.OTHER: "Failed to scrape website",
}


class FetchError(PageVaultError):
    """A page could not be retrieved."""

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return FETCH_ERROR_MESSAGES[self.kind]


class InsufficientContentError(PageVaultError):
    """Extraction produced too little text to be useful."""

    def __init__(self, length: int):
        super().__init__(
            "Could not extract meaningful content from the website. "
            "The site might be using JavaScript rendering or blocking scraping."
        )
        self.length = length


class CryptoErrorKind(str, Enum):
    SHORT_KEY = "short_key"
    MALFORMED_INPUT = "malformed_input"
    WRONG_KEY_OR_CORRUPT = "wrong_key_or_corrupt"


class CryptoError(PageVaultError):
    """Encryption or decryption failed."""

    def __init__(self, kind: CryptoErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
