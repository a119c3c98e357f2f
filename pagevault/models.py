"""Core data models for the scrape pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

_HEX_RE = re.compile(r"[0-9a-fA-F]*")

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class IdentityProfile:
    """A client presentation used for one fetch attempt."""

    name: str
    user_agent: str
    headers: dict[str, str] = field(default_factory=dict)

    def request_headers(self) -> dict[str, str]:
        """Browser-like header set for this profile; ``headers`` override defaults."""
        base = {
            "User-Agent": self.user_agent,
            "Accept": DEFAULT_ACCEPT,
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate, br",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
            "Cache-Control": "max-age=0",
        }
        base.update(self.headers)
        return base


@dataclass(frozen=True)
class FetchRequest:
    url: str


@dataclass
class FetchAttempt:
    """Outcome of a single profile's GET."""

    profile: IdentityProfile
    ok: bool
    body: str | None = None
    error_kind: str | None = None
    message: str | None = None


@dataclass
class ExtractionResult:
    """Normalized page text plus metadata."""

    text: str
    title: str
    description: str
    word_count: int

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "title": self.title,
            "description": self.description,
            "wordCount": self.word_count,
        }


@dataclass(frozen=True)
class EncryptedBlob:
    """Nonce and ciphertext, serialized as ``hex(nonce):hex(ciphertext)``."""

    nonce: bytes
    ciphertext: bytes

    def serialize(self) -> str:
        return f"{self.nonce.hex()}:{self.ciphertext.hex()}"

    @classmethod
    def parse(cls, text: str) -> EncryptedBlob:
        """Split on the first ``:`` and decode both halves.

        Raises ValueError when the separator is missing or either half is not hex.
        """
        nonce_hex, sep, ciphertext_hex = text.partition(":")
        if not sep:
            raise ValueError("missing ':' separator")
        # bytes.fromhex would silently skip embedded whitespace
        for half in (nonce_hex, ciphertext_hex):
            if not _HEX_RE.fullmatch(half):
                raise ValueError(f"not a hex string: {half[:32]!r}")
        return cls(
            nonce=bytes.fromhex(nonce_hex),
            ciphertext=bytes.fromhex(ciphertext_hex),
        )


class RunState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScrapeRun:
    """Record of a single scrape invocation."""

    url: str
    state: RunState = RunState.IDLE
    attempts: list[FetchAttempt] = field(default_factory=list)
    error: Exception | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    def finish(self, state: RunState, error: Exception | None = None) -> None:
        self.state = state
        self.error = error
        self.finished_at = datetime.now(timezone.utc)


@dataclass
class ProbeResult:
    """Result of a HEAD accessibility check."""

    url: str
    accessible: bool
    status: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None


@dataclass
class ScrapeSession:
    """Per-caller context holding the most recent scrape and encryption.

    Each caller owns its own session; nothing here is shared between requests.
    """

    last_url: str | None = None
    last_result: ExtractionResult | None = None
    last_encrypted: str | None = None

    @property
    def last_text(self) -> str | None:
        return self.last_result.text if self.last_result else None
