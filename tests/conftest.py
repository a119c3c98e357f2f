"""Shared test fixtures."""

from __future__ import annotations

import httpx
import pytest

from pagevault.config import load_config
from pagevault.fetcher import Fetcher
from pagevault.models import IdentityProfile


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config with deterministic identities."""
    config_text = """
fetch:
  timeout: 2
  max_redirects: 3
  verify_tls: false
  identities:
    - name: alpha
      user_agent: "ua-alpha"
    - name: beta
      user_agent: "ua-beta"
      headers:
        Accept-Language: "de-DE"
    - name: gamma
      user_agent: "ua-gamma"

extract:
  max_chars: 10000
  selector_threshold: 100
  min_content_chars: 50

logging:
  file: "LOG_PATH_PLACEHOLDER"
"""
    log_path = str(tmp_path / "logs" / "pagevault.log")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("LOG_PATH_PLACEHOLDER", log_path))
    return load_config(str(cfg_path))


@pytest.fixture
def fake_profiles():
    return [
        IdentityProfile(name="alpha", user_agent="ua-alpha"),
        IdentityProfile(name="beta", user_agent="ua-beta"),
        IdentityProfile(name="gamma", user_agent="ua-gamma"),
    ]


@pytest.fixture
def make_fetcher(fake_profiles):
    """Build a Fetcher whose requests are answered by ``handler``."""

    def _make(handler, config: dict | None = None) -> Fetcher:
        return Fetcher(
            config,
            profiles=fake_profiles,
            transport=httpx.MockTransport(handler),
        )

    return _make
