"""Load configuration from YAML with env var substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from pagevault.identities import DEFAULT_IDENTITY_PROFILES, profiles_from_config
from pagevault.models import IdentityProfile

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text())
    return _resolve_env_vars(raw or {})


def _as_bool(value: Any) -> bool:
    # Env-substituted values arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def get_fetch_config(config: dict | None) -> dict:
    """HTTP settings for page retrieval."""
    cfg = (config or {}).get("fetch", {}) or {}
    return {
        "timeout": float(cfg.get("timeout", 15)),
        "max_redirects": int(cfg.get("max_redirects", 5)),
        "verify_tls": _as_bool(cfg.get("verify_tls", False)),
        "probe_timeout": float(cfg.get("probe_timeout", 5)),
    }


def get_identity_profiles(config: dict | None) -> list[IdentityProfile]:
    """Configured identity profiles, or the built-in ones."""
    entries = ((config or {}).get("fetch", {}) or {}).get("identities")
    if entries:
        return profiles_from_config(entries)
    return list(DEFAULT_IDENTITY_PROFILES)


def get_extract_config(config: dict | None) -> dict:
    """Thresholds used by content extraction and validation."""
    cfg = (config or {}).get("extract", {}) or {}
    return {
        "max_chars": int(cfg.get("max_chars", 10_000)),
        "selector_threshold": int(cfg.get("selector_threshold", 100)),
        "min_content_chars": int(cfg.get("min_content_chars", 50)),
    }


def get_log_path(config: dict | None) -> str | None:
    """Path of the rotating log file, or None to log to the console only."""
    return ((config or {}).get("logging", {}) or {}).get("file")
