"""Built-in client identity profiles tried in order by the fetcher."""

from __future__ import annotations

from pagevault.models import IdentityProfile

DEFAULT_IDENTITY_PROFILES: tuple[IdentityProfile, ...] = (
    IdentityProfile(
        name="chrome-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
    ),
    IdentityProfile(
        name="chrome-macos",
        user_agent=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
    ),
    IdentityProfile(
        name="chrome-linux",
        user_agent=(
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
    ),
)


def profiles_from_config(entries: list[dict]) -> list[IdentityProfile]:
    """Build profiles from ``fetch.identities`` config entries.

    Each entry needs ``user_agent``; ``name`` and extra ``headers`` are optional.
    """
    profiles = []
    for i, entry in enumerate(entries):
        user_agent = entry.get("user_agent", "")
        if not user_agent:
            raise ValueError(f"Identity #{i + 1} is missing 'user_agent'")
        profiles.append(
            IdentityProfile(
                name=entry.get("name", f"identity-{i + 1}"),
                user_agent=user_agent,
                headers=dict(entry.get("headers") or {}),
            ),
        )
    return profiles
