"""Sequential fallback across an ordered list of candidates."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

C = TypeVar("C")
T = TypeVar("T")


async def try_in_order(
    fn: Callable[[C], Awaitable[T]],
    candidates: Iterable[C],
    *,
    retry_on: tuple[type[Exception], ...],
    on_failure: Callable[[C, Exception], None] | None = None,
) -> T:
    """Call ``fn(candidate)`` for each candidate until one succeeds.

    Attempts run strictly one after another and stop at the first success.
    Exceptions listed in ``retry_on`` move on to the next candidate; anything
    else is raised immediately. When every candidate fails, the last
    candidate's exception is raised.
    """
    candidates = list(candidates)
    if not candidates:
        raise ValueError("try_in_order needs at least one candidate")

    last_exc: Exception | None = None
    for attempt, candidate in enumerate(candidates, start=1):
        try:
            return await fn(candidate)
        except retry_on as exc:
            last_exc = exc
            if on_failure is not None:
                on_failure(candidate, exc)
            if attempt < len(candidates):
                logger.warning(
                    "Attempt %d/%d failed: %s, trying next",
                    attempt, len(candidates), exc,
                )
            else:
                logger.warning(
                    "Attempt %d/%d failed: %s, giving up",
                    attempt, len(candidates), exc,
                )

    raise last_exc  # type: ignore[misc]
