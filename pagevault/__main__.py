"""CLI entrypoint: python -m pagevault {scrape URL|probe URL|encrypt KEY|decrypt KEY}."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from pagevault.config import get_log_path, load_config
from pagevault.service import (
    handle_decrypt,
    handle_encrypt,
    handle_probe,
    handle_scrape,
)


def setup_logging(config: dict) -> None:
    """Log to stderr, and to a rotating file when ``logging.file`` is set.

    stdout is reserved for the JSON result.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_path = get_log_path(config)
    if log_path:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5 * 1024 * 1024, backupCount=3,
            ),
        )

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


logger = logging.getLogger("pagevault")


async def cmd_scrape(config: dict, arg: str) -> tuple[int, dict]:
    """Fetch a page and print its extracted text."""
    return await handle_scrape({"url": arg}, config)


async def cmd_probe(config: dict, arg: str) -> tuple[int, dict]:
    """Check whether a URL answers a HEAD request."""
    return await handle_probe({"url": arg}, config)


def cmd_encrypt(config: dict, arg: str) -> tuple[int, dict]:
    """Encrypt stdin with the given passphrase."""
    return handle_encrypt({"text": sys.stdin.read(), "key": arg})


def cmd_decrypt(config: dict, arg: str) -> tuple[int, dict]:
    """Decrypt a ``hexnonce:hexciphertext`` blob read from stdin."""
    return handle_decrypt({"text": sys.stdin.read().strip(), "key": arg})


COMMANDS = {
    "scrape": cmd_scrape,
    "probe": cmd_probe,
    "encrypt": cmd_encrypt,
    "decrypt": cmd_decrypt,
}


def _load(path: str | None) -> dict:
    # An explicit CONFIG_PATH must exist; the default file is optional
    if path:
        return load_config(path)
    if Path("config.yaml").exists():
        return load_config("config.yaml")
    return {}


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2 or argv[0] not in COMMANDS:
        available = "|".join(f"{name} ARG" for name in COMMANDS)
        print(f"Usage: python -m pagevault {{{available}}}", file=sys.stderr)
        return 1

    command, arg = argv[0], argv[1]
    config = _load(os.environ.get("CONFIG_PATH"))
    setup_logging(config)
    handler = COMMANDS[command]

    if inspect.iscoroutinefunction(handler):
        status, body = asyncio.run(handler(config, arg))
    else:
        status, body = handler(config, arg)

    print(json.dumps(body, indent=2, ensure_ascii=False))
    logger.debug("%s finished with status %d", command, status)
    return 0 if body.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
