"""Serverless entry point: one confirmation run per invocation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from .config import Settings, load_settings
from .runner.job import run_confirmation_once
from .store import wait_for_pending_writes

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str) -> None:
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # basicConfig is a no-op when the runtime already installed a root handler (AWS Lambda).
    logging.getLogger().setLevel(resolved)


async def _invoke(settings: Settings) -> Dict[str, Any]:
    result = await run_confirmation_once(settings)
    await wait_for_pending_writes()
    return result


def lambda_handler(event: Any = None, context: Any = None) -> Dict[str, Any]:
    settings = load_settings()
    configure_logging(settings.log_level)
    return asyncio.run(_invoke(settings))
