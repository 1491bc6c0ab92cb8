"""Rendering engine lifecycle: one headless Chromium per export, never shared."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from playwright.async_api import Browser, async_playwright

from config import CHROMIUM_ARGS

logger = logging.getLogger(__name__)

# Zero-arg callable returning an async context manager that yields a Browser.
EngineFactory = Callable[[], AsyncContextManager[Browser]]


@asynccontextmanager
async def launch_engine() -> AsyncIterator[Browser]:
    """
    Launch a headless Chromium suitable for containers (no GPU, no OS sandbox,
    no /dev/shm) and close it on every exit path.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=list(CHROMIUM_ARGS))
        logger.info("ENGINE_LAUNCH version=%s", browser.version)
        try:
            yield browser
        finally:
            await browser.close()
            logger.info("ENGINE_CLOSE")
