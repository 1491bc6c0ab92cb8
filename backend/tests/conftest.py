"""Add backend to path so 'from exporting import ...' resolves when run from project root.

Also provides a fake rendering engine that records every page call with a
monotonic timestamp and counts launches/closes.
"""
import asyncio
import os
import sys
import time
from contextlib import asynccontextmanager

import pytest

_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from config import ExportSettings  # noqa: E402

FAKE_PDF = b"%PDF-1.7\n% fake a3 deck\n%%EOF\n"


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status


class FakePage:
    def __init__(self, engine: "FakeEngine") -> None:
        self.engine = engine

    async def goto(self, url, **kwargs):
        self.engine.record("goto", url=url, **kwargs)
        if self.engine.goto_error is not None:
            raise self.engine.goto_error
        if self.engine.goto_delay:
            await asyncio.sleep(self.engine.goto_delay)
        return FakeResponse(self.engine.status)

    async def evaluate(self, expression, arg=None):
        self.engine.record("evaluate", expression=expression, arg=arg)
        if self.engine.evaluate_error is not None:
            raise self.engine.evaluate_error
        if self.engine.ready_after is None:
            # Page never signals.
            await asyncio.Event().wait()
        await asyncio.sleep(self.engine.ready_after)
        self.engine.record("signal")
        return "signal"

    async def wait_for_timeout(self, timeout):
        self.engine.record("wait_for_timeout", timeout=timeout)
        await asyncio.sleep(timeout / 1000)

    async def emulate_media(self, **kwargs):
        self.engine.record("emulate_media", **kwargs)

    async def pdf(self, **options):
        self.engine.record("pdf", **options)
        if self.engine.pdf_error is not None:
            raise self.engine.pdf_error
        return self.engine.pdf_bytes

    async def set_content(self, html, **kwargs):
        self.engine.record("set_content", html=html)


class FakeBrowser:
    def __init__(self, engine: "FakeEngine") -> None:
        self.engine = engine

    async def new_page(self, **kwargs):
        self.engine.record("new_page", **kwargs)
        return FakePage(self.engine)


class FakeEngine:
    """Callable engine factory: `async with engine() as browser`."""

    def __init__(self) -> None:
        self.launches = 0
        self.closes = 0
        self.events: list[tuple[str, float, dict]] = []
        self.launch_error: BaseException | None = None
        self.goto_error: BaseException | None = None
        self.evaluate_error: BaseException | None = None
        self.pdf_error: BaseException | None = None
        self.goto_delay = 0.0
        self.ready_after: float | None = 0.0
        self.status = 200
        self.pdf_bytes = FAKE_PDF

    def record(self, name: str, **data) -> None:
        self.events.append((name, time.monotonic(), data))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]

    def event(self, name: str) -> tuple[float, dict]:
        for event_name, at, data in self.events:
            if event_name == name:
                return at, data
        raise AssertionError(f"no {name} event in {self.names()}")

    @property
    def running(self) -> int:
        return self.launches - self.closes

    def __call__(self):
        return self._scope()

    @asynccontextmanager
    async def _scope(self):
        if self.launch_error is not None:
            raise self.launch_error
        self.launches += 1
        try:
            yield FakeBrowser(self)
        finally:
            self.closes += 1


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fast_settings() -> ExportSettings:
    return ExportSettings(
        navigation_timeout_ms=2000,
        ready_fallback_ms=50,
        settle_delay_ms=10,
    )


@pytest.fixture
def client(fake_engine, fast_settings, tmp_path):
    from fastapi.testclient import TestClient

    from main import app, get_engine_factory, get_export_settings, get_project_store
    from projects_store import JsonFileProjectStore

    store = JsonFileProjectStore(tmp_path / "projects")
    app.dependency_overrides[get_engine_factory] = lambda: fake_engine
    app.dependency_overrides[get_export_settings] = lambda: fast_settings
    app.dependency_overrides[get_project_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
