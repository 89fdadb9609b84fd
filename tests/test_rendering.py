from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import caixa_body
from loterias.errors import FallbackError
from loterias.games import Game
from loterias.services.rendering import RenderingFallback, RenderingSession


class FakePage:
    def __init__(self, body: str) -> None:
        self.body = body
        self.visited: list[str] = []
        self.waited: list[int] = []
        self.threads: set[str] = set()

    def goto(self, url: str, timeout: int | None = None) -> None:
        self.threads.add(threading.current_thread().name)
        self.visited.append(url)

    def wait_for_timeout(self, ms: int) -> None:
        self.waited.append(ms)

    def inner_html(self, selector: str) -> str:
        assert selector == "body"
        return self.body


class FakeBrowser:
    closed = False

    def close(self) -> None:
        self.closed = True


class FakePlaywright:
    stopped = False

    def stop(self) -> None:
        self.stopped = True


class Launcher:
    def __init__(self, body: str) -> None:
        self.body = body
        self.launches = 0
        self.page: FakePage | None = None
        self.browser = FakeBrowser()
        self.playwright = FakePlaywright()

    def __call__(self):
        self.launches += 1
        self.page = FakePage(self.body)
        return self.playwright, self.browser, self.page


def test_fallback_decodes_rendered_body() -> None:
    body = "<pre>" + caixa_body(2900).decode("utf-8") + "</pre>"
    launcher = Launcher(body)
    fallback = RenderingFallback(RenderingSession(launcher=launcher, settle_ms=0))

    try:
        result = fallback.fetch(Game.MEGA_SENA, "https://example.test/megasena/2900")
    finally:
        fallback.close()

    assert result.contest == 2900
    assert launcher.page is not None
    assert launcher.page.visited == ["https://example.test/megasena/2900"]
    assert launcher.page.waited == [0]


def test_session_created_once_and_reused_across_threads() -> None:
    launcher = Launcher(caixa_body(1).decode("utf-8"))
    session = RenderingSession(launcher=launcher, settle_ms=0)

    try:
        with ThreadPoolExecutor(max_workers=4) as pool:
            texts = list(pool.map(session.fetch_text, [f"https://example.test/{i}" for i in range(8)]))
    finally:
        session.close()

    assert launcher.launches == 1
    assert len(texts) == 8
    assert launcher.page is not None
    # Every browser call ran on the single rendering thread.
    assert len(launcher.page.threads) == 1


def test_close_releases_browser_and_next_fetch_relaunches() -> None:
    launcher = Launcher(caixa_body(1).decode("utf-8"))
    session = RenderingSession(launcher=launcher, settle_ms=0)

    session.fetch_text("https://example.test/1")
    session.close()

    assert launcher.browser.closed
    assert launcher.playwright.stopped
    assert not session.is_open

    session.fetch_text("https://example.test/2")
    session.close()
    assert launcher.launches == 2


def test_undecodable_body_is_fallback_error() -> None:
    launcher = Launcher("<h1>Access denied</h1>")
    fallback = RenderingFallback(RenderingSession(launcher=launcher, settle_ms=0))

    try:
        with pytest.raises(FallbackError):
            fallback.fetch(Game.QUINA, "https://example.test/quina/1")
    finally:
        fallback.close()


def test_launch_failure_is_fallback_error() -> None:
    def broken():
        raise RuntimeError("chromium missing")

    fallback = RenderingFallback(RenderingSession(launcher=broken, settle_ms=0))

    try:
        with pytest.raises(FallbackError):
            fallback.fetch(Game.QUINA, "https://example.test/quina/1")
    finally:
        fallback.close()


def test_fetch_during_close_waits_for_a_fresh_browser() -> None:
    launcher = Launcher(caixa_body(1).decode("utf-8"))
    session = RenderingSession(launcher=launcher, settle_ms=0)
    session.fetch_text("https://example.test/1")
    first_page = launcher.page

    closing, release = threading.Event(), threading.Event()

    def slow_close() -> None:
        closing.set()
        release.wait(timeout=5)
        launcher.browser.closed = True

    launcher.browser.close = slow_close  # type: ignore[method-assign]
    closer = threading.Thread(target=session.close)
    closer.start()
    assert closing.wait(timeout=5)

    texts: list[str] = []
    fetcher = threading.Thread(target=lambda: texts.append(session.fetch_text("https://example.test/2")))
    fetcher.start()
    fetcher.join(timeout=0.2)
    # Still parked behind the teardown.
    assert fetcher.is_alive()

    release.set()
    closer.join(timeout=5)
    fetcher.join(timeout=5)
    try:
        assert len(texts) == 1
        assert first_page is not None
        assert first_page.visited == ["https://example.test/1"]
        assert launcher.launches == 2
        assert launcher.page is not first_page
        assert launcher.page.visited == ["https://example.test/2"]
    finally:
        session.close()
