"""Headless-browser fallback used when direct requests are refused.

Playwright's sync objects are bound to the thread that created them, so all
browser work runs on a single dedicated worker thread. That thread also
serializes concurrent callers.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable

from loterias.errors import DecodeError, FallbackError
from loterias.games import Game
from loterias.records import DrawResult
from loterias.services.upstream_adapter import CaixaAdapter, extract_json_text

logger = logging.getLogger(__name__)

SETTLE_MS = 2_000
NAVIGATION_TIMEOUT_MS = 30_000


def _launch_chromium() -> tuple[Any, Any, Any]:
    from playwright.sync_api import sync_playwright

    playwright = sync_playwright().start()
    try:
        browser = playwright.chromium.launch(headless=True)
        page = browser.new_page()
    except Exception:
        playwright.stop()
        raise
    return playwright, browser, page


class RenderingSession:
    """Lazily created, reusable browser page. Release it with ``close()``."""

    def __init__(
        self,
        launcher: Callable[[], tuple[Any, Any, Any]] = _launch_chromium,
        settle_ms: int = SETTLE_MS,
    ) -> None:
        self._launcher = launcher
        self._settle_ms = settle_ms
        self._lock = Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    def _submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rendering")
            return self._executor.submit(fn, *args)

    def _ensure_page(self) -> Any:
        # Runs on the worker thread only.
        if self._page is None:
            self._playwright, self._browser, self._page = self._launcher()
            logger.info("Headless browser started (403 fallback)")
        return self._page

    def _render(self, url: str) -> str:
        page = self._ensure_page()
        page.goto(url, timeout=NAVIGATION_TIMEOUT_MS)
        page.wait_for_timeout(self._settle_ms)
        return page.inner_html("body")

    def fetch_text(self, url: str) -> str:
        """Navigate to ``url`` and return the page body with markup stripped."""

        html = self._submit(self._render, url).result()
        return extract_json_text(html)

    def _teardown(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._page = self._browser = self._playwright = None
        try:
            if browser is not None:
                browser.close()
        finally:
            if playwright is not None:
                playwright.stop()

    def close(self) -> None:
        """Release the browser and its worker thread; the next fetch starts a new one."""

        # Held until teardown ends so no fetch reaches the old page or a dying executor.
        with self._lock:
            executor, self._executor = self._executor, None
            if executor is None:
                return
            try:
                executor.submit(self._teardown).result()
                logger.info("Headless browser closed")
            except Exception:
                logger.exception("Error while closing headless browser")
            finally:
                executor.shutdown(wait=True)


class RenderingFallback:
    """Fetch one contest through the browser and decode it like the direct path."""

    def __init__(self, session: RenderingSession, adapter: CaixaAdapter | None = None) -> None:
        self.session = session
        self._adapter = adapter or CaixaAdapter()

    def fetch(self, game: Game, url: str) -> DrawResult:
        logger.info("Trying headless browser: %s", url)
        try:
            text = self.session.fetch_text(url)
        except Exception as exc:
            raise FallbackError(f"Browser fetch failed for {url}: {exc}") from exc

        try:
            result = self._adapter.decode(game, text)
        except DecodeError as exc:
            raise FallbackError(f"Browser payload not decodable for {url}: {exc}") from exc

        logger.info("Browser fallback succeeded: %s contest %s", game.value, result.contest)
        return result

    def close(self) -> None:
        self.session.close()
