"""Fetch contest results from the Caixa portal API.

The portal throttles and blocks automated clients, so every call is paced,
retried with backoff, and escalates persistent 403s into the process-wide
block state.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from loterias.errors import (
    BlockedError,
    DecodeError,
    FallbackError,
    ForbiddenError,
    RateLimitedError,
    RetriesExhaustedError,
    TransportError,
    UnexpectedStatusError,
    UpstreamError,
)
from loterias.games import Game
from loterias.records import DrawResult
from loterias.services.block_state import BLOCK_STATE, BlockState
from loterias.services.rendering import RenderingFallback
from loterias.services.upstream_adapter import CaixaAdapter

logger = logging.getLogger(__name__)

BASE_URL = "https://servicebus2.caixa.gov.br/portaldeloterias/api/"
REQUEST_TIMEOUT_SECONDS = 30.0

MAX_ATTEMPTS = 5
REQUEST_DELAY_SECONDS = 10.0
FORBIDDEN_BLOCK_THRESHOLD = 3

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.0 Mobile/15E148 Safari/604.1",
)

REFERERS = (
    "https://loterias.caixa.gov.br/",
    "https://www.caixa.gov.br/",
)

BASE_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
    "Connection": "keep-alive",
    "Origin": "https://loterias.caixa.gov.br",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-site",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def build_http_session() -> requests.Session:
    """Pooled session without transport-level retries (the fetcher owns retrying)."""

    retry = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)

    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def result_url(game: Game, contest: int | None = None) -> str:
    return f"{BASE_URL}{game.value}/{'' if contest is None else int(contest)}"


def headers_for_attempt(attempt: int) -> dict[str, str]:
    """Rotate the client signature and referer by attempt index (1-based)."""

    headers = dict(BASE_HEADERS)
    headers["User-Agent"] = USER_AGENTS[(attempt - 1) % len(USER_AGENTS)]
    headers["Referer"] = REFERERS[(attempt - 1) % len(REFERERS)]
    return headers


class ResultFetcher:
    """Resilient client for one contest (or the latest contest) of a game."""

    def __init__(
        self,
        http: requests.Session | None = None,
        *,
        adapter: CaixaAdapter | None = None,
        block_state: BlockState = BLOCK_STATE,
        fallback: RenderingFallback | None = None,
        request_delay: float = REQUEST_DELAY_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._http = http or build_http_session()
        self._adapter = adapter or CaixaAdapter()
        self.block_state = block_state
        self.fallback = fallback
        self._request_delay = request_delay
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._rng = rng or random.Random()

    def fetch_by_contest(self, game: Game, contest: int) -> DrawResult:
        return self._fetch(game, result_url(game, contest))

    def fetch_latest(self, game: Game) -> DrawResult:
        return self._fetch(game, result_url(game))

    def _raise_if_blocked(self) -> None:
        remaining = self.block_state.remaining()
        if remaining.total_seconds() > 0:
            until = self.block_state.blocked_until
            logger.warning("API blocked, %ss left (until %s)", int(remaining.total_seconds()), until)
            raise BlockedError(remaining, until)

    def _wait_before(self, attempt: int, url: str) -> None:
        if attempt == 1:
            self._sleep(self._request_delay)
            return
        backoff = float(2 ** (attempt - 1)) + self._rng.uniform(0.5, 1.5)
        logger.info("Retry attempt %s for %s (backoff: %.1fs)", attempt, url, backoff)
        self._sleep(backoff)

    def _try_fallback(self, game: Game, url: str) -> DrawResult | None:
        if self.fallback is None:
            return None
        logger.warning("403 detected, trying headless browser fallback for %s", url)
        try:
            return self.fallback.fetch(game, url)
        except FallbackError as exc:
            logger.warning("Browser fallback failed: %s", exc)
            return None

    def _fetch(self, game: Game, url: str) -> DrawResult:
        self._raise_if_blocked()

        consecutive_forbidden = 0
        last_error: UpstreamError | None = None

        for attempt in range(1, self._max_attempts + 1):
            self._wait_before(attempt, url)
            # Another caller may have tripped the block while we were waiting.
            self._raise_if_blocked()

            try:
                resp = self._http.get(url, headers=headers_for_attempt(attempt), timeout=REQUEST_TIMEOUT_SECONDS)
            except requests.RequestException as exc:
                logger.warning("HTTP error for %s: %s", url, exc)
                last_error = TransportError(f"Failed to fetch {url}: {exc}")
                consecutive_forbidden = 0
                continue

            status = resp.status_code

            if status == 429:
                wait = float(5 + attempt * 2)
                logger.warning("Rate limited (429) for %s, waiting %ss", url, wait)
                last_error = RateLimitedError(wait)
                consecutive_forbidden = 0
                self._sleep(wait)
                continue

            if status == 403:
                consecutive_forbidden += 1

                if consecutive_forbidden == 1:
                    result = self._try_fallback(game, url)
                    if result is not None:
                        return result

                if consecutive_forbidden >= FORBIDDEN_BLOCK_THRESHOLD:
                    until = self.block_state.trip()
                    logger.error(
                        "%s consecutive 403 responses for %s, upstream blocked until %s",
                        consecutive_forbidden,
                        url,
                        until.isoformat(),
                    )
                    raise BlockedError(self.block_state.remaining(), until)

                wait = float(5 + attempt * 3)
                logger.warning(
                    "Forbidden (403) for %s (%s/%s), waiting %ss",
                    url,
                    consecutive_forbidden,
                    FORBIDDEN_BLOCK_THRESHOLD,
                    wait,
                )
                last_error = ForbiddenError(consecutive_forbidden)
                self._sleep(wait)
                continue

            if status != 200:
                logger.error("Unexpected status %s for %s", status, url)
                raise UnexpectedStatusError(status, url)

            consecutive_forbidden = 0
            try:
                return self._adapter.decode(game, resp.content)
            except DecodeError as exc:
                logger.warning("Decode error for %s: %s. Body: %s", url, exc, exc.excerpt)
                last_error = exc
                continue

        raise RetriesExhaustedError(self._max_attempts, last_error)
