"""Bring the local store in line with the upstream's latest contests."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator

from loterias.errors import AppError, BlockedError
from loterias.games import Game
from loterias.records import DrawResult
from loterias.repositories.resultado_repository import ResultRepository
from loterias.services.fetcher import ResultFetcher

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
MAX_WORKERS = 3
MAX_CONTEST_RETRIES = 5
CONTEST_RETRY_PAUSE_SECONDS = 2.0
LATEST_ATTEMPTS = 3
LATEST_RETRY_PAUSE_SECONDS = 2.0
GAME_PAUSE_SECONDS = 3.0


class UpdateAction(str, Enum):
    REFRESHED = "REFRESHED"
    LOCAL_AHEAD = "LOCAL_AHEAD"
    BACKFILLED = "BACKFILLED"
    FAILED = "FAILED"


@dataclass
class UpdateOutcome:
    game: Game
    action: UpdateAction
    local_contest: int = 0
    remote_contest: int | None = None
    saved: int = 0
    abandoned: list[int] = field(default_factory=list)
    error: str | None = None


@dataclass
class _BatchResult:
    results: list[DrawResult] = field(default_factory=list)
    abandoned: list[int] = field(default_factory=list)
    blocked: BlockedError | None = None
    blocked_contests: list[int] = field(default_factory=list)

    def truncate_at_block(self) -> list[int]:
        """Keep only contests below the first blocked one; return the dropped results' numbers.

        The cursor is the highest stored contest, so nothing above a gap may be saved.
        """

        first_gap = min(self.blocked_contests)
        dropped = [r.contest for r in self.results if r.contest > first_gap]
        self.results = [r for r in self.results if r.contest < first_gap]
        self.abandoned = [n for n in self.abandoned if n < first_gap]
        return dropped


def _chunks(numbers: range, size: int) -> Iterator[range]:
    for start in range(0, len(numbers), size):
        yield numbers[start : start + size]


class LotteryUpdater:
    """Per-game reconciliation: refresh, skip, or backfill missing contests."""

    def __init__(
        self,
        fetcher: ResultFetcher,
        repository: ResultRepository,
        *,
        sleep: Callable[[float], None] = time.sleep,
        batch_size: int = BATCH_SIZE,
        max_workers: int = MAX_WORKERS,
        max_contest_retries: int = MAX_CONTEST_RETRIES,
        contest_retry_pause: float = CONTEST_RETRY_PAUSE_SECONDS,
        latest_retry_pause: float = LATEST_RETRY_PAUSE_SECONDS,
        game_pause: float = GAME_PAUSE_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._repo = repository
        self._sleep = sleep
        self._batch_size = batch_size
        self._max_workers = max_workers
        self._max_contest_retries = max_contest_retries
        self._contest_retry_pause = contest_retry_pause
        self._latest_retry_pause = latest_retry_pause
        self._game_pause = game_pause

    def update_all(self, games: Iterable[Game] | None = None) -> list[UpdateOutcome]:
        """Reconcile every game sequentially. A failing game never stops the rest."""

        logger.info("Starting lottery update...")
        outcomes: list[UpdateOutcome] = []
        for i, game in enumerate(games if games is not None else list(Game)):
            if i > 0:
                self._sleep(self._game_pause)
            try:
                outcomes.append(self.update_one(game))
            except Exception as exc:
                logger.exception("Error updating %s", game.value)
                outcomes.append(UpdateOutcome(game=game, action=UpdateAction.FAILED, error=str(exc)))
        logger.info("Lottery update completed")
        return outcomes

    def update_one(self, game: Game) -> UpdateOutcome:
        logger.info("========== Updating %s ==========", game.value)

        local = self._repo.find_latest(game)
        local_contest = local.contest if local is not None else 0

        remote = self._fetch_latest(game)
        logger.info(
            "%s: latest in DB: %s | latest in API: %s | difference: %s",
            game.value,
            local_contest,
            remote.contest,
            remote.contest - local_contest,
        )

        if local is not None and remote.contest == local_contest:
            logger.info("%s: same contest (%s), updating prize data", game.value, local_contest)
            self._repo.save(local.refreshed_from(remote))
            return UpdateOutcome(
                game=game,
                action=UpdateAction.REFRESHED,
                local_contest=local_contest,
                remote_contest=remote.contest,
                saved=1,
            )

        if remote.contest < local_contest:
            logger.info("%s: already up to date (contest %s)", game.value, local_contest)
            return UpdateOutcome(
                game=game,
                action=UpdateAction.LOCAL_AHEAD,
                local_contest=local_contest,
                remote_contest=remote.contest,
            )

        outcome = UpdateOutcome(
            game=game,
            action=UpdateAction.BACKFILLED,
            local_contest=local_contest,
            remote_contest=remote.contest,
        )
        self._backfill(game, local_contest + 1, remote, outcome)
        logger.info(
            "%s: update completed (%s saved, %s abandoned)",
            game.value,
            outcome.saved,
            len(outcome.abandoned),
        )
        return outcome

    def _fetch_latest(self, game: Game) -> DrawResult:
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._fetcher.fetch_latest(game)
            except BlockedError:
                raise
            except AppError as exc:
                logger.warning("%s: attempt %s to fetch latest from API failed: %s", game.value, attempt, exc)
                if attempt >= LATEST_ATTEMPTS:
                    logger.error("%s: error fetching latest from API after %s attempts", game.value, attempt)
                    raise
            self._sleep(self._latest_retry_pause)

    def _backfill(self, game: Game, start: int, remote: DrawResult, outcome: UpdateOutcome) -> None:
        contests = range(start, remote.contest + 1)
        logger.info(
            "%s: fetching contests %s to %s (%s new)",
            game.value,
            contests.start,
            remote.contest,
            len(contests),
        )

        for batch in _chunks(contests, self._batch_size):
            fetched = self._fetch_batch(game, batch, remote)

            if fetched.blocked is not None:
                dropped = fetched.truncate_at_block()
                logger.error(
                    "%s: upstream blocked at contest(s) %s; discarding fetched contests %s, next run resumes at %s",
                    game.value,
                    sorted(fetched.blocked_contests),
                    dropped,
                    min(fetched.blocked_contests),
                )

            if fetched.results:
                self._repo.save_all(fetched.results)
                outcome.saved += len(fetched.results)
                logger.info(
                    "%s: saved contests %s..%s (%s records)",
                    game.value,
                    batch.start,
                    batch[-1],
                    len(fetched.results),
                )
            outcome.abandoned.extend(fetched.abandoned)

            if fetched.blocked is not None:
                raise fetched.blocked

    def _fetch_batch(self, game: Game, batch: range, remote: DrawResult) -> _BatchResult:
        out = _BatchResult()
        todo = [n for n in batch if n != remote.contest]
        if remote.contest in batch:
            # Already fetched while reading the remote cursor.
            out.results.append(remote)

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix=f"backfill-{game.value}") as pool:
            futures = {pool.submit(self._fetch_contest, game, n): n for n in todo}
            for future in as_completed(futures):
                contest = futures[future]
                try:
                    result = future.result()
                except BlockedError as exc:
                    out.blocked = exc
                    out.blocked_contests.append(contest)
                    continue
                if result is None:
                    out.abandoned.append(contest)
                else:
                    out.results.append(result)

        out.results.sort(key=lambda r: r.contest)
        out.abandoned.sort()
        return out

    def _fetch_contest(self, game: Game, contest: int) -> DrawResult | None:
        """Fetch one contest with a capped retry; None means abandoned."""

        for attempt in range(1, self._max_contest_retries + 1):
            try:
                return self._fetcher.fetch_by_contest(game, contest)
            except BlockedError:
                raise
            except AppError as exc:
                logger.warning(
                    "%s: error fetching contest %s (attempt %s/%s): %s",
                    game.value,
                    contest,
                    attempt,
                    self._max_contest_retries,
                    exc,
                )
                if attempt < self._max_contest_retries:
                    self._sleep(self._contest_retry_pause)

        logger.error("%s: abandoned contest %s (max retries reached)", game.value, contest)
        return None
