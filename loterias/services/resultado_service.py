"""Read-side use-cases for stored results."""

from __future__ import annotations

from collections.abc import Sequence

from loterias.errors import NotFoundError
from loterias.games import Game
from loterias.records import DrawResult
from loterias.repositories.resultado_repository import ResultRepository


class ResultService:
    def __init__(self, repository: ResultRepository) -> None:
        self._repo = repository

    @staticmethod
    def list_games() -> list[str]:
        return Game.codes()

    def find_by_game(self, code: str) -> Sequence[DrawResult]:
        return self._repo.find_by_game(Game.parse(code))

    def find_by_contest(self, code: str, contest: int) -> DrawResult:
        game = Game.parse(code)
        result = self._repo.find_by_key(game, contest)
        if result is None:
            raise NotFoundError(message=f"Result {game.value}/{contest} not found")
        return result

    def find_latest(self, code: str) -> DrawResult:
        game = Game.parse(code)
        result = self._repo.find_latest(game)
        if result is None:
            raise NotFoundError(message=f"No results stored for {game.value}")
        return result
