"""Supported lotteries and their per-game normalization rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loterias.errors import InvalidGameError


class NumberOrdering(str, Enum):
    SORTED = "SORTED"
    DRAW_ORDER = "DRAW_ORDER"
    SPLIT_DRAWS = "SPLIT_DRAWS"


class Affinity(str, Enum):
    NONE = "NONE"
    LUCKY_MONTH = "LUCKY_MONTH"
    FAVORITE_TEAM = "FAVORITE_TEAM"


@dataclass(frozen=True)
class GameRules:
    ordering: NumberOrdering = NumberOrdering.SORTED
    affinity: Affinity = Affinity.NONE


class Game(str, Enum):
    MAIS_MILIONARIA = "maismilionaria"
    MEGA_SENA = "megasena"
    LOTOFACIL = "lotofacil"
    QUINA = "quina"
    LOTOMANIA = "lotomania"
    TIMEMANIA = "timemania"
    DUPLA_SENA = "duplasena"
    FEDERAL = "federal"
    DIA_DE_SORTE = "diadesorte"
    SUPER_SETE = "supersete"

    @property
    def rules(self) -> GameRules:
        return _RULES.get(self, _DEFAULT_RULES)

    @classmethod
    def codes(cls) -> list[str]:
        return [g.value for g in cls]

    @classmethod
    def parse(cls, code: str) -> "Game":
        """Resolve a game code, raising InvalidGameError (404) when unknown.

        Matching is case-sensitive: ``"MegaSena"`` is not a valid code.
        """

        try:
            return cls(code)
        except ValueError as exc:
            raise InvalidGameError(code, cls.codes()) from exc


_DEFAULT_RULES = GameRules()

_RULES: dict[Game, GameRules] = {
    Game.DUPLA_SENA: GameRules(ordering=NumberOrdering.SPLIT_DRAWS),
    # Super Sete columns and Federal tickets are positional.
    Game.SUPER_SETE: GameRules(ordering=NumberOrdering.DRAW_ORDER),
    Game.FEDERAL: GameRules(ordering=NumberOrdering.DRAW_ORDER),
    Game.DIA_DE_SORTE: GameRules(affinity=Affinity.LUCKY_MONTH),
    Game.TIMEMANIA: GameRules(affinity=Affinity.FAVORITE_TEAM),
}
