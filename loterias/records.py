"""Canonical draw-result shape shared by the adapter, the store and the API."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from loterias.games import Game


@dataclass(frozen=True)
class ResultKey:
    """Identity of a stored result: one contest of one game."""

    game: Game
    contest: int


@dataclass(frozen=True)
class PrizeTier:
    description: str
    tier: int
    winners: int
    prize: Decimal | None = None


@dataclass(frozen=True)
class WinnerLocation:
    winners: int
    municipality: str
    rank: int
    state: str
    series: str | None = None
    ticket_number: str | None = None


@dataclass(frozen=True)
class DrawResult:
    """One normalized contest.

    Monetary fields are ``None`` when upstream did not report them, which is
    different from a reported ``Decimal("0")``.
    """

    key: ResultKey
    draw_date: str = ""
    location: str = ""
    numbers: list[str] = field(default_factory=list)
    numbers_in_draw_order: list[str] = field(default_factory=list)
    clovers: list[str] = field(default_factory=list)
    lucky_month: str | None = None
    favorite_team: str | None = None
    prize_tiers: list[PrizeTier] = field(default_factory=list)
    winner_locations: list[WinnerLocation] = field(default_factory=list)
    remark: str | None = None
    rollover: bool = False
    next_contest: int | None = None
    next_contest_date: str | None = None
    collected_amount: Decimal | None = None
    accumulated_0_5: Decimal | None = None
    accumulated_special: Decimal | None = None
    accumulated_next: Decimal | None = None
    estimated_next: Decimal | None = None

    @property
    def game(self) -> Game:
        return self.key.game

    @property
    def contest(self) -> int:
        return self.key.contest

    def refreshed_from(self, latest: DrawResult) -> DrawResult:
        """Copy the fields that upstream finalizes after the draw.

        Identity and drawn numbers are kept from ``self``.
        """

        return replace(
            self,
            draw_date=latest.draw_date,
            location=latest.location,
            prize_tiers=list(latest.prize_tiers),
            winner_locations=list(latest.winner_locations),
            rollover=latest.rollover,
            next_contest_date=latest.next_contest_date,
            accumulated_next=latest.accumulated_next,
            estimated_next=latest.estimated_next,
        )
