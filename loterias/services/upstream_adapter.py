"""Map the upstream result payload into the canonical DrawResult shape."""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any

from bs4 import BeautifulSoup
from marshmallow import ValidationError as MarshmallowValidationError

from loterias.errors import DecodeError
from loterias.games import Affinity, Game, NumberOrdering
from loterias.records import DrawResult, PrizeTier, ResultKey, WinnerLocation
from loterias.schemas.caixa import CaixaPayloadSchema

EXCERPT_LENGTH = 200

LOCATION_SEPARATOR = " em "

MONTH_CODE = re.compile(r"[+-]?[0-9]+")

MONTHS = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)


def month_name(code: str) -> str:
    """Translate a 1..12 month code to its name; anything else passes through."""

    # Plain ASCII digits with an optional sign; int() alone would also take
    # surrounding whitespace, underscores and other scripts' digits.
    if not isinstance(code, str) or not MONTH_CODE.fullmatch(code):
        return code
    month = int(code)
    if month < 1 or month > 12:
        return code
    return MONTHS[month - 1]


def order_numbers(game: Game, numbers: list[str], second_draw: list[str] | None = None) -> list[str]:
    """Apply the game's ordering rule to the drawn numbers.

    Numbers stay strings and sort as text, like upstream sends them
    (zero-padded).
    """

    out = list(numbers)
    if second_draw:
        out.extend(second_draw)

    ordering = game.rules.ordering
    if ordering is NumberOrdering.SPLIT_DRAWS and len(out) == 12:
        return sorted(out[:6]) + sorted(out[6:])
    if ordering is NumberOrdering.DRAW_ORDER:
        return out
    return sorted(out)


def extract_json_text(html: str) -> str:
    """Strip the markup a browser wraps around a JSON document."""

    text = html.strip()
    if not text.startswith("<"):
        return text
    return BeautifulSoup(text, "html.parser").get_text().strip()


def _excerpt(body: bytes | str) -> str:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return body[:EXCERPT_LENGTH]


class CaixaAdapter:
    """Decode one upstream contest payload into a DrawResult."""

    def __init__(self) -> None:
        self._schema = CaixaPayloadSchema()

    def decode(self, game: Game, body: bytes | str) -> DrawResult:
        try:
            raw = json.loads(body, parse_float=Decimal)
        except (ValueError, TypeError) as exc:
            raise DecodeError(f"Malformed JSON for {game.value}: {exc}", excerpt=_excerpt(body)) from exc

        if not isinstance(raw, dict):
            raise DecodeError(f"Expected a JSON object for {game.value}", excerpt=_excerpt(body))

        try:
            data = self._schema.load(raw)
        except MarshmallowValidationError as exc:
            raise DecodeError(
                f"Unexpected payload shape for {game.value}",
                excerpt=_excerpt(body),
                details=exc.messages,
            ) from exc

        return self.to_result(game, data)

    def to_result(self, game: Game, data: dict[str, Any]) -> DrawResult:
        lucky_month: str | None = None
        favorite_team: str | None = None
        affinity = data.get("team_or_month")
        if affinity:
            if game.rules.affinity is Affinity.LUCKY_MONTH:
                lucky_month = month_name(affinity)
            elif game.rules.affinity is Affinity.FAVORITE_TEAM:
                favorite_team = affinity

        venue = data.get("venue") or ""
        municipality_state = data.get("municipality_state") or ""

        return DrawResult(
            key=ResultKey(game=game, contest=int(data["number"])),
            draw_date=data.get("draw_date") or "",
            location=venue + LOCATION_SEPARATOR + municipality_state,
            numbers=order_numbers(game, data.get("numbers") or [], data.get("second_draw_numbers")),
            numbers_in_draw_order=list(data.get("numbers_in_draw_order") or []),
            clovers=list(data.get("clovers") or []),
            lucky_month=lucky_month,
            favorite_team=favorite_team,
            prize_tiers=[PrizeTier(**p) for p in data.get("prizes") or []],
            winner_locations=[WinnerLocation(**w) for w in data.get("winners") or []],
            remark=data.get("remark") or None,
            rollover=bool(data.get("rollover")),
            next_contest=data.get("next_contest"),
            next_contest_date=data.get("next_contest_date") or None,
            collected_amount=data.get("collected_amount"),
            accumulated_0_5=data.get("accumulated_0_5"),
            accumulated_special=data.get("accumulated_special"),
            accumulated_next=data.get("accumulated_next"),
            estimated_next=data.get("estimated_next"),
        )
