"""Serialization of stored draw results.

Used for the public JSON API and for persisting nested values (SQL JSON
columns, Mongo documents). Field names keep the public API's Portuguese keys.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_dump, post_load

from loterias.games import Game
from loterias.records import DrawResult, PrizeTier, ResultKey, WinnerLocation


class PrizeTierSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    description = fields.String(data_key="descricao", load_default="")
    tier = fields.Integer(data_key="faixa", load_default=0)
    winners = fields.Integer(data_key="numeroDeGanhadores", load_default=0)
    prize = fields.Decimal(data_key="valor", as_string=True, load_default=None, allow_none=True)

    @post_load
    def _make(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return PrizeTier(**data)


class WinnerLocationSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    winners = fields.Integer(data_key="ganhadores", load_default=0)
    municipality = fields.String(data_key="municipio", load_default="")
    rank = fields.Integer(data_key="posicao", load_default=0)
    state = fields.String(data_key="uf", load_default="")
    series = fields.String(data_key="serie", load_default=None, allow_none=True)
    ticket_number = fields.String(data_key="numeroBilhete", load_default=None, allow_none=True)

    @post_load
    def _make(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return WinnerLocation(**data)

    @post_dump
    def _omit_empty(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return {k: v for k, v in data.items() if v is not None}


class DrawResultSchema(Schema):
    """Serialize a DrawResult; absent optional values are left out."""

    class Meta:
        unknown = EXCLUDE

    game = fields.Enum(Game, by_value=True, data_key="loteria", required=True)
    contest = fields.Integer(data_key="concurso", required=True)
    draw_date = fields.String(data_key="data", load_default="")
    location = fields.String(data_key="local", load_default="")
    numbers_in_draw_order = fields.List(fields.String(), data_key="dezenasOrdemSorteio", load_default=list)
    numbers = fields.List(fields.String(), data_key="dezenas", load_default=list)
    clovers = fields.List(fields.String(), data_key="trevos", load_default=list)
    favorite_team = fields.String(data_key="timeCoracao", load_default=None, allow_none=True)
    lucky_month = fields.String(data_key="mesSorte", load_default=None, allow_none=True)
    prize_tiers = fields.List(fields.Nested(PrizeTierSchema), data_key="premiacoes", load_default=list)
    winner_locations = fields.List(
        fields.Nested(WinnerLocationSchema), data_key="municipiosUFGanhadores", load_default=list
    )
    remark = fields.String(data_key="observacao", load_default=None, allow_none=True)
    rollover = fields.Boolean(data_key="acumulou", load_default=False)
    next_contest = fields.Integer(data_key="proximoConcurso", load_default=None, allow_none=True)
    next_contest_date = fields.String(data_key="dataProximoConcurso", load_default=None, allow_none=True)
    collected_amount = fields.Decimal(data_key="valorArrecadado", as_string=True, load_default=None, allow_none=True)
    accumulated_0_5 = fields.Decimal(
        data_key="valorAcumuladoConcurso_0_5", as_string=True, load_default=None, allow_none=True
    )
    accumulated_special = fields.Decimal(
        data_key="valorAcumuladoConcursoEspecial", as_string=True, load_default=None, allow_none=True
    )
    accumulated_next = fields.Decimal(
        data_key="valorAcumuladoProximoConcurso", as_string=True, load_default=None, allow_none=True
    )
    estimated_next = fields.Decimal(
        data_key="valorEstimadoProximoConcurso", as_string=True, load_default=None, allow_none=True
    )

    @post_dump
    def _omit_absent(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return {k: v for k, v in data.items() if v is not None}

    @post_load
    def _make(self, data, **kwargs):  # type: ignore[no-untyped-def]
        key = ResultKey(game=data.pop("game"), contest=data.pop("contest"))
        return DrawResult(key=key, **data)
