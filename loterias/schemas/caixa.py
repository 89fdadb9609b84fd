"""Schemas for the upstream (Caixa portal) result payload."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class _UpstreamSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class CaixaPrizeSchema(_UpstreamSchema):
    description = fields.String(data_key="descricaoFaixa", load_default="")
    tier = fields.Integer(data_key="faixa", load_default=0)
    winners = fields.Integer(data_key="numeroDeGanhadores", load_default=0)
    prize = fields.Decimal(data_key="valorPremio", load_default=None, allow_none=True)


class CaixaWinnerSchema(_UpstreamSchema):
    winners = fields.Integer(data_key="ganhadores", load_default=0)
    municipality = fields.String(data_key="municipio", load_default="")
    rank = fields.Integer(data_key="posicao", load_default=0)
    state = fields.String(data_key="uf", load_default="")
    series = fields.String(data_key="serie", load_default=None, allow_none=True)
    ticket_number = fields.String(data_key="numeroBilhete", load_default=None, allow_none=True)


class CaixaPayloadSchema(_UpstreamSchema):
    """One contest as returned by ``/portaldeloterias/api/{game}/{contest}``.

    Lists may come back as ``null`` for games that do not use them.
    """

    number = fields.Integer(data_key="numero", required=True)
    draw_date = fields.String(data_key="dataApuracao", load_default="")
    venue = fields.String(data_key="localSorteio", load_default="", allow_none=True)
    municipality_state = fields.String(data_key="nomeMunicipioUFSorteio", load_default="", allow_none=True)

    numbers_in_draw_order = fields.List(
        fields.String(), data_key="dezenasSorteadasOrdemSorteio", load_default=None, allow_none=True
    )
    numbers = fields.List(fields.String(), data_key="listaDezenas", load_default=None, allow_none=True)
    second_draw_numbers = fields.List(
        fields.String(), data_key="listaDezenasSegundoSorteio", load_default=None, allow_none=True
    )
    clovers = fields.List(fields.String(), data_key="trevosSorteados", load_default=None, allow_none=True)
    team_or_month = fields.String(data_key="nomeTimeCoracaoMesSorte", load_default=None, allow_none=True)

    prizes = fields.List(
        fields.Nested(CaixaPrizeSchema), data_key="listaRateioPremio", load_default=None, allow_none=True
    )
    winners = fields.List(
        fields.Nested(CaixaWinnerSchema), data_key="listaMunicipioUFGanhadores", load_default=None, allow_none=True
    )

    remark = fields.String(data_key="observacao", load_default=None, allow_none=True)
    rollover = fields.Boolean(data_key="acumulado", load_default=False)
    next_contest = fields.Integer(data_key="numeroConcursoProximo", load_default=None, allow_none=True)
    next_contest_date = fields.String(data_key="dataProximoConcurso", load_default=None, allow_none=True)

    collected_amount = fields.Decimal(data_key="valorArrecadado", load_default=None, allow_none=True)
    accumulated_0_5 = fields.Decimal(data_key="valorAcumuladoConcurso_0_5", load_default=None, allow_none=True)
    accumulated_special = fields.Decimal(
        data_key="valorAcumuladoConcursoEspecial", load_default=None, allow_none=True
    )
    accumulated_next = fields.Decimal(data_key="valorAcumuladoProximoConcurso", load_default=None, allow_none=True)
    estimated_next = fields.Decimal(data_key="valorEstimadoProximoConcurso", load_default=None, allow_none=True)
