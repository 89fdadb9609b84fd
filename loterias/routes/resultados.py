"""Stored results API (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint

from loterias.db import get_repository
from loterias.schemas.resultado import DrawResultSchema
from loterias.services.resultado_service import ResultService
from loterias.utils.responses import ok

resultados_bp = Blueprint("resultados", __name__)

_schema = DrawResultSchema()
_many_schema = DrawResultSchema(many=True)


def _service() -> ResultService:
    return ResultService(get_repository())


@resultados_bp.get("")
def list_lotteries():
    """Supported game codes."""

    return ok(ResultService.list_games())


@resultados_bp.get("/<game>")
def list_results(game: str):
    return ok(_many_schema.dump(_service().find_by_game(game)))


@resultados_bp.get("/<game>/latest")
def latest_result(game: str):
    return ok(_schema.dump(_service().find_latest(game)))


@resultados_bp.get("/<game>/<int:contest>")
def result_by_contest(game: str, contest: int):
    return ok(_schema.dump(_service().find_by_contest(game, contest)))
