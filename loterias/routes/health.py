"""Health check and service info routes."""

from __future__ import annotations

from flask import Blueprint

from loterias.games import Game
from loterias.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/")
def root():
    return ok(
        {
            "name": "Loterias API",
            "description": "Resultados das loterias da Caixa Economica Federal",
            "lotteries": Game.codes(),
            "endpoints": {
                "lotteries": "/api",
                "by_lottery": "/api/{loteria}",
                "by_contest": "/api/{loteria}/{concurso}",
                "latest": "/api/{loteria}/latest",
            },
        }
    )


@health_bp.get("/health")
def health_check():
    """Health check endpoint."""

    return ok({"status": "ok"})
