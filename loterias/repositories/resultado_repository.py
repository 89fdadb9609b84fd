"""Repository layer for draw-result persistence.

Two backends share one interface: SQL (SQLAlchemy) and MongoDB (pymongo).
Writes are upserts keyed by (game, contest), so replaying them is harmless.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from pymongo import ReplaceOne
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from loterias.games import Game
from loterias.models.resultado import ResultadoRow
from loterias.records import DrawResult, ResultKey
from loterias.schemas.resultado import DrawResultSchema, PrizeTierSchema, WinnerLocationSchema


class ResultRepository(Protocol):
    def find_by_game(self, game: Game) -> Sequence[DrawResult]: ...

    def find_by_key(self, game: Game, contest: int) -> DrawResult | None: ...

    def find_latest(self, game: Game) -> DrawResult | None: ...

    def save(self, result: DrawResult) -> None: ...

    def save_all(self, results: Iterable[DrawResult]) -> None: ...


_prize_schema = PrizeTierSchema(many=True)
_winner_schema = WinnerLocationSchema(many=True)


def _to_row(result: DrawResult) -> ResultadoRow:
    return ResultadoRow(
        loteria=result.game.value,
        concurso=int(result.contest),
        data=result.draw_date,
        local=result.location,
        dezenas=list(result.numbers),
        dezenas_ordem_sorteio=list(result.numbers_in_draw_order),
        trevos=list(result.clovers),
        mes_sorte=result.lucky_month,
        time_coracao=result.favorite_team,
        premiacoes=_prize_schema.dump(result.prize_tiers),
        local_ganhadores=_winner_schema.dump(result.winner_locations),
        observacao=result.remark,
        acumulou=bool(result.rollover),
        proximo_concurso=result.next_contest,
        data_proximo_concurso=result.next_contest_date,
        valor_arrecadado=result.collected_amount,
        valor_acumulado_concurso_0_5=result.accumulated_0_5,
        valor_acumulado_concurso_especial=result.accumulated_special,
        valor_acumulado_proximo_concurso=result.accumulated_next,
        valor_estimado_proximo_concurso=result.estimated_next,
    )


def _from_row(row: ResultadoRow) -> DrawResult:
    return DrawResult(
        key=ResultKey(game=Game(row.loteria), contest=int(row.concurso)),
        draw_date=row.data or "",
        location=row.local or "",
        numbers=list(row.dezenas or []),
        numbers_in_draw_order=list(row.dezenas_ordem_sorteio or []),
        clovers=list(row.trevos or []),
        lucky_month=row.mes_sorte,
        favorite_team=row.time_coracao,
        prize_tiers=_prize_schema.load(row.premiacoes or []),
        winner_locations=_winner_schema.load(row.local_ganhadores or []),
        remark=row.observacao,
        rollover=bool(row.acumulou),
        next_contest=row.proximo_concurso,
        next_contest_date=row.data_proximo_concurso,
        collected_amount=row.valor_arrecadado,
        accumulated_0_5=row.valor_acumulado_concurso_0_5,
        accumulated_special=row.valor_acumulado_concurso_especial,
        accumulated_next=row.valor_acumulado_proximo_concurso,
        estimated_next=row.valor_estimado_proximo_concurso,
    )


class SqlResultRepository:
    """SQLAlchemy store. Each call runs in its own short-lived session."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def find_by_game(self, game: Game) -> Sequence[DrawResult]:
        stmt = (
            select(ResultadoRow)
            .where(ResultadoRow.loteria == game.value)
            .order_by(ResultadoRow.concurso.desc())
        )
        with self._session_factory() as session:
            return [_from_row(r) for r in session.scalars(stmt).all()]

    def find_by_key(self, game: Game, contest: int) -> DrawResult | None:
        with self._session_factory() as session:
            row = session.get(ResultadoRow, (game.value, int(contest)))
            return _from_row(row) if row is not None else None

    def find_latest(self, game: Game) -> DrawResult | None:
        stmt = (
            select(ResultadoRow)
            .where(ResultadoRow.loteria == game.value)
            .order_by(ResultadoRow.concurso.desc())
            .limit(1)
        )
        with self._session_factory() as session:
            row = session.scalars(stmt).first()
            return _from_row(row) if row is not None else None

    def save(self, result: DrawResult) -> None:
        self.save_all([result])

    def save_all(self, results: Iterable[DrawResult]) -> None:
        rows = [_to_row(r) for r in results]
        if not rows:
            return
        with self._session_factory() as session:
            # merge() does an upsert-like behavior based on primary key
            for row in rows:
                session.merge(row)
            session.commit()


def _mongo_id(game: Game, contest: int) -> dict[str, Any]:
    return {"loteria": game.value, "concurso": int(contest)}


class MongoResultRepository:
    """MongoDB store; documents are keyed by ``_id = {loteria, concurso}``."""

    def __init__(self, collection: Any) -> None:
        self._col = collection
        self._schema = DrawResultSchema()

    def _to_doc(self, result: DrawResult) -> dict[str, Any]:
        doc = self._schema.dump(result)
        doc["_id"] = _mongo_id(result.game, result.contest)
        return doc

    def _from_doc(self, doc: dict[str, Any]) -> DrawResult:
        data = dict(doc)
        data.pop("_id", None)
        return self._schema.load(data)

    def find_by_game(self, game: Game) -> Sequence[DrawResult]:
        cur = self._col.find({"_id.loteria": game.value}).sort("_id.concurso", -1)
        return [self._from_doc(d) for d in cur]

    def find_by_key(self, game: Game, contest: int) -> DrawResult | None:
        doc = self._col.find_one({"_id": _mongo_id(game, contest)})
        return self._from_doc(doc) if doc else None

    def find_latest(self, game: Game) -> DrawResult | None:
        doc = self._col.find_one({"_id.loteria": game.value}, sort=[("_id.concurso", -1)])
        return self._from_doc(doc) if doc else None

    def save(self, result: DrawResult) -> None:
        doc = self._to_doc(result)
        self._col.replace_one({"_id": doc["_id"]}, doc, upsert=True)

    def save_all(self, results: Iterable[DrawResult]) -> None:
        ops = []
        for result in results:
            doc = self._to_doc(result)
            ops.append(ReplaceOne({"_id": doc["_id"]}, doc, upsert=True))
        if not ops:
            return
        self._col.bulk_write(ops, ordered=False)
