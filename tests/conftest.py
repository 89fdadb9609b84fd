from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from loterias.games import Game
from loterias.records import DrawResult
from loterias.services.block_state import BlockState


def caixa_payload(contest: int, **overrides: Any) -> dict[str, Any]:
    """Raw upstream payload for one contest, Mega-Sena shaped by default."""

    payload: dict[str, Any] = {
        "numero": contest,
        "dataApuracao": "04/10/2025",
        "localSorteio": "ESPAÇO DA SORTE",
        "nomeMunicipioUFSorteio": "SÃO PAULO, SP",
        "dezenasSorteadasOrdemSorteio": ["42", "07", "13", "01", "59", "30"],
        "listaDezenas": ["42", "07", "13", "01", "59", "30"],
        "listaDezenasSegundoSorteio": None,
        "trevosSorteados": None,
        "nomeTimeCoracaoMesSorte": "",
        "listaRateioPremio": [
            {"descricaoFaixa": "6 acertos", "faixa": 1, "numeroDeGanhadores": 0, "valorPremio": 0.0},
            {"descricaoFaixa": "5 acertos", "faixa": 2, "numeroDeGanhadores": 51, "valorPremio": 48123.17},
        ],
        "listaMunicipioUFGanhadores": [],
        "observacao": "",
        "acumulado": True,
        "dataProximoConcurso": "07/10/2025",
        "valorArrecadado": 112345678.5,
        "valorAcumuladoConcurso_0_5": 1234.56,
        "valorAcumuladoConcursoEspecial": 98765.43,
        "valorAcumuladoProximoConcurso": 45000000.0,
        "valorEstimadoProximoConcurso": 50000000.0,
        "numeroConcursoProximo": contest + 1,
    }
    payload.update(overrides)
    return payload


def caixa_body(contest: int, **overrides: Any) -> bytes:
    return json.dumps(caixa_payload(contest, **overrides)).encode("utf-8")


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content


class FakeHttp:
    """Stands in for requests.Session; replies from a script of responses/exceptions."""

    def __init__(self, script: Iterable[FakeResponse | Exception] = ()) -> None:
        self._script = list(script)
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def get(self, url: str, headers: dict[str, str] | None = None, timeout: float | None = None) -> FakeResponse:
        with self._lock:
            self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
            item = self._script.pop(0) if self._script else FakeResponse(500)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 10, 4, 20, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryRepository:
    """Dict-backed repository with the same upsert semantics as the real stores."""

    def __init__(self, results: Iterable[DrawResult] = ()) -> None:
        self.rows: dict[tuple[Game, int], DrawResult] = {}
        self.save_calls = 0
        self.save_all_calls: list[list[int]] = []
        self._lock = threading.Lock()
        for r in results:
            self.rows[(r.game, r.contest)] = r

    def find_by_game(self, game: Game) -> list[DrawResult]:
        return sorted((r for (g, _), r in self.rows.items() if g == game), key=lambda r: -r.contest)

    def find_by_key(self, game: Game, contest: int) -> DrawResult | None:
        return self.rows.get((game, contest))

    def find_latest(self, game: Game) -> DrawResult | None:
        found = self.find_by_game(game)
        return found[0] if found else None

    def save(self, result: DrawResult) -> None:
        with self._lock:
            self.save_calls += 1
            self.rows[(result.game, result.contest)] = result

    def save_all(self, results: Iterable[DrawResult]) -> None:
        results = list(results)
        with self._lock:
            self.save_all_calls.append([r.contest for r in results])
            for r in results:
                self.rows[(r.game, r.contest)] = r

    def contests(self, game: Game) -> list[int]:
        return sorted(c for (g, c) in self.rows if g == game)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def block_state(clock: FakeClock) -> BlockState:
    return BlockState(clock=clock)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def no_sleep(sleeps: list[float]):
    def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep
