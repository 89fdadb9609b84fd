from __future__ import annotations

from concurrent.futures import Future
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from loterias import create_app
from loterias.config import TestingConfig
from loterias.games import Game
from loterias.records import DrawResult, PrizeTier, ResultKey


class ImmediateExecutor:
    """Runs submitted work inline so triggers can be asserted synchronously."""

    def __init__(self) -> None:
        self.submitted: list[tuple] = []

    def submit(self, fn, *args):  # type: ignore[no-untyped-def]
        self.submitted.append((fn, args))
        future: Future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as exc:
            future.set_exception(exc)
        return future


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions["update_executor"] = ImmediateExecutor()
    app.extensions["lottery_updater"] = MagicMock()
    repo = app.extensions["result_repository"]
    repo.save_all(
        [
            DrawResult(
                key=ResultKey(Game.MEGA_SENA, n),
                draw_date="04/10/2025",
                numbers=["01", "07", "13", "30", "42", "59"],
                prize_tiers=[PrizeTier("6 acertos", 1, 0, Decimal("0"))],
                rollover=True,
                next_contest=n + 1,
            )
            for n in (2899, 2900)
        ]
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def test_root_lists_lotteries(client) -> None:
    res = client.get("/")

    assert res.status_code == 200
    assert res.get_json()["data"]["lotteries"] == Game.codes()


def test_health(client) -> None:
    res = client.get("/health")

    assert res.status_code == 200
    assert res.get_json() == {"success": True, "data": {"status": "ok"}, "error": None}


def test_api_lists_supported_codes(client) -> None:
    body = client.get("/api").get_json()

    assert body["data"] == Game.codes()
    assert "megasena" in body["data"]


def test_results_for_game_newest_first(client) -> None:
    body = client.get("/api/megasena").get_json()

    assert [r["concurso"] for r in body["data"]] == [2900, 2899]
    assert body["data"][0]["loteria"] == "megasena"
    assert body["data"][0]["acumulou"] is True
    assert "valorArrecadado" not in body["data"][0]


def test_empty_game_returns_empty_list(client) -> None:
    body = client.get("/api/quina").get_json()

    assert body["success"] is True
    assert body["data"] == []


def test_unknown_game_is_404_with_supported_list(client) -> None:
    res = client.get("/api/megaSena")

    body = res.get_json()
    assert res.status_code == 404
    assert body["error"]["code"] == "invalid_game"
    assert body["error"]["details"]["supported"] == Game.codes()


def test_latest(client) -> None:
    body = client.get("/api/megasena/latest").get_json()

    assert body["data"]["concurso"] == 2900
    assert body["data"]["dezenas"] == ["01", "07", "13", "30", "42", "59"]


def test_latest_with_nothing_stored_is_404(client) -> None:
    res = client.get("/api/lotofacil/latest")

    assert res.status_code == 404
    assert res.get_json()["error"]["code"] == "not_found"


def test_by_contest(client) -> None:
    res = client.get("/api/megasena/2899")

    assert res.status_code == 200
    assert res.get_json()["data"]["proximoConcurso"] == 2900


def test_missing_contest_is_404(client) -> None:
    assert client.get("/api/megasena/1").status_code == 404


def test_non_numeric_contest_is_404(client) -> None:
    assert client.get("/api/megasena/abc").status_code == 404


def test_update_all_is_accepted_and_runs_in_background(app, client) -> None:
    res = client.post("/admin/update")

    assert res.status_code == 202
    assert res.get_json()["data"]["status"] == "processing"
    app.extensions["lottery_updater"].update_all.assert_called_once_with()


def test_update_one_game(app, client) -> None:
    res = client.post("/admin/update/quina")

    assert res.status_code == 202
    assert res.get_json()["data"]["lottery"] == "quina"
    app.extensions["lottery_updater"].update_one.assert_called_once_with(Game.QUINA)


def test_update_unknown_game_is_404_and_not_submitted(app, client) -> None:
    res = client.post("/admin/update/bingo")

    assert res.status_code == 404
    assert app.extensions["update_executor"].submitted == []


def test_background_failure_does_not_affect_response(app, client) -> None:
    app.extensions["lottery_updater"].update_all.side_effect = RuntimeError("boom")

    assert client.post("/admin/update").status_code == 202


def test_block_status_and_reset(app, client) -> None:
    fetcher = app.extensions["result_fetcher"]
    fetcher.block_state.trip()

    status = client.get("/admin/block-status").get_json()["data"]
    assert status["blocked"] is True
    assert 0 < status["remaining_seconds"] <= 3600

    cleared = client.delete("/admin/block").get_json()["data"]
    assert cleared["blocked"] is False
    assert not fetcher.block_state.is_blocked()


def test_browser_close_without_fallback(client) -> None:
    res = client.post("/admin/browser/close")

    assert res.status_code == 200
    assert res.get_json()["data"] == {"browser_open": False}


def test_store_failure_is_503(app, client) -> None:
    repo = MagicMock()
    repo.find_by_game.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.extensions["result_repository"] = repo

    res = client.get("/api/megasena")

    assert res.status_code == 503
    assert res.get_json()["error"]["code"] == "storage_unavailable"


def test_unknown_route_is_enveloped_404(client) -> None:
    res = client.get("/nope")

    assert res.status_code == 404
    assert res.get_json()["error"]["code"] == "not_found"
