from __future__ import annotations

from datetime import timedelta

from loterias.services.block_state import BlockState


def test_not_blocked_initially(block_state: BlockState) -> None:
    assert not block_state.is_blocked()
    assert block_state.remaining() == timedelta(0)
    assert block_state.snapshot() == {"blocked": False, "blocked_until": None, "remaining_seconds": 0}


def test_trip_blocks_for_an_hour(block_state: BlockState, clock) -> None:
    until = block_state.trip()

    assert until == clock.now + timedelta(hours=1)
    assert block_state.is_blocked()
    assert block_state.snapshot()["remaining_seconds"] == 3600

    clock.advance(minutes=59)
    assert block_state.is_blocked()

    clock.advance(minutes=1, seconds=1)
    assert not block_state.is_blocked()


def test_trip_only_moves_forward(block_state: BlockState, clock) -> None:
    first = block_state.trip(timedelta(hours=1))

    assert block_state.trip(timedelta(minutes=5)) == first


def test_reset_clears_deadline(block_state: BlockState) -> None:
    block_state.trip()
    block_state.reset()

    assert not block_state.is_blocked()
    assert block_state.blocked_until is None
