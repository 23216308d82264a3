from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import A
from vrf_raffle.state import RaffleState, RoundSnapshot
from vrf_raffle.upkeep import check_upkeep

INTERVAL = 60


@pytest.fixture
def ready() -> RoundSnapshot:
    return RoundSnapshot(
        state=RaffleState.OPEN,
        players=(A,),
        balance=1,
        last_timestamp=1000.0,
        pending_request_id=None,
        recent_winner=None,
    )


def test_all_conditions_met(ready):
    assert check_upkeep(ready, 1060.0, INTERVAL) is True
    # idempotent
    assert check_upkeep(ready, 1060.0, INTERVAL) is True


def test_interval_not_elapsed(ready):
    assert check_upkeep(ready, 1059.0, INTERVAL) is False


def test_not_open(ready):
    snap = replace(ready, state=RaffleState.CALCULATING)
    assert check_upkeep(snap, 2000.0, INTERVAL) is False


def test_zero_balance(ready):
    snap = replace(ready, balance=0)
    assert check_upkeep(snap, 2000.0, INTERVAL) is False


def test_no_players(ready):
    snap = replace(ready, players=())
    assert check_upkeep(snap, 2000.0, INTERVAL) is False
