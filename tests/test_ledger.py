from __future__ import annotations

import pytest

from conftest import A, B, C, addr
from vrf_raffle.errors import InsufficientFee, InvalidAddress, PlayerIndexError, RaffleNotOpen
from vrf_raffle.events import EventLog, RaffleEnter
from vrf_raffle.ledger import EntryLedger
from vrf_raffle.state import RaffleState


def make_ledger(fee: int = 10) -> EntryLedger:
    return EntryLedger(fee, EventLog())


@pytest.mark.parametrize("amount", [0, 1, 9])
def test_amount_below_fee_is_rejected(amount):
    ledger = make_ledger(fee=10)
    with pytest.raises(InsufficientFee):
        ledger.enter(A, amount, RaffleState.OPEN)
    assert len(ledger) == 0
    assert ledger.balance == 0


def test_entries_keep_insertion_order_and_allow_repeats():
    ledger = make_ledger(fee=10)
    order = [A, B, A, C, A]
    for p in order:
        ledger.enter(p, 10, RaffleState.OPEN)
    assert len(ledger) == len(order)
    assert list(ledger.players) == order
    assert ledger.balance == 50


def test_overpayment_goes_to_the_pool():
    ledger = make_ledger(fee=10)
    ledger.enter(A, 25, RaffleState.OPEN)
    assert ledger.balance == 25


def test_entry_rejected_while_calculating():
    ledger = make_ledger()
    with pytest.raises(RaffleNotOpen):
        ledger.enter(A, 10, RaffleState.CALCULATING)
    assert len(ledger) == 0


def test_fee_is_checked_before_state():
    ledger = make_ledger()
    with pytest.raises(InsufficientFee):
        ledger.enter(A, 1, RaffleState.CALCULATING)


def test_entry_emits_event():
    events = EventLog()
    ledger = EntryLedger(1, events)
    ledger.enter(B, 1, RaffleState.OPEN)
    assert events.of_type(RaffleEnter) == [RaffleEnter(player=B)]


@pytest.mark.parametrize("bad", ["", "   ", "not-base58-0OIl", "3mJr7AoUXx2Wqd"])
def test_malformed_address_is_rejected(bad):
    ledger = make_ledger()
    with pytest.raises(InvalidAddress):
        ledger.enter(bad, 10, RaffleState.OPEN)
    assert len(ledger) == 0
    assert ledger.balance == 0


def test_address_is_normalized():
    ledger = make_ledger()
    assert ledger.enter(f"  {addr(9)}\n", 10, RaffleState.OPEN) == addr(9)


def test_player_lookup_out_of_range():
    ledger = make_ledger()
    ledger.enter(A, 10, RaffleState.OPEN)
    assert ledger.player(0) == A
    with pytest.raises(PlayerIndexError):
        ledger.player(1)
    with pytest.raises(IndexError):
        ledger.player(-1)


def test_reset_clears_players_but_not_balance():
    ledger = make_ledger()
    ledger.enter(A, 10, RaffleState.OPEN)
    ledger.reset()
    assert len(ledger) == 0
    assert ledger.take_balance() == 10
    assert ledger.balance == 0
