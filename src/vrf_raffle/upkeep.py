from __future__ import annotations

from .state import RaffleState, RoundSnapshot


def check_upkeep(snapshot: RoundSnapshot, now: float, interval: float) -> bool:
    """
    True when a draw should be requested: the interval since the round
    started has elapsed, the raffle is open, and there is at least one paid
    entry. All four conditions are required.
    """
    time_passed = (now - snapshot.last_timestamp) >= interval
    is_open = snapshot.state == RaffleState.OPEN
    has_balance = snapshot.balance > 0
    has_players = snapshot.num_players > 0
    return time_passed and is_open and has_balance and has_players
