from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .accounts import normalize_address
from .errors import InsufficientFee, PlayerIndexError, RaffleNotOpen
from .events import EventLog, RaffleEnter
from .state import RaffleState

log = logging.getLogger(__name__)


class EntryLedger:
    """
    Ordered entries of the current round and the pooled balance they paid.

    The same participant may enter any number of times; each entry is one
    more slot in the draw. Not thread-safe on its own: the owning raffle
    serializes access.
    """

    def __init__(self, entrance_fee: int, events: EventLog) -> None:
        self.entrance_fee = entrance_fee
        self._events = events
        self._players: List[str] = []
        self._balance = 0

    def enter(self, participant: str, amount: int, state: RaffleState) -> str:
        if amount < self.entrance_fee:
            log.debug("rejected entry from %s: %d < fee %d", participant, amount, self.entrance_fee)
            raise InsufficientFee(amount, self.entrance_fee)
        if state != RaffleState.OPEN:
            log.debug("rejected entry from %s: raffle is %s", participant, state.value)
            raise RaffleNotOpen()
        player = normalize_address(participant)

        self._players.append(player)
        self._balance += amount
        self._events.emit(RaffleEnter(player=player))
        log.info("entry #%d from %s (%d)", len(self._players), player, amount)
        return player

    def player(self, index: int) -> str:
        if index < 0 or index >= len(self._players):
            raise PlayerIndexError(index, len(self._players))
        return self._players[index]

    @property
    def players(self) -> Tuple[str, ...]:
        return tuple(self._players)

    @property
    def balance(self) -> int:
        return self._balance

    def __len__(self) -> int:
        return len(self._players)

    def reset(self) -> None:
        self._players = []

    def take_balance(self) -> int:
        amount, self._balance = self._balance, 0
        return amount

    def restore(self, players: Sequence[str], balance: int) -> None:
        """Put back a round captured before a failed transition."""
        self._players = list(players)
        self._balance = balance
