"""
Raffle state machine.

A round moves OPEN -> CALCULATING when a keeper calls ``perform_upkeep`` and
the upkeep predicate holds, and back to OPEN only when the oracle delivers
words for the outstanding request. All round state sits behind one re-entrant
lock, so no caller can observe a half-applied transition. The only call made
without it is the randomness request itself, issued after the round is
already CALCULATING.

Fulfillment is all-or-nothing: the winner is chosen from the captured player
list, the round is reset, and the whole pool is paid out. If the payout does
not go through, every field is restored to its pre-fulfillment value and
``TransferFailed`` is raised. The request stays pending, so the same
fulfillment can be delivered again.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Sequence, Tuple

from .config import RaffleConfig
from .draw import pick_winner_index
from .errors import RaffleError, TransferFailed, UnknownRequest, UpkeepNotNeeded
from .events import EventLog, RequestedRaffleWinner, WinnerPicked
from .ledger import EntryLedger
from .oracle import RandomnessOracle, RandomWordsRequest
from .payout import PayoutExecutor
from .state import RaffleState, RoundResult, RoundSnapshot
from .upkeep import check_upkeep

log = logging.getLogger(__name__)


class Raffle:
    def __init__(
        self,
        config: RaffleConfig,
        oracle: RandomnessOracle,
        payout: PayoutExecutor,
        clock: Callable[[], float] = time.time,
        events: Optional[EventLog] = None,
    ) -> None:
        self.config = config
        self.events = events if events is not None else EventLog()
        self._oracle = oracle
        self._payout = payout
        self._clock = clock
        self._request = RandomWordsRequest.from_config(config)

        self._lock = threading.RLock()
        self._ledger = EntryLedger(config.entrance_fee, self.events)
        self._state = RaffleState.OPEN
        self._last_timestamp = clock()
        self._pending_request_id: Optional[int] = None
        self._recent_winner: Optional[str] = None
        self._last_result: Optional[RoundResult] = None

    # -- entries ---------------------------------------------------------

    def enter_raffle(self, participant: str, value: int) -> str:
        """Record one entry paying ``value``. Returns the normalized address."""
        with self._lock:
            return self._ledger.enter(participant, value, self._state)

    # -- upkeep ----------------------------------------------------------

    def check_upkeep(self, check_data: bytes = b"") -> Tuple[bool, bytes]:
        with self._lock:
            needed = check_upkeep(self._snapshot(), self._clock(), self.config.interval)
        return needed, b""

    def perform_upkeep(self, perform_data: bytes = b"") -> int:
        """Close entries and request randomness. Returns the request id."""
        with self._lock:
            snap = self._snapshot()
            if not check_upkeep(snap, self._clock(), self.config.interval):
                log.debug(
                    "upkeep not needed: balance=%d players=%d state=%s",
                    snap.balance,
                    snap.num_players,
                    snap.state.value,
                )
                raise UpkeepNotNeeded(snap.balance, snap.num_players, snap.state.value)

            # CALCULATING closes entries and upkeep, so the (possibly remote)
            # request can be made without holding the lock.
            self._state = RaffleState.CALCULATING

        try:
            request_id = self._oracle.request_random_words(
                self._request, self.fulfill_random_words
            )
        except Exception:
            with self._lock:
                self._state = RaffleState.OPEN
            log.error("randomness request failed; raffle reopened")
            raise

        with self._lock:
            self._pending_request_id = request_id
            self.events.emit(RequestedRaffleWinner(request_id=request_id))
            log.info(
                "round closed with %d players (%d pooled); waiting for request %d",
                snap.num_players,
                snap.balance,
                request_id,
            )
            return request_id

    # -- fulfillment -----------------------------------------------------

    def fulfill_random_words(self, request_id: int, words: Sequence[int]) -> RoundResult:
        with self._lock:
            if self._pending_request_id is None or request_id != self._pending_request_id:
                log.warning(
                    "ignoring fulfillment for request %s (pending: %s)",
                    request_id,
                    self._pending_request_id,
                )
                raise UnknownRequest(request_id, self._pending_request_id)
            if not words:
                raise ValueError(f"request {request_id} fulfilled without words")

            saved = self._snapshot()
            players = saved.players
            if not players:
                raise RaffleError(f"request {request_id} fulfilled with no players")

            index = pick_winner_index(words, len(players))
            winner = players[index]
            now = self._clock()

            self._recent_winner = winner
            self._ledger.reset()
            self._state = RaffleState.OPEN
            self._last_timestamp = now
            self._pending_request_id = None
            prize = self._ledger.take_balance()

            try:
                paid = self._payout.pay(winner, prize)
            except Exception as e:
                self._rollback(saved)
                log.error("payout of %d to %s raised %r; round restored", prize, winner, e)
                raise TransferFailed(winner, prize) from e
            if not paid:
                self._rollback(saved)
                log.error("payout of %d to %s failed; round restored", prize, winner)
                raise TransferFailed(winner, prize)

            result = RoundResult(
                request_id=request_id,
                words=tuple(int(w) for w in words),
                players=players,
                winner_index=index,
                winner=winner,
                prize=prize,
                completed_at=now,
            )
            self._last_result = result
            self.events.emit(WinnerPicked(winner=winner))
            log.info("winner %s (index %d of %d) paid %d", winner, index, len(players), prize)
            return result

    def _rollback(self, saved: RoundSnapshot) -> None:
        self._ledger.restore(saved.players, saved.balance)
        self._state = saved.state
        self._last_timestamp = saved.last_timestamp
        self._pending_request_id = saved.pending_request_id
        self._recent_winner = saved.recent_winner

    # -- views -----------------------------------------------------------

    def _snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            state=self._state,
            players=self._ledger.players,
            balance=self._ledger.balance,
            last_timestamp=self._last_timestamp,
            pending_request_id=self._pending_request_id,
            recent_winner=self._recent_winner,
        )

    def snapshot(self) -> RoundSnapshot:
        with self._lock:
            return self._snapshot()

    def get_player(self, index: int) -> str:
        with self._lock:
            return self._ledger.player(index)

    @property
    def entrance_fee(self) -> int:
        return self.config.entrance_fee

    @property
    def interval(self) -> int:
        return self.config.interval

    @property
    def num_words(self) -> int:
        return self.config.num_words

    @property
    def request_confirmations(self) -> int:
        return self.config.request_confirmations

    @property
    def state(self) -> RaffleState:
        with self._lock:
            return self._state

    @property
    def num_players(self) -> int:
        with self._lock:
            return len(self._ledger)

    @property
    def balance(self) -> int:
        with self._lock:
            return self._ledger.balance

    @property
    def last_timestamp(self) -> float:
        with self._lock:
            return self._last_timestamp

    @property
    def pending_request_id(self) -> Optional[int]:
        with self._lock:
            return self._pending_request_id

    @property
    def recent_winner(self) -> Optional[str]:
        with self._lock:
            return self._recent_winner

    @property
    def last_result(self) -> Optional[RoundResult]:
        with self._lock:
            return self._last_result
