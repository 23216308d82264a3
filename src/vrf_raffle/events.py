from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Type, TypeVar, Union

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaffleEnter:
    player: str


@dataclass(frozen=True)
class RequestedRaffleWinner:
    request_id: int


@dataclass(frozen=True)
class WinnerPicked:
    winner: str


Event = Union[RaffleEnter, RequestedRaffleWinner, WinnerPicked]
E = TypeVar("E", RaffleEnter, RequestedRaffleWinner, WinnerPicked)


class EventLog:
    """Append-only record of emitted events, with optional listeners."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._listeners: List[Callable[[Event], None]] = []

    def subscribe(self, listener: Callable[[Event], None]) -> None:
        self._listeners.append(listener)

    def emit(self, event: Event) -> None:
        self._events.append(event)
        log.debug("event %s", event)
        # Listeners run after the state change is committed; a failing one
        # must not turn a completed operation into an error for its caller.
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                log.exception("listener %r failed on %s", listener, event)

    def all(self) -> List[Event]:
        return list(self._events)

    def of_type(self, kind: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, kind)]

    def __len__(self) -> int:
        return len(self._events)
