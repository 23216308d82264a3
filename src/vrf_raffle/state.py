from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RaffleState(str, Enum):
    OPEN = "OPEN"
    CALCULATING = "CALCULATING"


@dataclass(frozen=True)
class RoundSnapshot:
    """Consistent view of the round aggregate, taken under the raffle lock."""

    state: RaffleState
    players: Tuple[str, ...]
    balance: int
    last_timestamp: float
    pending_request_id: Optional[int]
    recent_winner: Optional[str]

    @property
    def num_players(self) -> int:
        return len(self.players)


@dataclass(frozen=True)
class RoundResult:
    request_id: int
    words: Tuple[int, ...]
    players: Tuple[str, ...]
    winner_index: int
    winner: str
    prize: int
    completed_at: float
