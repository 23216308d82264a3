from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Dict, Iterable, Optional, Protocol, Set

log = logging.getLogger(__name__)


class PayoutExecutor(Protocol):
    def pay(self, recipient: str, amount: int) -> bool: ...


class Vault:
    """
    In-memory account book that receives raffle payouts.

    Recipients listed in ``rejecting`` refuse incoming funds, which is how an
    unpayable winner is simulated.
    """

    def __init__(self, rejecting: Optional[Iterable[str]] = None) -> None:
        self.balances: Dict[str, int] = defaultdict(int)
        self.rejecting: Set[str] = set(rejecting or ())
        self._lock = threading.Lock()

    def reject(self, recipient: str) -> None:
        with self._lock:
            self.rejecting.add(recipient)

    def accept(self, recipient: str) -> None:
        with self._lock:
            self.rejecting.discard(recipient)

    def pay(self, recipient: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            if recipient in self.rejecting:
                log.warning("payout of %d refused by %s", amount, recipient)
                return False
            self.balances[recipient] += amount
        log.info("paid %d to %s", amount, recipient)
        return True

    def balance_of(self, recipient: str) -> int:
        with self._lock:
            return self.balances.get(recipient, 0)
