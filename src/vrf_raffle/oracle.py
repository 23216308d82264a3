"""
Randomness oracle contract and a deterministic local coordinator.

The raffle only depends on :class:`RandomnessOracle`: it submits a
:class:`RandomWordsRequest` together with the callback that should receive
the words, and gets a request id back. The oracle later invokes the callback
exactly once with ``(request_id, words)``, from whatever thread it likes.
The callback must not be invoked from inside ``request_random_words``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from .config import RaffleConfig
from .draw import derive_words
from .errors import UnknownRequest
from .project_constants import EXTRA_ARGS_V1_TAG

log = logging.getLogger(__name__)

FulfillCallback = Callable[[int, Sequence[int]], object]


def encode_extra_args(native_payment: bool) -> bytes:
    # tag || uint256(bool), ABI-style 32-byte word
    return EXTRA_ARGS_V1_TAG + int(native_payment).to_bytes(32, "big")


@dataclass(frozen=True)
class RandomWordsRequest:
    key_hash: str
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int
    extra_args: bytes

    @staticmethod
    def from_config(config: RaffleConfig) -> "RandomWordsRequest":
        return RandomWordsRequest(
            key_hash=config.key_hash,
            subscription_id=config.subscription_id,
            request_confirmations=config.request_confirmations,
            callback_gas_limit=config.callback_gas_limit,
            num_words=config.num_words,
            extra_args=encode_extra_args(config.native_payment),
        )

    def to_json(self) -> Dict[str, object]:
        return {
            "keyHash": self.key_hash,
            "subId": str(self.subscription_id),
            "requestConfirmations": self.request_confirmations,
            "callbackGasLimit": self.callback_gas_limit,
            "numWords": self.num_words,
            "extraArgs": "0x" + self.extra_args.hex(),
        }


class RandomnessOracle(Protocol):
    def request_random_words(
        self, request: RandomWordsRequest, callback: FulfillCallback
    ) -> int: ...


@dataclass
class _Pending:
    request: RandomWordsRequest
    callback: FulfillCallback


class LocalCoordinator:
    """
    In-process coordinator. Requests are queued and only answered when
    :meth:`fulfill` is called, so tests and simulations decide when (and
    with which words) a callback arrives.

    Without explicit words, each request gets ``derive_words(seed, id, n)``,
    which anyone holding the seed can recompute.
    """

    def __init__(self, seed: str = "", first_request_id: int = 1) -> None:
        self.seed = seed
        self._next_id = first_request_id
        self._pending: Dict[int, _Pending] = {}
        self._lock = threading.Lock()
        self.requests: List[RandomWordsRequest] = []

    def request_random_words(
        self, request: RandomWordsRequest, callback: FulfillCallback
    ) -> int:
        with self._lock:
            request_id = self._next_id
            self._next_id += 1
            self._pending[request_id] = _Pending(request, callback)
            self.requests.append(request)
        log.info("randomness requested: id=%d words=%d", request_id, request.num_words)
        return request_id

    def pending_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._pending)

    def words_for(self, request_id: int, num_words: int) -> List[int]:
        return derive_words(self.seed, request_id, num_words)

    def fulfill(self, request_id: int, words: Optional[Sequence[int]] = None) -> List[int]:
        """
        Deliver words for ``request_id`` to its consumer and return them.

        The request is only marked answered once the callback returns; if
        the consumer raises, the request stays pending and can be fulfilled
        again, unless the consumer rejected it as unknown.
        """
        with self._lock:
            pending = self._pending.get(request_id)
        if pending is None:
            raise RuntimeError(f"No pending request {request_id}")

        if words is None:
            words = self.words_for(request_id, pending.request.num_words)
        out = [int(w) for w in words]

        try:
            pending.callback(request_id, out)
        except UnknownRequest:
            # consumer has already moved on; redelivery can never succeed
            with self._lock:
                self._pending.pop(request_id, None)
            raise
        with self._lock:
            self._pending.pop(request_id, None)
        log.info("randomness fulfilled: id=%d", request_id)
        return out
