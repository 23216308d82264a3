from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import httpx

from .errors import UnknownRequest
from .oracle import FulfillCallback, RandomWordsRequest

log = logging.getLogger(__name__)


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._next_id = 1

    def close(self) -> None:
        self.client.close()

    def _post(self, method: str, params: List[Any]) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def request_random_words(self, request: RandomWordsRequest) -> int:
        """Submits a request to the coordinator and returns its request id."""
        data = self._post("vrf_requestRandomWords", [request.to_json()])
        result = data.get("result")
        if result is None:
            raise RuntimeError("vrf_requestRandomWords returned no request id.")
        # ids are uint256; accept decimal or 0x-hex strings
        return int(result, 0) if isinstance(result, str) else int(result)

    def get_fulfillment(self, request_id: int) -> Optional[List[int]]:
        """
        Returns the random words for a request, or None while the
        coordinator has not fulfilled it yet.
        Words may come back as JSON numbers or decimal / 0x-hex strings.
        """
        data = self._post("vrf_getFulfillment", [str(request_id)])
        result = data.get("result")
        if result is None:
            return None
        words = result.get("randomWords") if isinstance(result, dict) else result
        if not isinstance(words, list):
            raise RuntimeError(
                f"Request {request_id}: unexpected fulfillment payload {result!r}"
            )
        return [int(w, 0) if isinstance(w, str) else int(w) for w in words]


class RpcCoordinator:
    """
    RandomnessOracle backed by a remote coordinator.

    The coordinator cannot call back into this process, so fulfillments are
    pulled: :meth:`poll` asks for every outstanding request and hands the
    words to the consumer registered with it.
    """

    def __init__(self, client: RpcClient) -> None:
        self.client = client
        self._callbacks: Dict[int, FulfillCallback] = {}
        self._lock = threading.Lock()

    def request_random_words(
        self, request: RandomWordsRequest, callback: FulfillCallback
    ) -> int:
        request_id = self.client.request_random_words(request)
        with self._lock:
            self._callbacks[request_id] = callback
        log.info("submitted randomness request %d", request_id)
        return request_id

    def pending_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._callbacks)

    def poll(self) -> List[int]:
        """
        Delivers every fulfillment that is ready. Returns the request ids
        delivered. A request the consumer rejects as unknown is dropped; any
        other consumer error propagates and leaves its request pending.
        """
        delivered: List[int] = []
        for request_id in self.pending_ids():
            words = self.client.get_fulfillment(request_id)
            if words is None:
                log.debug("request %d not fulfilled yet", request_id)
                continue
            with self._lock:
                callback = self._callbacks[request_id]
            try:
                callback(request_id, words)
            except UnknownRequest:
                log.warning("consumer no longer expects request %d; dropping it", request_id)
                with self._lock:
                    self._callbacks.pop(request_id, None)
                continue
            with self._lock:
                self._callbacks.pop(request_id, None)
            delivered.append(request_id)
        return delivered
