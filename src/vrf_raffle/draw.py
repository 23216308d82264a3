from __future__ import annotations

import hashlib
from typing import List, Sequence

WORD_BITS = 256


def pick_winner_index(words: Sequence[int], num_players: int) -> int:
    # Plain modulo over the first word; no debiasing.
    if num_players <= 0:
        raise ValueError("cannot pick a winner without players")
    if not words:
        raise ValueError("no random words supplied")
    return int(words[0]) % num_players


def derive_words(seed: str, request_id: int, num_words: int) -> List[int]:
    """
    Deterministic 256-bit words for a request: sha256("<seed>:<request_id>:<i>").
    Anyone holding the seed can recompute them.
    """
    out: List[int] = []
    for i in range(num_words):
        digest = hashlib.sha256(f"{seed}:{request_id}:{i}".encode("utf-8")).hexdigest()
        out.append(int(digest, 16))
    return out
