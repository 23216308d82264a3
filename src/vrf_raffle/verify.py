from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import RaffleConfig
from .draw import derive_words, pick_winner_index
from .state import RoundResult

TOOL_NAME = "vrf-raffle"
TOOL_VERSION = "1.0.0"


def build_audit(
    result: RoundResult, config: RaffleConfig, seed: Optional[str]
) -> Dict[str, Any]:
    return {
        "metadata": {
            "tool": TOOL_NAME,
            "version": TOOL_VERSION,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "entrance_fee": config.entrance_fee,
            "interval": config.interval,
            "key_hash": config.key_hash,
            "subscription_id": config.subscription_id,
            "num_words": config.num_words,
            # None when the words were not derived from a public seed
            "seed": seed,
            "request_id": result.request_id,
            # 256-bit ints; store as strings for safety
            "random_words": [str(w) for w in result.words],
            "winner_index": result.winner_index,
            "completed_at": result.completed_at,
        },
        "winner": {
            "address": result.winner,
            "prize": result.prize,
        },
        # Entry order is the draw order, so keep it exactly.
        "all_entrants": [
            {"index": i, "address": addr} for i, addr in enumerate(result.players)
        ],
    }


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    request_id = int(meta["request_id"])
    words = [int(w) for w in meta["random_words"]]
    seed = meta.get("seed")

    if seed is not None:
        recomputed = derive_words(seed, request_id, len(words))
        if recomputed != words:
            raise RuntimeError(
                f"Random words mismatch: audit={words} recomputed={recomputed}"
            )

    entrants = sorted(audit["all_entrants"], key=lambda e: int(e["index"]))
    players = [e["address"] for e in entrants]
    if not players:
        raise RuntimeError("Audit has no entrants.")

    index = pick_winner_index(words, len(players))
    if index != int(meta["winner_index"]):
        raise RuntimeError(
            f"Winner index mismatch: audit={meta['winner_index']} recomputed={index}"
        )

    winner_expected = audit["winner"]["address"]
    if players[index] != winner_expected:
        raise RuntimeError(
            f"Winner mismatch: audit={winner_expected} recomputed={players[index]}"
        )

    prize = int(audit["winner"]["prize"])
    min_prize = int(meta["entrance_fee"]) * len(players)
    if prize < min_prize:
        raise RuntimeError(
            f"Prize too small: {prize} < {len(players)} entries x fee {meta['entrance_fee']}"
        )

    return {
        "ok": True,
        "request_id": request_id,
        "winner": winner_expected,
        "winner_index": index,
        "num_entrants": len(players),
        "prize": prize,
        "seed_checked": seed is not None,
    }
