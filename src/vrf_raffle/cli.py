from __future__ import annotations

import argparse
import json
import logging
import time
from typing import List, Optional

from .accounts import load_addresses
from .config import Settings
from .draw import pick_winner_index
from .oracle import LocalCoordinator
from .payout import Vault
from .project_constants import TOKEN_DECIMALS
from .raffle import Raffle
from .rpc import RpcClient, RpcCoordinator
from .verify import build_audit, verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def to_tokens(raw_amount: int) -> float:
    return round(raw_amount / (10**TOKEN_DECIMALS), 4)


class ManualClock:
    """Clock the simulation advances explicitly instead of sleeping."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _load_players(args: argparse.Namespace) -> List[str]:
    players: List[str] = list(args.player or [])
    if args.players_file:
        with open(args.players_file, "r", encoding="utf-8") as f:
            players.extend(load_addresses(f))
    return players


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = Settings.from_env(
        entrance_fee_override=args.fee,
        interval_override=args.interval,
        coordinator_url_override=args.coordinator_url,
    )
    config = settings.raffle
    log = logging.getLogger("simulate")

    players = _load_players(args)
    if not players:
        raise SystemExit("No players. Pass --player or --players-file.")

    rpc: Optional[RpcClient] = None
    if config.coordinator_url:
        if args.words:
            raise SystemExit("--words only applies to the local coordinator.")
        rpc = RpcClient(config.coordinator_url, timeout_s=args.timeout)
        oracle = RpcCoordinator(rpc)
        seed = None
        log.info("Coordinator      : remote")
    else:
        oracle = LocalCoordinator(seed=args.seed)
        seed = args.seed
        log.info("Coordinator      : local (seed=%r)", seed)

    clock = ManualClock(time.time())
    vault = Vault()
    raffle = Raffle(config, oracle, vault, clock=clock)
    value = args.value if args.value is not None else config.entrance_fee

    try:
        for p in players:
            raffle.enter_raffle(p, value)
        log.info("Entries          : %d", raffle.num_players)
        log.info("Pool             : %d", raffle.balance)

        clock.advance(config.interval)
        needed, _ = raffle.check_upkeep(b"")
        if not needed:
            raise SystemExit("Upkeep not needed after the interval; nothing to draw.")
        request_id = raffle.perform_upkeep(b"")

        if isinstance(oracle, RpcCoordinator):
            deadline = time.monotonic() + args.wait
            while request_id not in oracle.poll():
                if time.monotonic() > deadline:
                    raise SystemExit(
                        f"Request {request_id} not fulfilled within {args.wait}s."
                    )
                time.sleep(args.poll_interval)
        else:
            words = None
            if args.words:
                # explicit words are not derivable from the seed
                words = [int(w, 0) for w in args.words]
                seed = None
            oracle.fulfill(request_id, words)
    finally:
        if rpc is not None:
            rpc.close()

    result = raffle.last_result
    if result is None:
        raise SystemExit("Round did not complete.")

    audit = build_audit(result, config, seed)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    print("========================================")
    print("VRF RAFFLE DRAW")
    print("========================================")
    print(f"Request id    : {result.request_id}")
    print(f"Random word   : {result.words[0]}")
    print(f"Entries       : {len(result.players)}")
    print("----------------------------------------")
    print("WINNER")
    print(f"Address       : {result.winner}")
    print(f"Entry index   : {result.winner_index}")
    print(f"Prize         : {to_tokens(result.prize)}")
    print("----------------------------------------")
    print(f"Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("AUDIT VERIFIED")
    print(f"Winner        : {result['winner']}")
    print(f"Entry index   : {result['winner_index']}")
    print(f"Entries       : {result['num_entrants']}")
    print(f"Prize         : {to_tokens(result['prize'])}")
    if not result["seed_checked"]:
        print("Note          : words were not derived from a seed; not re-derived")
    return 0


def cmd_pick(args: argparse.Namespace) -> int:
    """Shows which entry index a random word selects for a given entry count."""
    word = int(args.word, 0)
    print(pick_winner_index([word], args.entries))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vrf-raffle",
        description="Raffle paid out with verifiable randomness.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("simulate", help="Run one full round and write an audit JSON.")
    s.add_argument("--player", action="append", help="Participant address (repeatable).")
    s.add_argument("--players-file", default=None, help="File with one address per line.")
    s.add_argument("--fee", type=int, default=None, help="Entrance fee (raw units).")
    s.add_argument("--value", type=int, default=None, help="Value sent per entry.")
    s.add_argument("--interval", type=int, default=None, help="Round interval seconds.")
    s.add_argument("--seed", default="", help="Public seed for the local coordinator.")
    s.add_argument(
        "--words",
        nargs="+",
        default=None,
        help="Explicit random words (decimal or 0x-hex); local coordinator only.",
    )
    s.add_argument(
        "--coordinator-url",
        default=None,
        help="Use a remote coordinator instead of the local one (else env).",
    )
    s.add_argument("--wait", type=float, default=300.0, help="Max seconds to wait.")
    s.add_argument("--poll-interval", type=float, default=2.0, help="Poll seconds.")
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    k = sub.add_parser("pick", help="Print the entry index a random word selects.")
    k.add_argument("--word", required=True, help="Random word (decimal or 0x-hex).")
    k.add_argument("--entries", required=True, type=int, help="Number of entries.")
    k.set_defaults(func=cmd_pick)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
