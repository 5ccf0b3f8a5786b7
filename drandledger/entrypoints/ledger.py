"""drand verification ledger command line.

Operates on the database named by ``--ledger.database_url`` (or
``DRANDLEDGER_DATABASE_URL``). Results are printed as JSON.

Usage:
    drand-ledger time-of-round 111765
    drand-ledger round-after 1677685203
    drand-ledger --ledger.database_url sqlite:///ledger.db allow bot1 bot2
    drand-ledger --ledger.database_url sqlite:///ledger.db add-round 20 <hex> bot1 --moniker Alice
    drand-ledger --ledger.database_url sqlite:///ledger.db submissions 20
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Sequence

import bittensor as bt
from dotenv import load_dotenv
from pydantic import ValidationError

from drandledger.base.config import add_args, config_from_args
from drandledger.drand.rounds import NANOS_PER_SECOND, RoundClock, is_incentivised
from drandledger.errors import LedgerError


def _print(data: Any) -> None:
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    elif isinstance(data, list):
        data = [d.model_dump(mode="json") if hasattr(d, "model_dump") else d for d in data]
    print(json.dumps(data, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="drand-ledger", description="drand verification ledger")
    add_args(parser)
    bt.logging.add_args(parser)

    commands = parser.add_subparsers(dest="command", required=True)

    cmd = commands.add_parser("time-of-round", help="Publication time of a round (UNIX seconds)")
    cmd.add_argument("round", type=int)

    cmd = commands.add_parser("round-after", help="First round published strictly after a time")
    cmd.add_argument("seconds", type=int, help="UNIX seconds")
    cmd.add_argument("--nanos", type=int, default=0, help="Sub-second offset in ns (may be negative)")

    cmd = commands.add_parser("is-incentivised", help="Whether a round is paid out to bots")
    cmd.add_argument("round", type=int)

    cmd = commands.add_parser("allow", help="Add bots to the allowlist")
    cmd.add_argument("bots", nargs="+")

    cmd = commands.add_parser("disallow", help="Remove bots from the allowlist")
    cmd.add_argument("bots", nargs="+")

    cmd = commands.add_parser("add-round", help="Record a verified round submitted by a bot")
    cmd.add_argument("round", type=int)
    cmd.add_argument("randomness", help="sha256(signature) as hex")
    cmd.add_argument("bot")
    cmd.add_argument("--moniker", default="")

    cmd = commands.add_parser("beacon", help="Show the verified beacon of a round")
    cmd.add_argument("round", type=int)

    cmd = commands.add_parser("beacons", help="Page through verified beacons")
    cmd.add_argument("--desc", action="store_true")
    cmd.add_argument("--start-after", type=int, default=None)
    cmd.add_argument("--limit", type=int, default=None)

    cmd = commands.add_parser("submissions", help="Bots of a round in arrival order")
    cmd.add_argument("round", type=int)

    cmd = commands.add_parser("bot", help="Show a bot")
    cmd.add_argument("address")

    commands.add_parser("bots", help="List all bots")
    commands.add_parser("rebuild-bots", help="Recompute rounds_added from submission order")
    return parser


def run(args: argparse.Namespace) -> None:
    config = config_from_args(args)
    clock = RoundClock.from_config(config.chain)

    # Pure commands need no database
    if args.command == "time-of-round":
        ns = clock.time_of_round(args.round)
        _print({"round": args.round, "seconds": ns // NANOS_PER_SECOND, "nanos": ns})
        return
    if args.command == "round-after":
        base = args.seconds * NANOS_PER_SECOND + args.nanos
        _print({"round": clock.round_after(base)})
        return
    if args.command == "is-incentivised":
        _print({"round": args.round, "incentivised": is_incentivised(args.round)})
        return

    from drandledger.ledger.service import DrandLedger

    ledger = DrandLedger(config)
    try:
        if args.command == "allow":
            _print(ledger.update_allowlist(add=args.bots))
        elif args.command == "disallow":
            _print(ledger.update_allowlist(remove=args.bots))
        elif args.command == "add-round":
            _print(ledger.add_round(args.round, args.randomness, args.bot, moniker=args.moniker))
        elif args.command == "beacon":
            _print(ledger.beacon(args.round))
        elif args.command == "beacons":
            _print(ledger.beacons(ascending=not args.desc, start_after=args.start_after, limit=args.limit))
        elif args.command == "submissions":
            _print(ledger.submissions(args.round))
        elif args.command == "bot":
            _print(ledger.bot(args.address))
        elif args.command == "bots":
            _print(ledger.bots())
        elif args.command == "rebuild-bots":
            _print(ledger.registry.rebuild_rounds_added())
    finally:
        ledger.database.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    # Load .env if not in test mode
    if os.environ.get("DRANDLEDGER_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    try:
        run(args)
    except (LedgerError, ValidationError) as e:
        bt.logging.error({"drand_ledger_cli": {"command": args.command, "error": type(e).__name__, "detail": str(e)}})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
