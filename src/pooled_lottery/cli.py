from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .accounts import AccountId
from .chain import DevChain
from .config import Settings
from .draw import BlockEntropy
from .errors import InvalidAccount, LotteryError
from .project_constants import DEFAULT_ACCOUNTS, DEFAULT_ACCOUNT_BALANCE_WEI
from .rpc import RpcClient, load_entropy_from_block_feed_file
from .store import load_chain, save_chain
from .units import format_ether, to_wei
from .verify import build_audit, verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def resolve_account(chain: DevChain, ref: str) -> AccountId:
    """An account index (as listed by `accounts`) or a full account id."""
    accounts = chain.accounts
    if ref.isdigit():
        idx = int(ref)
        if idx >= len(accounts):
            raise InvalidAccount(f"No account #{idx}; chain has {len(accounts)}")
        return accounts[idx]
    if ref not in accounts:
        raise InvalidAccount(f"Unknown account: {ref}")
    return ref


def cmd_init(args: argparse.Namespace) -> int:
    settings = Settings.from_env(state_file_override=args.state)
    log = logging.getLogger("init")

    if os.path.exists(settings.state_file) and not args.force:
        raise SystemExit(
            f"{settings.state_file} already exists; pass --force to replace it."
        )

    chain = DevChain.create(
        accounts=args.accounts,
        balance=to_wei(args.balance),
        min_entry=settings.min_entry_wei,
    )
    save_chain(chain, settings.state_file)
    log.info("Wrote state: %s", settings.state_file)

    print(f"Administrator : {chain.administrator}")
    print(f"Accounts      : {len(chain.accounts)}")
    print(f"Minimum entry : more than {format_ether(chain.ledger.min_entry)} ether")
    return 0


def cmd_accounts(args: argparse.Namespace) -> int:
    chain = load_chain(Settings.from_env(state_file_override=args.state).state_file)
    for i, account in enumerate(chain.accounts):
        role = " (administrator)" if account == chain.administrator else ""
        print(f"[{i}] {account}  {format_ether(chain.balance_of(account))} ether{role}")
    return 0


def cmd_enter(args: argparse.Namespace) -> int:
    settings = Settings.from_env(state_file_override=args.state)
    chain = load_chain(settings.state_file)
    caller = resolve_account(chain, args.account)

    try:
        chain.send(caller, "enter", value=to_wei(args.value))
    finally:
        # Gas is spent even when the entry reverts.
        save_chain(chain, settings.state_file)

    print(f"Entered       : {caller}")
    print(f"Players       : {len(chain.call('getPlayers'))}")
    print(f"Pool          : {format_ether(chain.call('getBalance'))} ether")
    return 0


def _external_entropy(
    args: argparse.Namespace, settings: Settings
) -> Optional[BlockEntropy]:
    if args.block_feed_file:
        return load_entropy_from_block_feed_file(args.block_feed_file, slot_hint=args.slot)
    if args.slot is None:
        return None
    if not settings.rpc_url:
        raise SystemExit("--slot needs RPC_URL or HELIUS_API_KEY (or --rpc-url).")
    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        return rpc.get_block_entropy(args.slot)
    finally:
        rpc.close()


def _require_writable(path: str) -> None:
    out_dir = os.path.dirname(os.path.abspath(path))
    if os.path.isdir(path) or not os.path.isdir(out_dir) or not os.access(out_dir, os.W_OK):
        raise SystemExit(f"Cannot write audit to {path}; no draw was made.")


def cmd_pick_winner(args: argparse.Namespace) -> int:
    settings = Settings.from_env(
        state_file_override=args.state, rpc_url_override=args.rpc_url
    )
    log = logging.getLogger("draw")
    chain = load_chain(settings.state_file)
    caller = resolve_account(chain, args.account) if args.account else chain.administrator

    entropy = _external_entropy(args, settings)
    if entropy is not None:
        log.info("Entropy block   : %d (external)", entropy.number)

    _require_writable(args.out)

    try:
        receipt = chain.send(caller, "pickWinner", entropy=entropy)
    except LotteryError:
        # Gas is spent even when the draw reverts.
        save_chain(chain, settings.state_file)
        raise

    # The draw is only committed once its audit exists.
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(build_audit(receipt), f, indent=2)
    save_chain(chain, settings.state_file)

    print("========================================")
    print("🔒 POOLED LOTTERY DRAW")
    print("========================================")
    print(f"Block number  : {receipt.entropy.number}")
    print(f"Block time    : {receipt.entropy.timestamp}")
    print(f"Seed SHA-256  : {receipt.seed_hash_hex}")
    print(f"Entrants      : {len(receipt.entrants)}")
    print("----------------------------------------")
    print("🏆 WINNER")
    print(f"Address       : {receipt.winner}")
    print(f"Index         : {receipt.winning_index}")
    print(f"Paid          : {format_ether(receipt.amount)} ether")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_players(args: argparse.Namespace) -> int:
    chain = load_chain(Settings.from_env(state_file_override=args.state).state_file)
    players = chain.call("getPlayers")
    for i, player in enumerate(players):
        print(f"[{i}] {player}")
    print(f"Players       : {len(players)}")
    return 0


def cmd_balance(args: argparse.Namespace) -> int:
    chain = load_chain(Settings.from_env(state_file_override=args.state).state_file)
    balance = chain.call("getBalance")
    print(f"Pool          : {format_ether(balance)} ether ({balance} wei)")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    print(f"Winner        : {result['winner']}")
    print(f"Winning index : {result['winning_index']} of {result['entrant_count']}")
    print(f"Paid          : {format_ether(result['amount_wei'])} ether")
    print(f"Seed SHA-256  : {result['seed_hash_hex']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pooled-lottery",
        description="Pooled-entry lottery ledger on a local development chain.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--state", default=None, help="State file (else LOTTERY_STATE_FILE).")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("init", help="Create a dev chain and deploy the ledger.")
    i.add_argument("--accounts", type=int, default=DEFAULT_ACCOUNTS)
    i.add_argument(
        "--balance",
        default=format_ether(DEFAULT_ACCOUNT_BALANCE_WEI),
        help="Starting balance per account, in ether.",
    )
    i.add_argument("--force", action="store_true", help="Replace an existing state file.")
    i.set_defaults(func=cmd_init)

    a = sub.add_parser("accounts", help="List accounts and balances.")
    a.set_defaults(func=cmd_accounts)

    e = sub.add_parser("enter", help="Enter the lottery.")
    e.add_argument("--account", required=True, help="Account index or id.")
    e.add_argument("--value", required=True, help="Deposit in ether (e.g. 0.02).")
    e.set_defaults(func=cmd_enter)

    d = sub.add_parser("pick-winner", help="Draw a winner and write an audit JSON.")
    d.add_argument(
        "--account", default=None, help="Caller (index or id); defaults to the administrator."
    )
    d.add_argument(
        "--slot", type=int, default=None, help="Seed the draw from this finalized slot."
    )
    d.add_argument(
        "--block-feed-file",
        default=None,
        help="JSON block feed (blockhash + blockTime) to seed the draw.",
    )
    d.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    d.set_defaults(func=cmd_pick_winner)

    pl = sub.add_parser("players", help="List current entrants in entry order.")
    pl.set_defaults(func=cmd_players)

    b = sub.add_parser("balance", help="Show the pooled balance.")
    b.set_defaults(func=cmd_balance)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    return p


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except LotteryError as e:
        print(f"error: {e.code}: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: invalid_input: {e}", file=sys.stderr)
        return 1


def main() -> None:
    raise SystemExit(run())
