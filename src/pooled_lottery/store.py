from __future__ import annotations

import json
import os
from typing import Any, Dict

from .accounts import is_account_id
from .chain import DevChain
from .draw import BlockEntropy
from .errors import StateFileError
from .ledger import LotteryState

STATE_VERSION = 1


def chain_to_dict(chain: DevChain) -> Dict[str, Any]:
    # Wei amounts exceed 2**53; store big ints as strings for safety.
    return {
        "version": STATE_VERSION,
        "gas_price": str(chain.gas_price),
        "custody": str(chain.custody),
        "block": {
            "number": chain.block.number,
            "timestamp": chain.block.timestamp,
            "difficulty": str(chain.block.difficulty),
        },
        "balances": {a: str(b) for a, b in chain.balances.items()},
        "ledger": {
            "administrator": chain.ledger.administrator,
            "min_entry": str(chain.ledger.min_entry),
            "entrants": list(chain.ledger.entrants),
            "pooled_balance": str(chain.ledger.pooled_balance),
        },
    }


def chain_from_dict(data: Dict[str, Any]) -> DevChain:
    try:
        if data.get("version") != STATE_VERSION:
            raise StateFileError(f"Unsupported state version: {data.get('version')!r}")
        block = data["block"]
        ledger = data["ledger"]
        state = LotteryState(
            administrator=ledger["administrator"],
            min_entry=int(ledger["min_entry"]),
            entrants=list(ledger["entrants"]),
            pooled_balance=int(ledger["pooled_balance"]),
        )
        chain = DevChain(
            ledger=state,
            balances={a: int(b) for a, b in data["balances"].items()},
            block=BlockEntropy(
                number=int(block["number"]),
                timestamp=int(block["timestamp"]),
                difficulty=int(block["difficulty"]),
            ),
            gas_price=int(data["gas_price"]),
            custody=int(data["custody"]),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StateFileError(f"Malformed state: {e!r}") from e

    _check_invariants(chain)
    return chain


def _check_invariants(chain: DevChain) -> None:
    state = chain.ledger
    for account in [state.administrator, *state.entrants, *chain.balances]:
        if not is_account_id(account):
            raise StateFileError(f"Invalid account id in state: {account!r}")
    if state.min_entry < 0:
        raise StateFileError(f"Minimum entry must not be negative: {state.min_entry}")
    if (state.pooled_balance == 0) != (not state.entrants):
        raise StateFileError("Pooled balance and entrant list disagree")
    if state.administrator in state.entrants:
        raise StateFileError("Administrator found among entrants")
    if state.pooled_balance > chain.custody:
        raise StateFileError(
            f"Pooled balance {state.pooled_balance} exceeds custody {chain.custody}"
        )
    if min(chain.balances.values(), default=0) < 0 or chain.custody < 0:
        raise StateFileError("Negative balance in state")


def save_chain(chain: DevChain, path: str) -> None:
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(chain_to_dict(chain), f, indent=2)
    os.replace(tmp, path)


def load_chain(path: str) -> DevChain:
    if not os.path.exists(path):
        raise StateFileError(f"No lottery state at {path}; run `pooled-lottery init` first")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StateFileError(f"State file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise StateFileError(f"State file {path} must hold a JSON object")
    return chain_from_dict(data)
