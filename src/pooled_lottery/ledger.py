"""
Pooled lottery ledger.

The ledger owns its state in an explicit LotteryState that every operation
receives by reference; the caller identity and attached value arrive as an
explicit CallContext. All preconditions are checked before anything is
mutated, so a failed call leaves no trace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .accounts import AccountId, require_account_id
from .draw import BlockEntropy, compute_winning_index, seed_material
from .errors import EmptyPool, InsufficientDeposit, PayoutFailed, Unauthorized
from .project_constants import MIN_ENTRY_WEI

log = logging.getLogger(__name__)

# transfer(recipient, amount) moves custodied funds out of the ledger
Transfer = Callable[[AccountId, int], None]


@dataclass
class LotteryState:
    administrator: AccountId
    min_entry: int = MIN_ENTRY_WEI
    entrants: List[AccountId] = field(default_factory=list)
    pooled_balance: int = 0


@dataclass(frozen=True)
class CallContext:
    caller: AccountId
    value: int = 0


@dataclass(frozen=True)
class DrawReceipt:
    winner: AccountId
    winning_index: int
    amount: int
    entrants: List[AccountId]
    entropy: BlockEntropy
    caller: AccountId
    seed_hash_hex: str
    seed_int: int

    @property
    def seed_material(self) -> str:
        return seed_material(self.entropy, self.caller)


def _check_value(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Call value must be a non-negative integer, got {value!r}")
    return value


def deploy(administrator: AccountId, min_entry: int = MIN_ENTRY_WEI) -> LotteryState:
    require_account_id(administrator)
    _check_value(min_entry)
    log.debug("Deployed ledger, administrator=%s min_entry=%d", administrator, min_entry)
    return LotteryState(administrator=administrator, min_entry=min_entry)


def enter(state: LotteryState, call: CallContext) -> None:
    require_account_id(call.caller)
    value = _check_value(call.value)
    if call.caller == state.administrator:
        raise Unauthorized("The administrator cannot enter the lottery")
    if value <= state.min_entry:
        raise InsufficientDeposit(
            f"Entry must be more than {state.min_entry} wei, got {value}"
        )

    state.entrants.append(call.caller)
    state.pooled_balance += value
    log.debug(
        "Entry #%d from %s (%d wei), pool=%d",
        len(state.entrants),
        call.caller,
        value,
        state.pooled_balance,
    )


def pick_winner(
    state: LotteryState,
    call: CallContext,
    entropy: BlockEntropy,
    transfer: Transfer,
) -> DrawReceipt:
    if call.caller != state.administrator:
        raise Unauthorized("Only the administrator can pick a winner")
    if not state.entrants:
        raise EmptyPool("No entrants to draw from")
    if _check_value(call.value) != 0:
        raise ValueError("pick_winner does not accept value")

    entrants = list(state.entrants)
    amount = state.pooled_balance
    index, seed_hash_hex, seed_int = compute_winning_index(
        entropy, call.caller, len(entrants)
    )
    winner = entrants[index]

    # Reset before paying out: a reentrant call from transfer sees an empty pool.
    state.entrants = []
    state.pooled_balance = 0
    try:
        transfer(winner, amount)
    except Exception as e:
        state.entrants = entrants
        state.pooled_balance = amount
        if isinstance(e, PayoutFailed):
            raise
        raise PayoutFailed(f"Payout of {amount} wei to {winner} failed: {e}") from e

    log.info(
        "Winner %s (index %d of %d) paid %d wei",
        winner,
        index,
        len(entrants),
        amount,
    )
    return DrawReceipt(
        winner=winner,
        winning_index=index,
        amount=amount,
        entrants=entrants,
        entropy=entropy,
        caller=call.caller,
        seed_hash_hex=seed_hash_hex,
        seed_int=seed_int,
    )


def get_players(state: LotteryState, call: Optional[CallContext] = None) -> List[AccountId]:
    return list(state.entrants)


def get_balance(state: LotteryState, call: Optional[CallContext] = None) -> int:
    return state.pooled_balance
