"""
Simulated development chain hosting a single lottery ledger.

Plays the part of the execution environment: it tracks account balances and
the funds custodied by the ledger, supplies caller identity, attached value
and block entropy to each call, charges gas, and reverts every effect of a
failed transaction except the fee.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import threading
from typing import Any, Dict, List, Optional

from .accounts import AccountId, derive_dev_accounts, require_account_id
from .draw import BlockEntropy, next_block
from .errors import InsufficientFunds, InvalidAccount, LotteryError, PayoutFailed
from .ledger import (
    CallContext,
    DrawReceipt,
    LotteryState,
    deploy,
    enter,
    get_balance,
    get_players,
    pick_winner,
)
from .project_constants import (
    BLOCK_TIME_S,
    DEFAULT_ACCOUNT_BALANCE_WEI,
    DEFAULT_ACCOUNTS,
    DEFAULT_GAS_PRICE_WEI,
    GAS_PER_TX,
    GENESIS_TIMESTAMP,
    MIN_ENTRY_WEI,
)

log = logging.getLogger(__name__)

_TRANSACTIONS = {
    "enter": "enter",
    "pickWinner": "pick_winner",
    "pick_winner": "pick_winner",
}
_READS = {
    "getPlayers": "get_players",
    "get_players": "get_players",
    "getBalance": "get_balance",
    "get_balance": "get_balance",
    "manager": "manager",
}


def genesis_block() -> BlockEntropy:
    seed = hashlib.sha256(b"pooled-lottery-genesis").hexdigest()
    return BlockEntropy(number=0, timestamp=GENESIS_TIMESTAMP, difficulty=int(seed, 16))


class DevChain:
    def __init__(
        self,
        ledger: LotteryState,
        balances: Dict[AccountId, int],
        block: BlockEntropy,
        gas_price: int = DEFAULT_GAS_PRICE_WEI,
        custody: int = 0,
    ) -> None:
        self.ledger = ledger
        self.balances = balances
        self.block = block
        self.gas_price = gas_price
        self.custody = custody
        self.last_receipt: Optional[DrawReceipt] = None
        self._lock = threading.RLock()

    @classmethod
    def create(
        cls,
        accounts: int = DEFAULT_ACCOUNTS,
        balance: int = DEFAULT_ACCOUNT_BALANCE_WEI,
        gas_price: int = DEFAULT_GAS_PRICE_WEI,
        min_entry: int = MIN_ENTRY_WEI,
    ) -> "DevChain":
        if accounts < 2:
            raise ValueError("A dev chain needs an administrator and at least one player")
        ids = derive_dev_accounts(accounts)
        chain = cls(
            ledger=deploy(ids[0], min_entry=min_entry),
            balances={a: balance for a in ids},
            block=genesis_block(),
            gas_price=gas_price,
        )
        log.debug("Created dev chain with %d accounts", accounts)
        return chain

    @property
    def accounts(self) -> List[AccountId]:
        return list(self.balances)

    @property
    def administrator(self) -> AccountId:
        return self.ledger.administrator

    @property
    def tx_fee(self) -> int:
        return GAS_PER_TX * self.gas_price

    def balance_of(self, account: AccountId) -> int:
        self._require_known(account)
        return self.balances[account]

    def send(
        self,
        caller: AccountId,
        operation: str,
        value: int = 0,
        entropy: Optional[BlockEntropy] = None,
    ) -> Any:
        """
        Run a state-changing ledger operation as a transaction from caller.

        A draw uses the block the transaction is mined in as its entropy,
        unless external entropy (e.g. a finalized block of another chain) is given.
        """
        try:
            op = _TRANSACTIONS[operation]
        except KeyError:
            raise ValueError(f"Unknown transaction: {operation!r}")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Value must be a non-negative integer, got {value!r}")
        if entropy is not None and op != "pick_winner":
            raise ValueError(f"Entropy only applies to draws, not {operation!r}")

        with self._lock:
            self._require_known(caller)
            fee = self.tx_fee
            if self.balances[caller] < value + fee:
                raise InsufficientFunds(
                    f"{caller} holds {self.balances[caller]} wei, needs {value + fee}"
                )

            pending = next_block(self.block, BLOCK_TIME_S)
            self.balances[caller] -= fee
            balances = dict(self.balances)
            custody = self.custody
            ledger = copy.deepcopy(self.ledger)

            try:
                self.balances[caller] -= value
                self.custody += value
                call = CallContext(caller=caller, value=value)
                if op == "enter":
                    result = enter(self.ledger, call)
                else:
                    result = pick_winner(
                        self.ledger, call, entropy or pending, self._pay
                    )
                    self.last_receipt = result
            except (LotteryError, ValueError) as e:
                log.debug("Transaction %s from %s reverted: %s", operation, caller, e)
                self.balances = balances
                self.custody = custody
                self.ledger = ledger
                raise
            finally:
                self.block = pending
            return result

    def call(self, operation: str) -> Any:
        """Read-only call; no gas, no block."""
        try:
            op = _READS[operation]
        except KeyError:
            raise ValueError(f"Unknown read: {operation!r}")
        with self._lock:
            if op == "get_players":
                return get_players(self.ledger)
            if op == "get_balance":
                return get_balance(self.ledger)
            return self.ledger.administrator

    def _pay(self, recipient: AccountId, amount: int) -> None:
        if amount > self.custody:
            raise PayoutFailed(
                f"Ledger custodies {self.custody} wei, cannot pay {amount}"
            )
        self.custody -= amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount

    def _require_known(self, account: AccountId) -> None:
        require_account_id(account)
        if account not in self.balances:
            raise InvalidAccount(f"Unknown account: {account}")
