"""Error taxonomy for the lottery ledger and its hosting environment."""

from __future__ import annotations


class LotteryError(Exception):
    """Base error. Raised before any state is mutated."""

    code = "lottery_error"

    def __init__(self, message: str = "Lottery error") -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(LotteryError):
    """Administrator-only call by someone else, or entry by the administrator."""

    code = "unauthorized"


class InsufficientDeposit(LotteryError):
    """Entry value at or below the minimum threshold."""

    code = "insufficient_deposit"


class EmptyPool(LotteryError):
    """Draw attempted with no entrants."""

    code = "empty_pool"


class PayoutFailed(LotteryError):
    """The winner transfer could not complete; the draw was rolled back."""

    code = "payout_failed"


class InvalidAccount(LotteryError):
    code = "invalid_account"


class InsufficientFunds(LotteryError):
    """Caller cannot cover the attached value plus gas."""

    code = "insufficient_funds"


class StateFileError(LotteryError):
    code = "state_file_error"
