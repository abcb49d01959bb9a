from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .project_constants import ETHER_DECIMALS, WEI_PER_ETHER


def to_wei(ether: Union[str, int, Decimal]) -> int:
    """Convert an ether amount ("0.02", 3, Decimal("1.5")) to integer wei."""
    try:
        amount = Decimal(str(ether).strip())
    except InvalidOperation:
        raise ValueError(f"Not an ether amount: {ether!r}")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Ether amount must be a non-negative number: {ether!r}")

    wei = amount * WEI_PER_ETHER
    if wei != wei.to_integral_value():
        raise ValueError(
            f"Ether amount has more than {ETHER_DECIMALS} decimals: {ether!r}"
        )
    return int(wei)


def to_ether(raw_amount: int) -> Decimal:
    return Decimal(raw_amount) / WEI_PER_ETHER


def format_ether(raw_amount: int) -> str:
    # Drop trailing zeros but keep at least one decimal, e.g. "0.06", "3.0"
    text = format(to_ether(raw_amount).normalize(), "f")
    return text if "." in text else f"{text}.0"
