from __future__ import annotations

import hashlib
from typing import List

import base58

from .errors import InvalidAccount

ACCOUNT_ID_BYTES = 32

# Account ids are base58-encoded 32-byte public keys.
AccountId = str


def encode_account_id(key_bytes: bytes) -> AccountId:
    if len(key_bytes) != ACCOUNT_ID_BYTES:
        raise InvalidAccount(
            f"Account key must be {ACCOUNT_ID_BYTES} bytes, got {len(key_bytes)}"
        )
    return base58.b58encode(key_bytes).decode("ascii")


def is_account_id(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        raw = base58.b58decode(value)
    except ValueError:
        return False
    return len(raw) == ACCOUNT_ID_BYTES


def require_account_id(value: object) -> AccountId:
    if not is_account_id(value):
        raise InvalidAccount(f"Not a valid account id: {value!r}")
    return value  # type: ignore[return-value]


def derive_account_id(label: str) -> AccountId:
    """Deterministic account id for a label (dev chains, tests)."""
    return encode_account_id(hashlib.sha256(label.encode("utf-8")).digest())


def derive_dev_accounts(count: int) -> List[AccountId]:
    # Deterministic ordering (critical for reproducible dev chains)
    return [derive_account_id(f"dev-account-{i}") for i in range(count)]
