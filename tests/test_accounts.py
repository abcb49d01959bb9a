import base58
import pytest

from pooled_lottery.accounts import (
    derive_account_id,
    derive_dev_accounts,
    encode_account_id,
    is_account_id,
    require_account_id,
)
from pooled_lottery.errors import InvalidAccount


def test_account_ids_are_base58_32_bytes():
    account = derive_account_id("alice")
    assert len(base58.b58decode(account)) == 32
    assert is_account_id(account)


def test_derived_accounts_are_stable_and_distinct():
    accounts = derive_dev_accounts(4)
    assert accounts == derive_dev_accounts(4)
    assert len(set(accounts)) == 4
    assert accounts[0] == derive_account_id("dev-account-0")


@pytest.mark.parametrize("value", ["", "0OIl", "abc", None, 42, base58.b58encode(b"x" * 31).decode()])
def test_invalid_account_ids(value):
    assert not is_account_id(value)
    with pytest.raises(InvalidAccount):
        require_account_id(value)


def test_encode_rejects_wrong_length():
    with pytest.raises(InvalidAccount):
        encode_account_id(b"short")
