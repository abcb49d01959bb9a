import pytest

from pooled_lottery.accounts import derive_dev_accounts
from pooled_lottery.chain import DevChain
from pooled_lottery.draw import BlockEntropy
from pooled_lottery.ledger import deploy


@pytest.fixture
def accounts():
    return derive_dev_accounts(5)


@pytest.fixture
def admin(accounts):
    return accounts[0]


@pytest.fixture
def players(accounts):
    return accounts[1:]


@pytest.fixture
def state(admin):
    return deploy(admin)


@pytest.fixture
def entropy():
    return BlockEntropy(number=42, timestamp=1_700_000_504, difficulty=123456789)


@pytest.fixture
def chain():
    return DevChain.create()


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("LOTTERY_STATE_FILE", "LOTTERY_MIN_ENTRY_WEI", "RPC_URL", "HELIUS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
