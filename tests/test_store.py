import json

import pytest

from pooled_lottery.errors import StateFileError
from pooled_lottery.store import load_chain, save_chain
from pooled_lottery.units import to_wei


def test_round_trip(chain, tmp_path):
    path = str(tmp_path / "state.json")
    chain.send(chain.accounts[1], "enter", value=to_wei("0.02"))
    chain.send(chain.accounts[2], "enter", value=to_wei("0.5"))

    save_chain(chain, path)
    loaded = load_chain(path)

    assert loaded.balances == chain.balances
    assert loaded.custody == chain.custody
    assert loaded.block == chain.block
    assert loaded.gas_price == chain.gas_price
    assert loaded.ledger == chain.ledger
    assert loaded.call("getPlayers") == chain.accounts[1:3]


def test_big_ints_stored_as_strings(chain, tmp_path):
    path = tmp_path / "state.json"
    save_chain(chain, str(path))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["balances"][chain.accounts[0]] == str(chain.balance_of(chain.accounts[0]))
    assert isinstance(data["block"]["difficulty"], str)


def test_missing_file(tmp_path):
    with pytest.raises(StateFileError):
        load_chain(str(tmp_path / "absent.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StateFileError):
        load_chain(str(path))


def _tamper(chain, tmp_path, edit):
    path = tmp_path / "state.json"
    save_chain(chain, str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    edit(data)
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_administrator_among_entrants_rejected(chain, tmp_path):
    def edit(data):
        data["ledger"]["entrants"] = [data["ledger"]["administrator"]]
        data["ledger"]["pooled_balance"] = "1"
        data["custody"] = "1"

    with pytest.raises(StateFileError):
        load_chain(_tamper(chain, tmp_path, edit))


def test_pool_exceeding_custody_rejected(chain, tmp_path):
    def edit(data):
        data["ledger"]["entrants"] = [chain.accounts[1]]
        data["ledger"]["pooled_balance"] = "100"

    with pytest.raises(StateFileError):
        load_chain(_tamper(chain, tmp_path, edit))


def test_balance_without_entrants_rejected(chain, tmp_path):
    def edit(data):
        data["ledger"]["pooled_balance"] = "5"
        data["custody"] = "5"

    with pytest.raises(StateFileError):
        load_chain(_tamper(chain, tmp_path, edit))


def test_missing_field_rejected(chain, tmp_path):
    with pytest.raises(StateFileError):
        load_chain(_tamper(chain, tmp_path, lambda data: data.pop("block")))


def test_negative_minimum_entry_rejected(chain, tmp_path):
    def edit(data):
        data["ledger"]["min_entry"] = "-1"

    with pytest.raises(StateFileError):
        load_chain(_tamper(chain, tmp_path, edit))
