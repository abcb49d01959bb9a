import json

import pytest

from pooled_lottery.units import to_wei
from pooled_lottery.verify import build_audit, verify_audit


@pytest.fixture
def receipt(chain):
    for p in chain.accounts[1:5]:
        chain.send(p, "enter", value=to_wei("0.02"))
    return chain.send(chain.administrator, "pickWinner")


def _write(tmp_path, audit):
    path = tmp_path / "audit.json"
    path.write_text(json.dumps(audit), encoding="utf-8")
    return str(path)


def test_audit_verifies(receipt, tmp_path):
    audit = build_audit(receipt)

    result = verify_audit(_write(tmp_path, audit))

    assert result["ok"] is True
    assert result["winner"] == receipt.winner
    assert result["winning_index"] == receipt.winning_index
    assert result["entrant_count"] == 4
    assert result["amount_wei"] == to_wei("0.08")
    assert audit["all_entrants"] == receipt.entrants


def test_tampered_winner_detected(receipt, tmp_path):
    audit = build_audit(receipt)
    audit["winner"]["address"] = next(e for e in receipt.entrants if e != receipt.winner)

    with pytest.raises(RuntimeError, match="Winner mismatch"):
        verify_audit(_write(tmp_path, audit))


def test_tampered_entropy_detected(receipt, tmp_path):
    audit = build_audit(receipt)
    audit["metadata"]["block_timestamp"] += 1

    with pytest.raises(RuntimeError, match="Seed material mismatch"):
        verify_audit(_write(tmp_path, audit))


def test_dropped_entrant_detected(receipt, tmp_path):
    audit = build_audit(receipt)
    audit["all_entrants"].pop()

    with pytest.raises(RuntimeError, match="Entrant count mismatch"):
        verify_audit(_write(tmp_path, audit))
