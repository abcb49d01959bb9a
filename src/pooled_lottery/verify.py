from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from .draw import BlockEntropy, compute_winning_index, seed_material
from .ledger import DrawReceipt

TOOL_NAME = "pooled-lottery"
TOOL_VERSION = "1.0.0"


def build_audit(receipt: DrawReceipt) -> Dict[str, Any]:
    return {
        "metadata": {
            "tool": TOOL_NAME,
            "version": TOOL_VERSION,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "block_number": receipt.entropy.number,
            "block_timestamp": receipt.entropy.timestamp,
            "block_difficulty": str(receipt.entropy.difficulty),
            "caller": receipt.caller,
            "seed_material": receipt.seed_material,
            "seed_hash_hex": receipt.seed_hash_hex,
            "seed_int": str(receipt.seed_int),  # big int; store as string for safety
            "entrant_count": len(receipt.entrants),
            "winning_index": receipt.winning_index,
            "amount_wei": str(receipt.amount),
        },
        "winner": {"address": receipt.winner},
        # Entrants in entry order so anyone can re-run the draw.
        "all_entrants": list(receipt.entrants),
    }


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    entropy = BlockEntropy(
        number=int(meta["block_number"]),
        timestamp=int(meta["block_timestamp"]),
        difficulty=int(meta["block_difficulty"]),
    )
    caller = meta["caller"]
    entrants = audit["all_entrants"]

    if len(entrants) != int(meta["entrant_count"]):
        raise RuntimeError(
            f"Entrant count mismatch: audit={meta['entrant_count']} recomputed={len(entrants)}"
        )
    material = seed_material(entropy, caller)
    if material != meta["seed_material"]:
        raise RuntimeError(
            f"Seed material mismatch: audit={meta['seed_material']} recomputed={material}"
        )

    index, seed_hash_hex, seed_int = compute_winning_index(entropy, caller, len(entrants))
    if seed_hash_hex != meta["seed_hash_hex"]:
        raise RuntimeError(
            f"Seed hash mismatch: audit={meta['seed_hash_hex']} recomputed={seed_hash_hex}"
        )
    if index != int(meta["winning_index"]):
        raise RuntimeError(
            f"Winning index mismatch: audit={meta['winning_index']} recomputed={index}"
        )

    winner = entrants[index]
    winner_expected = audit["winner"]["address"]
    if winner != winner_expected:
        raise RuntimeError(f"Winner mismatch: audit={winner_expected} recomputed={winner}")

    return {
        "ok": True,
        "seed_hash_hex": seed_hash_hex,
        "seed_int": seed_int,
        "winner": winner,
        "winning_index": index,
        "entrant_count": len(entrants),
        "amount_wei": int(meta["amount_wei"]),
    }
