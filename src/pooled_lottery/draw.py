from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BlockEntropy:
    """Block-level inputs the environment supplies to a draw."""

    number: int
    timestamp: int
    difficulty: int


def seed_material(entropy: BlockEntropy, caller: str) -> str:
    return f"{entropy.difficulty}:{entropy.timestamp}:{caller}"


def compute_winning_index(
    entropy: BlockEntropy, caller: str, entrant_count: int
) -> Tuple[int, str, int]:
    """
    Hash the entropy inputs and the caller into an index in [0, entrant_count).

    Best-effort only: whoever influences the block inputs can bias the result.
    """
    if entrant_count <= 0:
        raise ValueError("entrant_count must be positive")
    seed_hash_hex = hashlib.sha256(
        seed_material(entropy, caller).encode("utf-8")
    ).hexdigest()
    seed_int = int(seed_hash_hex, 16)
    return seed_int % entrant_count, seed_hash_hex, seed_int


def next_block(block: BlockEntropy, block_time_s: int) -> BlockEntropy:
    parent = hashlib.sha256(
        f"{block.number}:{block.timestamp}:{block.difficulty}".encode("utf-8")
    ).hexdigest()
    return BlockEntropy(
        number=block.number + 1,
        timestamp=block.timestamp + block_time_s,
        difficulty=int(parent, 16),
    )
