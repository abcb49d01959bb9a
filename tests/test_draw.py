import hashlib

import pytest

from pooled_lottery.accounts import derive_account_id
from pooled_lottery.draw import BlockEntropy, compute_winning_index, next_block, seed_material

CALLER = derive_account_id("manager")


def test_index_is_sha256_of_entropy_and_caller(entropy):
    index, seed_hash_hex, seed_int = compute_winning_index(entropy, CALLER, 7)

    expected = hashlib.sha256(
        f"{entropy.difficulty}:{entropy.timestamp}:{CALLER}".encode("utf-8")
    ).hexdigest()
    assert seed_material(entropy, CALLER) == f"123456789:1700000504:{CALLER}"
    assert seed_hash_hex == expected
    assert seed_int == int(expected, 16)
    assert index == seed_int % 7


def test_index_is_deterministic_and_in_range(entropy):
    for count in (1, 2, 3, 10, 97):
        first = compute_winning_index(entropy, CALLER, count)
        assert first == compute_winning_index(entropy, CALLER, count)
        assert 0 <= first[0] < count


def test_index_depends_on_caller_and_block(entropy):
    other_block = BlockEntropy(entropy.number, entropy.timestamp + 1, entropy.difficulty)
    hashes = {
        compute_winning_index(entropy, CALLER, 1000)[1],
        compute_winning_index(entropy, derive_account_id("someone"), 1000)[1],
        compute_winning_index(other_block, CALLER, 1000)[1],
    }
    assert len(hashes) == 3


@pytest.mark.parametrize("count", [0, -1])
def test_empty_range_rejected(entropy, count):
    with pytest.raises(ValueError):
        compute_winning_index(entropy, CALLER, count)


def test_next_block_advances(entropy):
    child = next_block(entropy, 12)
    assert child.number == entropy.number + 1
    assert child.timestamp == entropy.timestamp + 12
    assert child.difficulty != entropy.difficulty
    assert next_block(entropy, 12) == child
