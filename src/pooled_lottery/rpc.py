from __future__ import annotations

import json
from typing import Any, Dict, Optional

import base58
import httpx

from .draw import BlockEntropy


def blockhash_to_int(blockhash: str) -> int:
    try:
        return int.from_bytes(base58.b58decode(blockhash), "big")
    except ValueError as e:
        raise RuntimeError(f"Blockhash is not valid base58: {blockhash!r}") from e


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def get_block_time(self, slot: int) -> int:
        """Returns the Unix timestamp for a given slot."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBlockTime",
            "params": [slot],
        }
        data = self._post(payload)
        if data.get("result") is None:
            raise RuntimeError(f"Timestamp not available for slot {slot}")
        return int(data["result"])

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def get_blockhash_for_slot(self, slot: int) -> str:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBlock",
            "params": [
                slot,
                {"encoding": "json", "transactionDetails": "none", "rewards": False},
            ],
        }
        data = self._post(payload)
        result = data.get("result")
        if not result or "blockhash" not in result:
            raise RuntimeError(f"Slot {slot}: getBlock returned no blockhash.")
        return result["blockhash"]

    def get_block_entropy(self, slot: int) -> BlockEntropy:
        """Entropy for a finalized slot: its blockhash as difficulty plus its block time."""
        blockhash = self.get_blockhash_for_slot(slot)
        return BlockEntropy(
            number=slot,
            timestamp=self.get_block_time(slot),
            difficulty=blockhash_to_int(blockhash),
        )


def _entropy_from_block(block: Dict[str, Any], slot: Optional[int]) -> Optional[BlockEntropy]:
    blockhash = block.get("blockhash")
    timestamp = block.get("blockTime", block.get("timestamp"))
    if not isinstance(blockhash, str) or timestamp is None:
        return None
    number = block.get("slot", slot)
    return BlockEntropy(
        number=int(number) if number is not None else 0,
        timestamp=int(timestamp),
        difficulty=blockhash_to_int(blockhash),
    )


def load_entropy_from_block_feed_file(
    path: str, slot_hint: Optional[int] = None
) -> BlockEntropy:
    """
    Supports JSON objects of the forms:
       - {"blockhash": "...", "blockTime": 1700000000}
       - {"slot": 123, "blockhash": "...", "timestamp": ...}  (slot checked against slot_hint)
       - {"result": {"blockhash": "...", "blockTime": ...}}
       - {"blocks": {"123": {"blockhash": "...", "blockTime": ...}}}  (needs slot_hint)
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read().strip()

    try:
        j = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Block feed file is not valid JSON: {e}") from e

    if isinstance(j, dict):
        if "blockhash" in j:
            if (
                slot_hint is not None
                and "slot" in j
                and int(j["slot"]) != int(slot_hint)
            ):
                raise RuntimeError(
                    f"Block feed slot mismatch: file slot={j['slot']} vs expected slot={slot_hint}"
                )
            entropy = _entropy_from_block(j, slot_hint)
            if entropy is not None:
                return entropy

        if isinstance(j.get("result"), dict):
            entropy = _entropy_from_block(j["result"], slot_hint)
            if entropy is not None:
                return entropy

        # A feed of many blocks
        if slot_hint is not None and isinstance(j.get("blocks"), dict):
            block_obj = j["blocks"].get(str(int(slot_hint)))
            if isinstance(block_obj, dict):
                entropy = _entropy_from_block(block_obj, slot_hint)
                if entropy is not None:
                    return entropy

    raise RuntimeError(
        "Could not find a blockhash and block time in block feed file. "
        "Expected JSON with blockhash+blockTime, result.*, or blocks[slot].*."
    )
