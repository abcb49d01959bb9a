from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .project_constants import DEFAULT_STATE_FILE, MIN_ENTRY_WEI


@dataclass(frozen=True)
class Settings:
    state_file: str
    rpc_url: Optional[str] = None
    min_entry_wei: int = MIN_ENTRY_WEI

    @staticmethod
    def from_env(
        state_file_override: Optional[str] = None,
        rpc_url_override: Optional[str] = None,
    ) -> "Settings":
        load_dotenv()

        state_file = (
            state_file_override
            or os.getenv("LOTTERY_STATE_FILE", "").strip()
            or DEFAULT_STATE_FILE
        )

        raw_min = os.getenv("LOTTERY_MIN_ENTRY_WEI", "").strip()
        if raw_min:
            try:
                min_entry = int(raw_min)
            except ValueError:
                raise RuntimeError(f"LOTTERY_MIN_ENTRY_WEI must be an integer, got {raw_min!r}")
            if min_entry < 0:
                raise RuntimeError("LOTTERY_MIN_ENTRY_WEI must not be negative")
        else:
            min_entry = MIN_ENTRY_WEI

        return Settings(
            state_file=state_file,
            rpc_url=_resolve_rpc_url(rpc_url_override),
            min_entry_wei=min_entry,
        )


def _resolve_rpc_url(rpc_url_override: Optional[str]) -> Optional[str]:
    # If user provides --rpc-url, trust it.
    if rpc_url_override:
        return rpc_url_override

    env_rpc = os.getenv("RPC_URL", "").strip()
    if env_rpc:
        return env_rpc

    helius_key = os.getenv("HELIUS_API_KEY", "").strip()
    if helius_key:
        return f"https://mainnet.helius-rpc.com/?api-key={helius_key}"

    # Only slot-seeded draws need a node.
    return None
