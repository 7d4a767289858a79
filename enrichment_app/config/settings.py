"""
Runtime settings for the enrichment service.

Values come from the environment, with a `.env` file at the project root
loaded first when present:

- ENRICHMENT_DESIRED_DECIMALS: display precision for asset amounts (default 2)
- ENRICHMENT_MAX_CONCURRENCY: cap on concurrent transaction resolutions (default 16)
- ETH_RPC_URL: JSON-RPC endpoint used by the Web3 chain adapter
- ENRICHMENT_DEBUG: 1/true/yes enables verbose file logging
- ENRICHMENT_ADDRESS_BOOK: JSON file of address -> friendly name
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .enrichment_config import DEFAULT_DESIRED_DECIMALS, DEFAULT_MAX_CONCURRENT_RESOLUTIONS

_ENV_PATH = Path(__file__).resolve().parent.parent.parent / ".env"

_TRUTHY = ("1", "true", "yes")


def _int_from_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class EnrichmentSettings:
    desired_decimals: int = DEFAULT_DESIRED_DECIMALS
    max_concurrent_resolutions: int = DEFAULT_MAX_CONCURRENT_RESOLUTIONS
    rpc_url: Optional[str] = None
    debug: bool = False
    address_book_path: Optional[str] = None

    def __post_init__(self):
        if self.desired_decimals < 0:
            raise ValueError(f"desired_decimals must be >= 0, got {self.desired_decimals}")
        if self.max_concurrent_resolutions < 1:
            raise ValueError(
                f"max_concurrent_resolutions must be >= 1, got {self.max_concurrent_resolutions}"
            )

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "EnrichmentSettings":
        """Build settings from environment variables (and `.env` if present)."""
        if load_env_file:
            load_dotenv(_ENV_PATH, override=False)

        return cls(
            desired_decimals=_int_from_env("ENRICHMENT_DESIRED_DECIMALS", DEFAULT_DESIRED_DECIMALS),
            max_concurrent_resolutions=_int_from_env(
                "ENRICHMENT_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENT_RESOLUTIONS
            ),
            rpc_url=os.getenv("ETH_RPC_URL") or None,
            debug=(os.getenv("ENRICHMENT_DEBUG") or "").strip().lower() in _TRUTHY,
            address_book_path=os.getenv("ENRICHMENT_ADDRESS_BOOK") or None,
        )
