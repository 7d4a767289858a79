"""
Interfaces of the read-only collaborator services the enrichment service
coordinates. Concrete implementations live outside the engine (node and
indexer access, asset indexing, name resolution); see services/chain.py and
services/indexing.py and services/names.py for the bundled adapters.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..events import EventChannel
from .types import AnyAsset, EVMBlock, NameRecord, Network, TransactionEvent


class ChainService(ABC):
    """
    Source of transactions and blocks.

    Publishes a TransactionEvent on `transactions` for every new or updated
    transaction relevant to the tracked accounts.
    """

    def __init__(self):
        self.transactions: EventChannel[TransactionEvent] = EventChannel("transaction")

    @abstractmethod
    async def get_block_data(self, network: Network, block_hash: str) -> Optional[EVMBlock]:
        """Return the block, or None if it is not (yet) available"""


class IndexingService(ABC):
    """Owner of the known-asset list; the engine only reads snapshots."""

    @abstractmethod
    async def get_cached_assets(self, network: Network) -> Sequence[AnyAsset]:
        """Return the current, possibly stale, list of known assets"""


class NameService(ABC):
    """Address-to-name resolution (ENS, address book, ...)."""

    @abstractmethod
    async def look_up_name(self, address: str, network: Network) -> Optional[NameRecord]:
        """Resolve a display name; may return None or raise"""
