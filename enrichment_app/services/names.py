"""
Address Book Name Service

NameService backed by a local address -> friendly name table, e.g. the
wallets an operator tracks. The table can be loaded from a JSON object
file ({"0xabc...": "Treasury", ...}).
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from .decoders.base import normalize_evm_address
from .enrichment.collaborators import NameService
from .enrichment.types import NameRecord, Network

logger = logging.getLogger(__name__)


class AddressBookNameService(NameService):
    """Friendly names keyed by normalized address; the same on every network."""

    def __init__(self, names: Optional[Dict[str, str]] = None):
        self._names: Dict[str, str] = {}
        for address, name in (names or {}).items():
            self.add_name(address, name)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "AddressBookNameService":
        """Load an address book from a JSON object of address -> name"""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Address book {path} must be a JSON object of address -> name")

        service = cls()
        for address, name in data.items():
            try:
                service.add_name(address, name)
            except ValueError as e:
                logger.warning(f"Skipping address book entry {address!r}: {e}")
        logger.info(f"Loaded {len(service)} name(s) from {path}")
        return service

    def add_name(self, address: str, name: str) -> None:
        name = str(name).strip()
        if not name:
            raise ValueError("name must not be empty")
        self._names[normalize_evm_address(address)] = name

    async def look_up_name(self, address: str, network: Network) -> Optional[NameRecord]:
        name = self._names.get(normalize_evm_address(address))
        return NameRecord(name=name) if name is not None else None

    def __len__(self) -> int:
        return len(self._names)
