"""
Concurrent address-to-name resolution.

Every lookup in a batch starts at once; each one succeeds or fails on its
own and is reported as a NameLookupResult. A failed lookup only blanks the
name of its own address.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
import logging

from ..decoders.base import format_address, normalize_evm_address
from .collaborators import NameService
from .types import Network

logger = logging.getLogger(__name__)


def name_key(address: str) -> str:
    """Batch key for an address: its normalized form, or the raw lowercase text when it is not hex"""
    try:
        return normalize_evm_address(address)
    except ValueError:
        return str(address).lower()


@dataclass(frozen=True)
class NameLookupResult:
    """Outcome of one lookup: a name (possibly None) or the error raised"""
    address: str
    name: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NameResolutionBatcher:
    """Fans name lookups out to the naming collaborator."""

    def __init__(self, name_service: NameService):
        self.name_service = name_service

    async def _look_up(self, address: str, network: Network) -> NameLookupResult:
        try:
            normalize_evm_address(address)
        except ValueError as e:
            logger.warning(f"Skipping name lookup for malformed address {address!r}")
            return NameLookupResult(address=address, error=e)

        try:
            record = await self.name_service.look_up_name(address, network)
        except Exception as e:
            logger.warning(f"Name lookup failed for {format_address(address)} on {network.name}: {e}")
            return NameLookupResult(address=address, error=e)
        return NameLookupResult(address=address, name=record.name if record is not None else None)

    async def lookup_all(self, addresses: Iterable[str], network: Network) -> List[NameLookupResult]:
        """
        Look up names for the distinct addresses, all concurrently.

        Addresses are deduplicated by normalized form; results keep the order
        of first appearance. Malformed addresses are never sent to the name
        service and come back as failed results.
        """
        unique: Dict[str, str] = {}
        for address in addresses:
            if address:
                unique.setdefault(name_key(address), address)

        if not unique:
            return []

        return list(await asyncio.gather(
            *(self._look_up(address, network) for address in unique.values())
        ))

    async def resolve_many(self, addresses: Iterable[str], network: Network) -> Dict[str, Optional[str]]:
        """
        Resolve names for a set of addresses.

        Returns:
            name_key(address) -> name, None where unresolved or failed
        """
        results = await self.lookup_all(addresses, network)
        failed = sum(1 for result in results if not result.ok)
        if failed:
            logger.debug(f"{failed}/{len(results)} name lookup(s) failed on {network.name}")
        return {name_key(result.address): result.name for result in results}

    async def resolve_one(self, address: Optional[str], network: Network) -> Optional[str]:
        """Single-address batch; None if the address is missing or unresolved"""
        if not address:
            return None
        names = await self.resolve_many([address], network)
        return names.get(name_key(address))
