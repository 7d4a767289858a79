"""
Static Indexing Service

In-memory IndexingService holding the known assets for each network. The
Ethereum list is seeded from VERIFIED_TOKENS; callers can add or replace
assets at runtime. get_cached_assets hands out a snapshot, so later updates
never change a list a resolution is already using.
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging

from ..config.enrichment_config import DEFAULT_CHAIN_ID, VERIFIED_TOKENS
from .decoders.base import same_evm_address
from .enrichment.collaborators import IndexingService
from .enrichment.types import AnyAsset, Network, SmartContractFungibleAsset

logger = logging.getLogger(__name__)


def verified_token_assets() -> List[SmartContractFungibleAsset]:
    """Build fungible assets from the VERIFIED_TOKENS table"""
    return [
        SmartContractFungibleAsset(symbol=symbol, name=name, decimals=decimals, contract_address=address)
        for symbol, (address, name, decimals) in VERIFIED_TOKENS.items()
    ]


class StaticIndexingService(IndexingService):
    """Known assets keyed by chain id."""

    def __init__(self, assets_by_chain: Optional[Dict[str, Iterable[AnyAsset]]] = None):
        if assets_by_chain is None:
            assets_by_chain = {DEFAULT_CHAIN_ID: verified_token_assets()}
        self._assets: Dict[str, List[AnyAsset]] = {
            str(chain_id): list(assets) for chain_id, assets in assets_by_chain.items()
        }
        logger.info(
            f"StaticIndexingService loaded {sum(len(a) for a in self._assets.values())} asset(s) "
            f"across {len(self._assets)} network(s)"
        )

    async def get_cached_assets(self, network: Network) -> Tuple[AnyAsset, ...]:
        return tuple(self._assets.get(network.chain_id, ()))

    def add_asset(self, network: Network, asset: AnyAsset) -> None:
        """Add an asset, replacing any existing one at the same contract address"""
        assets = self._assets.setdefault(network.chain_id, [])
        address = getattr(asset, "contract_address", None)
        if address is not None:
            assets[:] = [
                existing for existing in assets
                if not same_evm_address(getattr(existing, "contract_address", None), address)
            ]
        assets.append(asset)
        logger.debug(f"Indexed {asset.symbol} on {network.name}")
