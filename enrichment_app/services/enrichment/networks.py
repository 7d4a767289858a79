"""
Known EVM networks, built from the NETWORKS table in config.
"""

from typing import Dict, Optional, Union

from ...config.enrichment_config import DEFAULT_CHAIN_ID, NETWORKS
from .types import Network, NetworkBaseAsset


def _build_networks() -> Dict[str, Network]:
    networks = {}
    for chain_id, entry in NETWORKS.items():
        symbol, name, decimals = entry["base_asset"]
        networks[chain_id] = Network(
            name=entry["name"],
            chain_id=chain_id,
            base_asset=NetworkBaseAsset(symbol=symbol, name=name, decimals=decimals),
        )
    return networks


KNOWN_NETWORKS: Dict[str, Network] = _build_networks()

ETHEREUM = KNOWN_NETWORKS["1"]
POLYGON = KNOWN_NETWORKS["137"]
OPTIMISM = KNOWN_NETWORKS["10"]
ARBITRUM = KNOWN_NETWORKS["42161"]


def normalize_chain_id(chain_id: Union[int, str, None]) -> Optional[str]:
    """Chain ids arrive as ints, decimal strings or hex strings; return the decimal string"""
    if chain_id is None or isinstance(chain_id, bool):
        return None
    if isinstance(chain_id, int):
        return str(chain_id)
    raw = str(chain_id).strip().lower()
    try:
        return str(int(raw, 16)) if raw.startswith("0x") else str(int(raw))
    except ValueError:
        return None


def get_network(chain_id: Union[int, str, None], default: Optional[Network] = None) -> Optional[Network]:
    """Look up a known network by chain id, falling back to default (Ethereum unless given)"""
    if default is None:
        default = KNOWN_NETWORKS[DEFAULT_CHAIN_ID]
    normalized = normalize_chain_id(chain_id)
    if normalized is None:
        return default
    return KNOWN_NETWORKS.get(normalized, default)
