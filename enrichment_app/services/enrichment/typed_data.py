"""
EIP-712 typed-data annotation.

Recognizes EIP-2612 permit requests and describes them; any other typed
data is annotated as unrecognized.
"""

from typing import Any, Dict, Optional
import logging

from ...config.enrichment_config import (
    EIP2612_MESSAGE_FIELDS,
    EIP2612_PRIMARY_TYPE,
    EIP2612_TYPE_FIELDS,
)
from ..decoders.base import normalize_evm_address
from .assets import enrich_asset_amount_with_decimal_values, find_fungible_asset
from .collaborators import IndexingService
from .names import NameResolutionBatcher
from .networks import get_network
from .types import (
    EIP2612PermitAnnotation,
    SignTypedDataAnnotation,
    SignTypedDataRequest,
    UnrecognizedTypedDataAnnotation,
)

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> Optional[int]:
    """Parse uint values that wallets send as ints, decimal strings or hex strings"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    raw = str(value).strip().lower()
    try:
        return int(raw, 16) if raw.startswith("0x") else int(raw)
    except ValueError:
        return None


def is_eip2612_typed_data(typed_data: Any) -> bool:
    """
    Check typed data against the EIP-2612 permit shape: primary type
    "Permit", a Permit type declaring owner/spender/value/nonce/deadline, and
    a message carrying owner, spender, a numeric value and deadline.
    """
    if not isinstance(typed_data, dict):
        return False
    if typed_data.get("primaryType") != EIP2612_PRIMARY_TYPE:
        return False

    types = typed_data.get("types")
    if not isinstance(types, dict):
        return False
    permit_type = types.get(EIP2612_PRIMARY_TYPE)
    if not isinstance(permit_type, list):
        return False
    declared = {
        f["name"] for f in permit_type
        if isinstance(f, dict) and isinstance(f.get("name"), str)
    }
    if not EIP2612_TYPE_FIELDS.issubset(declared):
        return False

    message = typed_data.get("message")
    if not isinstance(message, dict) or not EIP2612_MESSAGE_FIELDS.issubset(message):
        return False
    if not isinstance(typed_data.get("domain") or {}, dict):
        return False

    try:
        normalize_evm_address(message["owner"])
        normalize_evm_address(message["spender"])
    except (TypeError, ValueError):
        return False
    return _to_int(message["value"]) is not None


class TypedDataAnnotator:
    """Builds SignTypedDataAnnotations for EIP-712 signing requests."""

    def __init__(self, indexing_service: IndexingService, name_batcher: NameResolutionBatcher):
        self.indexing_service = indexing_service
        self.name_batcher = name_batcher

    async def annotate(self, request: SignTypedDataRequest, desired_decimals: int) -> SignTypedDataAnnotation:
        typed_data = request.typed_data
        if not is_eip2612_typed_data(typed_data):
            return UnrecognizedTypedDataAnnotation()

        domain: Dict[str, Any] = typed_data.get("domain") or {}
        message: Dict[str, Any] = typed_data["message"]
        network = get_network(domain.get("chainId"))

        asset = None
        verifying_contract = domain.get("verifyingContract")
        if verifying_contract:
            assets = await self.indexing_service.get_cached_assets(network)
            asset = find_fungible_asset(verifying_contract, assets)
            if asset is None:
                logger.debug(f"Permit for unknown token contract {verifying_contract} on {network.name}")

        owner = message["owner"]
        spender = message["spender"]
        amount = _to_int(message["value"])

        names = await self.name_batcher.resolve_many([owner, spender], network)

        return EIP2612PermitAnnotation(
            owner=owner,
            spender=spender,
            amount=amount,
            deadline=_to_int(message.get("deadline")),
            asset=asset,
            nonce=_to_int(message.get("nonce")),
            asset_amount=(
                enrich_asset_amount_with_decimal_values(asset, amount, desired_decimals)
                if asset is not None else None
            ),
            owner_name=names.get(normalize_evm_address(owner)),
            spender_name=names.get(normalize_evm_address(spender)),
            token_contract_name=domain.get("name"),
        )
