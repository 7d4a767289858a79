"""
Asset helpers: matching contract addresses against the known-asset snapshot
and decimal adjustment of raw integer amounts.
"""

from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import Dict, Iterable, Optional, Sequence
import logging

from ..decoders.base import normalize_evm_address
from .types import AnyAsset, AssetAmount, AssetKind, FungibleAsset, SmartContractFungibleAsset

logger = logging.getLogger(__name__)


def is_smart_contract_fungible_asset(asset: AnyAsset) -> bool:
    return asset.kind is AssetKind.SMART_CONTRACT_FUNGIBLE


class AssetMatcher:
    """
    Lookup table over one snapshot of known assets.

    Comparison is on normalized hex (case and byte length), so checksummed,
    lowercase and zero-padded forms all match. Only fungible, contract-backed
    assets are indexed; base assets and NFT collections never match.
    """

    def __init__(self, assets: Sequence[AnyAsset]):
        self.assets = tuple(assets)
        self._by_address: Dict[str, SmartContractFungibleAsset] = {}
        for asset in self.assets:
            if not is_smart_contract_fungible_asset(asset):
                continue
            try:
                key = normalize_evm_address(asset.contract_address)
            except ValueError:
                logger.debug(f"Skipping asset {asset.symbol} with bad contract address {asset.contract_address!r}")
                continue
            # first entry wins, as with a linear scan
            self._by_address.setdefault(key, asset)

    def match(self, contract_address: Optional[str]) -> Optional[SmartContractFungibleAsset]:
        if not contract_address:
            return None
        try:
            return self._by_address.get(normalize_evm_address(contract_address))
        except ValueError:
            logger.debug(f"Ignoring unparseable contract address {contract_address!r}")
            return None

    def __len__(self) -> int:
        return len(self._by_address)


def find_fungible_asset(
    contract_address: Optional[str],
    assets: Iterable[AnyAsset],
) -> Optional[SmartContractFungibleAsset]:
    """Find the fungible, contract-backed asset deployed at contract_address"""
    return AssetMatcher(tuple(assets)).match(contract_address)


# ============================================================================
# DECIMAL ADJUSTMENT
# ============================================================================

# uint256 values have up to 78 digits; the default 28-digit context would round them
AMOUNT_PRECISION = 160


def to_decimal_amount(amount: int, decimals: int) -> Decimal:
    """Exact decimal value of a fixed-point integer amount"""
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        return Decimal(int(amount)).scaleb(-decimals)


def to_fixed_point(decimal_amount: Decimal, decimals: int) -> int:
    """Inverse of to_decimal_amount; exact for values produced by it"""
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        scaled = Decimal(decimal_amount).scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{decimal_amount} has more than {decimals} decimal places")
        return int(scaled)


def format_decimal_amount(decimal_amount: Decimal, desired_decimals: int) -> str:
    """Round to desired_decimals places for display"""
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        quantum = Decimal(1).scaleb(-desired_decimals)
        return f"{decimal_amount.quantize(quantum, rounding=ROUND_HALF_EVEN):f}"


def enrich_asset_amount_with_decimal_values(
    asset: FungibleAsset,
    amount: int,
    desired_decimals: int,
) -> AssetAmount:
    """
    Attach decimal-adjusted values to a raw asset amount.

    Pure: depends only on the asset's declared decimals and desired_decimals;
    the raw amount is carried through unchanged.
    """
    amount = int(amount)
    decimal_amount = to_decimal_amount(amount, asset.decimals)
    return AssetAmount(
        asset=asset,
        amount=amount,
        decimal_amount=decimal_amount,
        desired_decimals=desired_decimals,
        localized_decimal_amount=format_decimal_amount(decimal_amount, desired_decimals),
    )
