"""
Data structures for the enrichment service.

Assets are tagged by AssetKind so callers discriminate on `asset.kind`
rather than probing attributes. Annotations are tagged by AnnotationType
and every variant serializes with to_dict().
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ...config.enrichment_config import MAX_UINT256


# ============================================================================
# ENUMS
# ============================================================================

class AssetKind(Enum):
    """Asset kinds known to the indexing collaborator"""
    BASE = "base"                                        # network base asset (ETH, MATIC)
    SMART_CONTRACT_FUNGIBLE = "smart-contract-fungible"  # ERC-20 style token
    NON_FUNGIBLE = "non-fungible"                        # NFT collection


class AnnotationType(Enum):
    """Primary transaction annotation variants"""
    CONTRACT_DEPLOYMENT = "contract-deployment"
    ASSET_TRANSFER = "asset-transfer"
    ASSET_APPROVAL = "asset-approval"
    CONTRACT_INTERACTION = "contract-interaction"


class SignTypedDataAnnotationType(Enum):
    """Typed-data (EIP-712) annotation variants"""
    UNRECOGNIZED = "unrecognized"
    EIP2612_PERMIT = "eip2612-permit"


# ============================================================================
# ASSETS & NETWORKS
# ============================================================================

@dataclass(frozen=True)
class NetworkBaseAsset:
    symbol: str
    name: str
    decimals: int
    kind: AssetKind = field(default=AssetKind.BASE, init=False)

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'symbol': self.symbol, 'name': self.name, 'decimals': self.decimals}


@dataclass(frozen=True)
class SmartContractFungibleAsset:
    symbol: str
    name: str
    decimals: int
    contract_address: str
    logo_url: Optional[str] = None
    kind: AssetKind = field(default=AssetKind.SMART_CONTRACT_FUNGIBLE, init=False)

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'symbol': self.symbol,
            'name': self.name,
            'decimals': self.decimals,
            'contract_address': self.contract_address,
            'logo_url': self.logo_url,
        }


@dataclass(frozen=True)
class NonFungibleCollection:
    symbol: str
    name: str
    contract_address: str
    kind: AssetKind = field(default=AssetKind.NON_FUNGIBLE, init=False)

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'symbol': self.symbol,
            'name': self.name,
            'contract_address': self.contract_address,
        }


FungibleAsset = Union[NetworkBaseAsset, SmartContractFungibleAsset]
AnyAsset = Union[NetworkBaseAsset, SmartContractFungibleAsset, NonFungibleCollection]


@dataclass(frozen=True)
class Network:
    name: str
    chain_id: str
    base_asset: NetworkBaseAsset

    def to_dict(self) -> dict:
        return {'name': self.name, 'chain_id': self.chain_id, 'base_asset': self.base_asset.to_dict()}


@dataclass(frozen=True)
class AssetAmount:
    """
    Raw integer amount of an asset with its decimal-adjusted views.

    decimal_amount is exact (amount * 10^-decimals); localized_decimal_amount
    is rounded to desired_decimals for display.
    """
    asset: FungibleAsset
    amount: int
    decimal_amount: Decimal
    desired_decimals: int
    localized_decimal_amount: str

    @property
    def is_max_uint256(self) -> bool:
        return self.amount == MAX_UINT256

    def to_dict(self) -> dict:
        return {
            'asset': self.asset.to_dict(),
            'amount': str(self.amount),
            'decimal_amount': str(self.decimal_amount),
            'desired_decimals': self.desired_decimals,
            'localized_decimal_amount': self.localized_decimal_amount,
        }


# ============================================================================
# CHAIN DATA
# ============================================================================

@dataclass(frozen=True)
class EVMLog:
    contract_address: str
    topics: Tuple[str, ...]
    data: str


@dataclass(frozen=True)
class EVMBlock:
    hash: str
    block_height: int
    timestamp: int
    network: Network


@dataclass(frozen=True)
class EVMTransaction:
    """A transaction as reported by the chain collaborator. logs is None until a receipt is known."""
    hash: str
    from_address: str
    network: Network
    to: Optional[str] = None
    input: Optional[str] = None
    value: Optional[int] = None
    nonce: Optional[int] = None
    block_hash: Optional[str] = None
    block_height: Optional[int] = None
    logs: Optional[Tuple[EVMLog, ...]] = None


@dataclass(frozen=True)
class TransactionRequest:
    """A partial, unmined transaction awaiting signature."""
    from_address: str
    network: Network
    to: Optional[str] = None
    input: Optional[str] = None
    value: Optional[int] = None
    nonce: Optional[int] = None
    gas_limit: Optional[int] = None
    block_hash: Optional[str] = None


AnyTransaction = Union[EVMTransaction, TransactionRequest]


@dataclass(frozen=True)
class SignTypedDataRequest:
    account: str
    typed_data: Dict[str, Any]


@dataclass(frozen=True)
class NameRecord:
    name: str


# ============================================================================
# TRANSACTION ANNOTATIONS
# ============================================================================

def _base_dict(annotation) -> dict:
    return {
        'type': annotation.type.value,
        'timestamp': annotation.timestamp,
        'block_timestamp': annotation.block_timestamp,
        'subannotations': (
            [sub.to_dict() for sub in annotation.subannotations]
            if annotation.subannotations else None
        ),
    }


@dataclass
class ContractDeploymentAnnotation:
    timestamp: float
    block_timestamp: Optional[int] = None
    subannotations: Optional[List["AssetTransferAnnotation"]] = None
    type: AnnotationType = field(default=AnnotationType.CONTRACT_DEPLOYMENT, init=False)

    def to_dict(self) -> dict:
        return _base_dict(self)


@dataclass
class AssetTransferAnnotation:
    timestamp: float
    sender_address: str
    recipient_address: str
    asset_amount: AssetAmount
    recipient_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None
    block_timestamp: Optional[int] = None
    subannotations: Optional[List["AssetTransferAnnotation"]] = None
    type: AnnotationType = field(default=AnnotationType.ASSET_TRANSFER, init=False)

    def to_dict(self) -> dict:
        result = _base_dict(self)
        result.update({
            'sender_address': self.sender_address,
            'recipient_address': self.recipient_address,
            'recipient_name': self.recipient_name,
            'asset_amount': self.asset_amount.to_dict(),
            'transaction_logo_url': self.transaction_logo_url,
        })
        return result


@dataclass
class AssetApprovalAnnotation:
    timestamp: float
    spender_address: str
    asset_amount: AssetAmount
    spender_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None
    block_timestamp: Optional[int] = None
    subannotations: Optional[List[AssetTransferAnnotation]] = None
    type: AnnotationType = field(default=AnnotationType.ASSET_APPROVAL, init=False)

    @property
    def is_unlimited(self) -> bool:
        return self.asset_amount.is_max_uint256

    def to_dict(self) -> dict:
        result = _base_dict(self)
        result.update({
            'spender_address': self.spender_address,
            'spender_name': self.spender_name,
            'asset_amount': self.asset_amount.to_dict(),
            'is_unlimited': self.is_unlimited,
            'transaction_logo_url': self.transaction_logo_url,
        })
        return result


@dataclass
class ContractInteractionAnnotation:
    timestamp: float
    contract_name: Optional[str] = None
    transaction_logo_url: Optional[str] = None
    block_timestamp: Optional[int] = None
    subannotations: Optional[List[AssetTransferAnnotation]] = None
    type: AnnotationType = field(default=AnnotationType.CONTRACT_INTERACTION, init=False)

    def to_dict(self) -> dict:
        result = _base_dict(self)
        result.update({
            'contract_name': self.contract_name,
            'transaction_logo_url': self.transaction_logo_url,
        })
        return result


TransactionAnnotation = Union[
    ContractDeploymentAnnotation,
    AssetTransferAnnotation,
    AssetApprovalAnnotation,
    ContractInteractionAnnotation,
]


# ============================================================================
# TYPED DATA ANNOTATIONS
# ============================================================================

@dataclass(frozen=True)
class UnrecognizedTypedDataAnnotation:
    type: SignTypedDataAnnotationType = field(default=SignTypedDataAnnotationType.UNRECOGNIZED, init=False)

    def to_dict(self) -> dict:
        return {'type': self.type.value}


@dataclass(frozen=True)
class EIP2612PermitAnnotation:
    """
    EIP-2612 permit: `owner` lets `spender` move `amount` of the token at the
    domain's verifying contract until `deadline`. asset is None when the
    verifying contract is not a known fungible asset.
    """
    owner: str
    spender: str
    amount: int
    deadline: Optional[int]
    asset: Optional[SmartContractFungibleAsset]
    nonce: Optional[int] = None
    asset_amount: Optional[AssetAmount] = None
    owner_name: Optional[str] = None
    spender_name: Optional[str] = None
    token_contract_name: Optional[str] = None
    type: SignTypedDataAnnotationType = field(default=SignTypedDataAnnotationType.EIP2612_PERMIT, init=False)

    @property
    def display_value(self) -> str:
        """Decimal-adjusted amount when the asset is known, raw token count otherwise."""
        if self.asset_amount is not None:
            return f"{self.asset_amount.localized_decimal_amount} {self.asset_amount.asset.symbol}"
        return f"{self.amount} tokens"

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'owner': self.owner,
            'owner_name': self.owner_name,
            'spender': self.spender,
            'spender_name': self.spender_name,
            'amount': str(self.amount),
            'display_value': self.display_value,
            'deadline': self.deadline,
            'nonce': self.nonce,
            'token_contract_name': self.token_contract_name,
            'asset': self.asset.to_dict() if self.asset else None,
        }


SignTypedDataAnnotation = Union[UnrecognizedTypedDataAnnotation, EIP2612PermitAnnotation]


# ============================================================================
# ENRICHED VALUE OBJECTS & EVENT PAYLOADS
# ============================================================================

@dataclass(frozen=True)
class EnrichedEVMTransaction:
    transaction: EVMTransaction
    annotation: Optional[TransactionAnnotation]


@dataclass(frozen=True)
class EnrichedTransactionSignatureRequest:
    request: TransactionRequest
    annotation: Optional[TransactionAnnotation]


@dataclass(frozen=True)
class EnrichedSignTypedDataRequest:
    request: SignTypedDataRequest
    annotation: SignTypedDataAnnotation


@dataclass(frozen=True)
class TransactionEvent:
    """Published by the chain collaborator for each new or updated transaction."""
    transaction: EVMTransaction
    for_accounts: Tuple[str, ...]


@dataclass(frozen=True)
class EnrichedTransactionEvent:
    transaction: EnrichedEVMTransaction
    for_accounts: Tuple[str, ...]
