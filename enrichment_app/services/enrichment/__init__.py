"""
Enrichment engine: classifies transactions and typed-data signing requests
into display annotations.
"""

from .types import (
    # Enums
    AssetKind,
    AnnotationType,
    SignTypedDataAnnotationType,
    # Assets & networks
    NetworkBaseAsset,
    SmartContractFungibleAsset,
    NonFungibleCollection,
    Network,
    AssetAmount,
    # Chain data
    EVMLog,
    EVMBlock,
    EVMTransaction,
    TransactionRequest,
    SignTypedDataRequest,
    NameRecord,
    # Annotations
    ContractDeploymentAnnotation,
    AssetTransferAnnotation,
    AssetApprovalAnnotation,
    ContractInteractionAnnotation,
    UnrecognizedTypedDataAnnotation,
    EIP2612PermitAnnotation,
    # Results & events
    EnrichedEVMTransaction,
    EnrichedTransactionSignatureRequest,
    EnrichedSignTypedDataRequest,
    TransactionEvent,
    EnrichedTransactionEvent,
)
from .assets import (
    enrich_asset_amount_with_decimal_values,
    find_fungible_asset,
    is_smart_contract_fungible_asset,
)
from .collaborators import ChainService, IndexingService, NameService
from .names import NameLookupResult, NameResolutionBatcher
from .networks import ETHEREUM, KNOWN_NETWORKS, get_network
from .resolver import AnnotationResolver
from .typed_data import TypedDataAnnotator, is_eip2612_typed_data
from .service import EnrichmentService, ServiceState

__all__ = [
    'AssetKind',
    'AnnotationType',
    'SignTypedDataAnnotationType',
    'NetworkBaseAsset',
    'SmartContractFungibleAsset',
    'NonFungibleCollection',
    'Network',
    'AssetAmount',
    'EVMLog',
    'EVMBlock',
    'EVMTransaction',
    'TransactionRequest',
    'SignTypedDataRequest',
    'NameRecord',
    'ContractDeploymentAnnotation',
    'AssetTransferAnnotation',
    'AssetApprovalAnnotation',
    'ContractInteractionAnnotation',
    'UnrecognizedTypedDataAnnotation',
    'EIP2612PermitAnnotation',
    'EnrichedEVMTransaction',
    'EnrichedTransactionSignatureRequest',
    'EnrichedSignTypedDataRequest',
    'TransactionEvent',
    'EnrichedTransactionEvent',
    'enrich_asset_amount_with_decimal_values',
    'find_fungible_asset',
    'is_smart_contract_fungible_asset',
    'ChainService',
    'IndexingService',
    'NameService',
    'NameLookupResult',
    'NameResolutionBatcher',
    'ETHEREUM',
    'KNOWN_NETWORKS',
    'get_network',
    'AnnotationResolver',
    'TypedDataAnnotator',
    'is_eip2612_typed_data',
    'EnrichmentService',
    'ServiceState',
]
