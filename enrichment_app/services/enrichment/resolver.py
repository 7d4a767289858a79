"""
Transaction Annotation Resolver

Classifies a transaction (mined or awaiting signature) into exactly one
primary annotation, first match wins:

1. No recipient                         -> contract-deployment
2. Empty input, value present           -> asset-transfer of the base asset
   Empty input, no value                -> contract-interaction
3. ERC-20 transfer/transferFrom on a
   known fungible asset                 -> asset-transfer
4. ERC-20 approve on a known asset      -> asset-approval
5. Anything else                        -> contract-interaction

When the transaction carries receipt logs, ERC-20 Transfer events on known
assets are attached as asset-transfer subannotations.
"""

import time
from typing import Callable, List, Optional
import logging

from ...config.enrichment_config import EMPTY_INPUT_VALUES
from ..decoders import format_address, normalize_evm_address, parse_erc20_tx, parse_logs_for_erc20_transfers
from .assets import AssetMatcher, enrich_asset_amount_with_decimal_values
from .collaborators import ChainService, IndexingService
from .names import NameResolutionBatcher
from .types import (
    AnyTransaction,
    AssetApprovalAnnotation,
    AssetTransferAnnotation,
    ContractDeploymentAnnotation,
    ContractInteractionAnnotation,
    EVMLog,
    Network,
    TransactionAnnotation,
)

logger = logging.getLogger(__name__)

TRANSFER_CALLS = {"transfer", "transferFrom"}
APPROVE_CALL = "approve"


class _AssetSnapshot:
    """Reads the asset list at most once per resolution"""

    def __init__(self, indexing_service: IndexingService, network: Network):
        self.indexing_service = indexing_service
        self.network = network
        self._matcher: Optional[AssetMatcher] = None

    async def matcher(self) -> AssetMatcher:
        if self._matcher is None:
            assets = await self.indexing_service.get_cached_assets(self.network)
            self._matcher = AssetMatcher(assets)
        return self._matcher


class AnnotationResolver:
    """
    Builds TransactionAnnotations by coordinating the chain, indexing and
    naming collaborators with the ERC-20 decoders.
    """

    def __init__(
        self,
        chain_service: ChainService,
        indexing_service: IndexingService,
        name_batcher: NameResolutionBatcher,
        clock: Callable[[], float] = time.time,
    ):
        self.chain_service = chain_service
        self.indexing_service = indexing_service
        self.name_batcher = name_batcher
        self.clock = clock

    async def resolve(
        self,
        transaction: AnyTransaction,
        network: Network,
        desired_decimals: int,
    ) -> TransactionAnnotation:
        """
        Annotate a transaction.

        Args:
            transaction: EVMTransaction or unmined TransactionRequest
            network: Network the transaction belongs to
            desired_decimals: Display precision for asset amounts

        Returns:
            The primary annotation, with subannotations when logs decode to
            transfers of known assets
        """
        resolved_time = self.clock()
        snapshot = _AssetSnapshot(self.indexing_service, network)

        block_timestamp = None
        if transaction.block_hash:
            block = await self.chain_service.get_block_data(network, transaction.block_hash)
            if block is not None:
                block_timestamp = block.timestamp
            else:
                logger.debug(f"Block {format_address(transaction.block_hash, 10)} not available yet")

        stamps = {"timestamp": resolved_time, "block_timestamp": block_timestamp}
        annotation = await self._classify(transaction, network, desired_decimals, snapshot, stamps)

        logs = getattr(transaction, "logs", None)
        if logs is not None:
            subannotations = await self._resolve_subannotations(
                logs, network, desired_decimals, snapshot, stamps
            )
            if subannotations:
                annotation.subannotations = subannotations

        logger.debug(
            f"Annotated {getattr(transaction, 'hash', None) or 'signature request'} as {annotation.type.value} "
            f"({len(annotation.subannotations or [])} subannotation(s))"
        )
        return annotation

    async def _classify(
        self,
        transaction: AnyTransaction,
        network: Network,
        desired_decimals: int,
        snapshot: _AssetSnapshot,
        stamps: dict,
    ) -> TransactionAnnotation:
        if transaction.to is None:
            return ContractDeploymentAnnotation(**stamps)

        if transaction.input in EMPTY_INPUT_VALUES:
            # A plain value send to a contract still runs its fallback
            # function, but is categorized as a transfer regardless.
            to_name = await self.name_batcher.resolve_one(transaction.to, network)
            if transaction.value is not None:
                return AssetTransferAnnotation(
                    **stamps,
                    sender_address=transaction.from_address,
                    recipient_address=transaction.to,
                    recipient_name=to_name,
                    asset_amount=enrich_asset_amount_with_decimal_values(
                        network.base_asset, transaction.value, desired_decimals
                    ),
                )
            return ContractInteractionAnnotation(**stamps, contract_name=to_name)

        matcher = await snapshot.matcher()
        matching_asset = matcher.match(transaction.to)
        transaction_logo_url = matching_asset.logo_url if matching_asset else None

        erc20_call = parse_erc20_tx(transaction.input)

        if matching_asset and erc20_call and erc20_call.name in TRANSFER_CALLS:
            recipient = erc20_call.args["to"]
            return AssetTransferAnnotation(
                **stamps,
                transaction_logo_url=transaction_logo_url,
                sender_address=erc20_call.args.get("from") or transaction.from_address,
                recipient_address=recipient,
                recipient_name=await self.name_batcher.resolve_one(recipient, network),
                asset_amount=enrich_asset_amount_with_decimal_values(
                    matching_asset, erc20_call.args["amount"], desired_decimals
                ),
            )

        if matching_asset and erc20_call and erc20_call.name == APPROVE_CALL:
            spender = erc20_call.args["spender"]
            return AssetApprovalAnnotation(
                **stamps,
                transaction_logo_url=transaction_logo_url,
                spender_address=spender,
                spender_name=await self.name_batcher.resolve_one(spender, network),
                asset_amount=enrich_asset_amount_with_decimal_values(
                    matching_asset, erc20_call.args["value"], desired_decimals
                ),
            )

        # The logo is passed on even for calls we could not decode; the UI
        # decides whether to use it.
        return ContractInteractionAnnotation(
            **stamps,
            transaction_logo_url=transaction_logo_url,
            contract_name=await self.name_batcher.resolve_one(transaction.to, network),
        )

    async def _resolve_subannotations(
        self,
        logs: List[EVMLog],
        network: Network,
        desired_decimals: int,
        snapshot: _AssetSnapshot,
        stamps: dict,
    ) -> List[AssetTransferAnnotation]:
        transfer_logs = parse_logs_for_erc20_transfers(logs)
        if not transfer_logs:
            return []

        matcher = await snapshot.matcher()
        matched = []
        for transfer in transfer_logs:
            asset = matcher.match(transfer.contract_address)
            if asset is None:
                logger.debug(
                    f"Skipping Transfer at log {transfer.log_index}: "
                    f"{format_address(transfer.contract_address)} is not a known asset"
                )
                continue
            matched.append((transfer, asset))
        if not matched:
            return []

        names = await self.name_batcher.resolve_many(
            [transfer.recipient_address for transfer, _ in matched], network
        )

        return [
            AssetTransferAnnotation(
                **stamps,
                sender_address=transfer.sender_address,
                recipient_address=transfer.recipient_address,
                recipient_name=names.get(normalize_evm_address(transfer.recipient_address)),
                asset_amount=enrich_asset_amount_with_decimal_values(asset, transfer.amount, desired_decimals),
            )
            for transfer, asset in matched
        ]
