"""
Web3 Chain Service

ChainService adapter backed by a JSON-RPC node through web3.py. Blocks are
fetched on demand and kept in a bounded LRU cache keyed by hash;
transactions are fetched with their receipt and published on the
`transactions` channel for the enrichment service.

web3's HTTP provider is synchronous, so node calls run in worker threads.
"""

import asyncio
from functools import lru_cache
from typing import Any, Dict, Iterable, Optional
import logging

from web3 import Web3
from web3.exceptions import BlockNotFound, TransactionNotFound

from ..config.enrichment_config import CACHE_SIZES
from .decoders.base import format_address, to_hex_str
from .enrichment.collaborators import ChainService
from .enrichment.types import EVMBlock, EVMLog, EVMTransaction, Network, TransactionEvent

logger = logging.getLogger(__name__)


# ============================================================================
# CONVERTERS
# ============================================================================

def _hex_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    return to_hex_str(value)


def log_from_web3(log: Dict[str, Any]) -> EVMLog:
    """Convert a web3 receipt log (AttributeDict) into an EVMLog"""
    return EVMLog(
        contract_address=log["address"],
        topics=tuple(to_hex_str(topic) for topic in log["topics"]),
        data=to_hex_str(log["data"]),
    )


def block_from_web3(block: Dict[str, Any], network: Network) -> EVMBlock:
    """Convert a web3 block (AttributeDict) into an EVMBlock"""
    return EVMBlock(
        hash=to_hex_str(block["hash"]),
        block_height=block["number"],
        timestamp=block["timestamp"],
        network=network,
    )


def transaction_from_web3(
    tx: Dict[str, Any],
    receipt: Optional[Dict[str, Any]],
    network: Network,
) -> EVMTransaction:
    """
    Convert a web3 transaction and (optional) receipt into an EVMTransaction.

    Args:
        tx: Result of eth.get_transaction
        receipt: Result of eth.get_transaction_receipt, None while pending
        network: Network the transaction was read from

    Returns:
        EVMTransaction; logs is None when there is no receipt yet
    """
    logs = None
    if receipt is not None:
        logs = tuple(log_from_web3(log) for log in receipt.get("logs", []))

    return EVMTransaction(
        hash=to_hex_str(tx["hash"]),
        from_address=tx["from"],
        network=network,
        to=tx.get("to"),
        input=to_hex_str(tx.get("input")),
        value=tx.get("value"),
        nonce=tx.get("nonce"),
        block_hash=_hex_or_none(tx.get("blockHash")),
        block_height=tx.get("blockNumber"),
        logs=logs,
    )


# ============================================================================
# SERVICE
# ============================================================================

class Web3ChainService(ChainService):
    """
    Reads blocks and transactions from an Ethereum JSON-RPC node.

    Pass either an rpc_url or a ready Web3 instance (w3).
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        w3: Optional[Web3] = None,
        block_cache_size: int = CACHE_SIZES["blocks"],
    ):
        super().__init__()
        if w3 is None:
            if not rpc_url:
                raise ValueError("Web3ChainService needs an rpc_url or a Web3 instance")
            logger.info(f"Connecting to Web3 provider: {rpc_url[:50]}...")
            w3 = Web3(Web3.HTTPProvider(rpc_url))
        self.w3 = w3
        # Misses (BlockNotFound) raise and are not cached
        self._cached_block = lru_cache(maxsize=block_cache_size)(self._fetch_block)

    def _fetch_block(self, block_hash: str):
        return self.w3.eth.get_block(block_hash)

    async def get_block_data(self, network: Network, block_hash: str) -> Optional[EVMBlock]:
        key = to_hex_str(block_hash)
        try:
            block = await asyncio.to_thread(self._cached_block, key)
        except BlockNotFound:
            logger.debug(f"Block {format_address(key, 10)} not found on {network.name}")
            return None

        return block_from_web3(block, network)

    async def get_transaction(self, network: Network, tx_hash: str) -> Optional[EVMTransaction]:
        """Fetch a transaction and its receipt; None if the node does not know the hash"""
        tx_hash = to_hex_str(tx_hash)
        try:
            tx = await asyncio.to_thread(self.w3.eth.get_transaction, tx_hash)
        except TransactionNotFound:
            logger.warning(f"Transaction {format_address(tx_hash, 10)} not found on {network.name}")
            return None

        receipt = None
        if tx.get("blockHash") is not None:
            try:
                receipt = await asyncio.to_thread(self.w3.eth.get_transaction_receipt, tx_hash)
            except TransactionNotFound:
                logger.debug(f"No receipt yet for {format_address(tx_hash, 10)}")

        return transaction_from_web3(tx, receipt, network)

    async def publish_transaction(
        self,
        network: Network,
        tx_hash: str,
        for_accounts: Iterable[str],
    ) -> Optional[EVMTransaction]:
        """Fetch a transaction and publish it on the transactions channel."""
        transaction = await self.get_transaction(network, tx_hash)
        if transaction is None:
            return None

        self.transactions.emit(TransactionEvent(transaction=transaction, for_accounts=tuple(for_accounts)))
        return transaction
