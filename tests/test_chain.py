"""
Tests for the Web3 chain adapter, using a stand-in for web3's eth module.
"""
import asyncio
from types import SimpleNamespace

import pytest
from hexbytes import HexBytes

from enrichment_app.services.chain import Web3ChainService, transaction_from_web3
from enrichment_app.services.enrichment.networks import ETHEREUM

from factories import ALICE, BOB, USDC, FakeEth, address_topic, encode_transfer, transfer_log

TX_HASH = HexBytes("0x" + "12" * 32)
BLOCK_HASH = HexBytes("0x" + "bb" * 32)
TX_KEY = "0x" + "12" * 32

WEB3_TX = {
    "hash": TX_HASH,
    "from": ALICE,
    "to": USDC.contract_address,
    "input": HexBytes(encode_transfer(BOB, 7)),
    "value": 0,
    "nonce": 12,
    "blockHash": BLOCK_HASH,
    "blockNumber": 19_000_000,
}

LOG = transfer_log(USDC.contract_address, ALICE, BOB, 7)
WEB3_RECEIPT = {
    "logs": [{
        "address": USDC.contract_address,
        "topics": [HexBytes(topic) for topic in LOG.topics],
        "data": HexBytes(LOG.data),
    }],
}


def make_chain(block_cache_size=None, **eth_kwargs):
    eth = FakeEth(**eth_kwargs)
    kwargs = {} if block_cache_size is None else {"block_cache_size": block_cache_size}
    return Web3ChainService(w3=SimpleNamespace(eth=eth), **kwargs), eth


def web3_block(number):
    return {"hash": HexBytes(block_key(number)), "number": number, "timestamp": 1_699_999_000 + number}


def block_key(number):
    return "0x" + f"{number:064x}"


class TestTransactionConversion:
    """Test transaction_from_web3."""

    def test_mined_transaction(self):
        """Verify a mined transaction carries its block and receipt logs"""
        tx = transaction_from_web3(WEB3_TX, WEB3_RECEIPT, ETHEREUM)

        assert tx.hash == "0x" + "12" * 32
        assert tx.input == encode_transfer(BOB, 7)
        assert tx.block_hash == "0x" + "bb" * 32
        assert tx.block_height == 19_000_000
        assert tx.nonce == 12
        assert tx.logs[0].topics[2] == address_topic(BOB)
        assert tx.logs[0].data == LOG.data

    def test_pending_transaction_has_no_logs(self):
        """Pending transactions have no receipt, so logs stay None"""
        pending = dict(WEB3_TX, blockHash=None, blockNumber=None)
        tx = transaction_from_web3(pending, None, ETHEREUM)
        assert tx.logs is None
        assert tx.block_hash is None

    def test_deployment_has_no_recipient(self):
        """Test contract creation keeps to=None"""
        tx = transaction_from_web3(dict(WEB3_TX, to=None), None, ETHEREUM)
        assert tx.to is None


class TestWeb3ChainService:
    """Test block and transaction retrieval."""

    def test_requires_endpoint(self):
        """Without rpc_url or w3 the service cannot be built"""
        with pytest.raises(ValueError):
            Web3ChainService()

    def test_get_block_data(self):
        """Verify block conversion and that a repeated lookup hits the cache"""
        key = "0x" + "bb" * 32
        chain, eth = make_chain(blocks={
            key: {"hash": BLOCK_HASH, "number": 19_000_000, "timestamp": 1_699_999_000},
        })

        block = asyncio.run(chain.get_block_data(ETHEREUM, key))
        again = asyncio.run(chain.get_block_data(ETHEREUM, key.upper().replace("0X", "0x")))

        assert block.timestamp == 1_699_999_000
        assert block.block_height == 19_000_000
        assert block.network is ETHEREUM
        assert again == block
        assert eth.block_calls == 1, "found blocks are cached by hash"

    def test_block_cache_evicts_least_recently_used(self):
        """Test the block cache holds at most block_cache_size blocks"""
        blocks = {block_key(n): web3_block(n) for n in (1, 2, 3)}
        chain, eth = make_chain(block_cache_size=2, blocks=blocks)

        for n in (1, 2, 3):
            asyncio.run(chain.get_block_data(ETHEREUM, block_key(n)))
        assert eth.block_calls == 3

        asyncio.run(chain.get_block_data(ETHEREUM, block_key(3)))
        assert eth.block_calls == 3, "most recent block is still cached"

        block = asyncio.run(chain.get_block_data(ETHEREUM, block_key(1)))
        assert block.block_height == 1
        assert eth.block_calls == 4, "oldest block should have been evicted"

    def test_missing_block_is_not_cached(self):
        """A missing block returns None and is asked for again next time"""
        chain, eth = make_chain()
        missing = "0x" + "00" * 32

        assert asyncio.run(chain.get_block_data(ETHEREUM, missing)) is None
        assert asyncio.run(chain.get_block_data(ETHEREUM, missing)) is None
        assert eth.block_calls == 2

    def test_publish_transaction(self):
        """Verify a fetched transaction is published with its accounts"""
        chain, _ = make_chain(transactions={TX_KEY: WEB3_TX}, receipts={TX_KEY: WEB3_RECEIPT})
        events = []
        chain.transactions.subscribe(events.append)

        tx = asyncio.run(chain.publish_transaction(ETHEREUM, TX_HASH, [ALICE]))

        assert len(events) == 1
        assert events[0].transaction is tx
        assert events[0].for_accounts == (ALICE,)
        assert len(tx.logs) == 1

    def test_publish_unknown_transaction(self):
        """Unknown hashes publish nothing"""
        chain, _ = make_chain()
        events = []
        chain.transactions.subscribe(events.append)

        assert asyncio.run(chain.publish_transaction(ETHEREUM, TX_HASH, [ALICE])) is None
        assert events == []
