"""
Tests for transaction classification and sub-annotations.

Tests:
- contract deployment, native transfers, ERC-20 transfer / approve
- fallback to contract interaction (with logo of a matched asset)
- block timestamps
- sub-annotations from receipt logs
"""
import asyncio
import logging
from decimal import Decimal

from enrichment_app.config.enrichment_config import MAX_UINT256
from enrichment_app.services.decoders import same_evm_address
from enrichment_app.services.enrichment.names import NameResolutionBatcher
from enrichment_app.services.enrichment.networks import ETHEREUM
from enrichment_app.services.enrichment.resolver import AnnotationResolver
from enrichment_app.services.enrichment.types import (
    AnnotationType,
    AssetApprovalAnnotation,
    AssetTransferAnnotation,
    ContractDeploymentAnnotation,
    ContractInteractionAnnotation,
    EVMBlock,
    EVMLog,
    TransactionRequest,
)

from factories import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    PUNKS,
    SPENDER,
    UNKNOWN_CONTRACT,
    USDC,
    FakeChainService,
    FakeIndexingService,
    FakeNameService,
    encode_approve,
    encode_transfer,
    encode_transfer_from,
    make_transaction,
    transfer_log,
)

NOW = 1_700_000_000.0
BLOCK_HASH = "0x" + "bb" * 32


def make_resolver(chain=None, indexing=None, names=None):
    return AnnotationResolver(
        chain or FakeChainService(),
        indexing or FakeIndexingService([PUNKS, USDC, DAI]),
        NameResolutionBatcher(names or FakeNameService()),
        clock=lambda: NOW,
    )


def resolve(transaction, resolver=None, desired_decimals=2):
    resolver = resolver or make_resolver()
    return asyncio.run(resolver.resolve(transaction, transaction.network, desired_decimals))


class TestClassification:
    """Test the primary annotation decision order."""

    def test_contract_deployment(self):
        """No recipient means a deployment"""
        annotation = resolve(make_transaction(to=None, input="0x6080604052"))

        assert isinstance(annotation, ContractDeploymentAnnotation)
        assert annotation.type is AnnotationType.CONTRACT_DEPLOYMENT
        assert annotation.timestamp == NOW

    def test_native_transfer(self):
        """Verify a plain ether send is a base-asset transfer"""
        names = FakeNameService({BOB: "bob.eth"})

        annotation = resolve(make_transaction(value=10 ** 18), make_resolver(names=names))

        assert isinstance(annotation, AssetTransferAnnotation)
        assert annotation.sender_address == ALICE
        assert annotation.recipient_address == BOB
        assert annotation.recipient_name == "bob.eth"
        assert annotation.asset_amount.asset is ETHEREUM.base_asset
        assert annotation.asset_amount.decimal_amount == Decimal(1)
        assert annotation.asset_amount.localized_decimal_amount == "1.00"

    def test_zero_value_send_is_still_a_transfer(self):
        """A zero-value send with no input is still a transfer"""
        annotation = resolve(make_transaction(value=0, input=None))
        assert isinstance(annotation, AssetTransferAnnotation)
        assert annotation.asset_amount.amount == 0

    def test_empty_input_without_value_is_interaction(self):
        """Test empty input without value falls back to an interaction"""
        names = FakeNameService({BOB: "Some Contract"})
        annotation = resolve(make_transaction(value=None, input=""), make_resolver(names=names))

        assert isinstance(annotation, ContractInteractionAnnotation)
        assert annotation.contract_name == "Some Contract"

    def test_native_transfer_name_failure(self):
        """A failed name lookup leaves the recipient name blank"""
        names = FakeNameService(failing=[BOB])
        annotation = resolve(make_transaction(value=10 ** 18), make_resolver(names=names))

        assert isinstance(annotation, AssetTransferAnnotation)
        assert annotation.recipient_name is None

    def test_erc20_transfer(self):
        """Verify an ERC-20 transfer on a known asset"""
        names = FakeNameService({CAROL: "carol.eth"})
        tx = make_transaction(to=USDC.contract_address, input=encode_transfer(CAROL, 5_000_000))

        annotation = resolve(tx, make_resolver(names=names))

        assert isinstance(annotation, AssetTransferAnnotation)
        assert annotation.sender_address == ALICE
        assert same_evm_address(annotation.recipient_address, CAROL)
        assert annotation.recipient_name == "carol.eth"
        assert annotation.asset_amount.asset is USDC
        assert annotation.asset_amount.decimal_amount == Decimal("5")
        assert annotation.asset_amount.localized_decimal_amount == "5.00"
        assert annotation.transaction_logo_url == USDC.logo_url

    def test_erc20_transfer_from_uses_decoded_sender(self):
        """transferFrom reports the decoded sender"""
        tx = make_transaction(to=DAI.contract_address.lower(), input=encode_transfer_from(BOB, CAROL, 10 ** 17))

        annotation = resolve(tx)

        assert isinstance(annotation, AssetTransferAnnotation)
        assert same_evm_address(annotation.sender_address, BOB), "decoded `from` overrides the raw sender"
        assert annotation.asset_amount.localized_decimal_amount == "0.10"

    def test_unlimited_approval(self):
        """Test an approve of max uint256 is flagged unlimited"""
        names = FakeNameService({SPENDER: "Uniswap Router"})
        tx = make_transaction(to=USDC.contract_address, input=encode_approve(SPENDER, MAX_UINT256))

        annotation = resolve(tx, make_resolver(names=names))

        assert isinstance(annotation, AssetApprovalAnnotation)
        assert same_evm_address(annotation.spender_address, SPENDER)
        assert annotation.spender_name == "Uniswap Router"
        assert annotation.asset_amount.amount == MAX_UINT256
        assert annotation.is_unlimited
        assert annotation.to_dict()["is_unlimited"] is True

    def test_erc20_call_to_unknown_contract(self):
        """ERC-20 calls to unknown contracts are interactions"""
        names = FakeNameService({UNKNOWN_CONTRACT: "Mystery Token"})
        tx = make_transaction(to=UNKNOWN_CONTRACT, input=encode_transfer(CAROL, 1))

        annotation = resolve(tx, make_resolver(names=names))

        assert isinstance(annotation, ContractInteractionAnnotation)
        assert annotation.contract_name == "Mystery Token"
        assert annotation.transaction_logo_url is None

    def test_undecodable_call_to_known_asset_keeps_logo(self):
        """Verify the matched asset logo is kept on the fallback"""
        tx = make_transaction(to=USDC.contract_address, input="0x40c10f19" + "00" * 64)

        annotation = resolve(tx)

        assert isinstance(annotation, ContractInteractionAnnotation)
        assert annotation.transaction_logo_url == USDC.logo_url

    def test_call_to_nft_collection_is_interaction(self):
        """NFT collections are never fungible transfers"""
        tx = make_transaction(to=PUNKS.contract_address, input=encode_transfer(CAROL, 1))
        assert isinstance(resolve(tx), ContractInteractionAnnotation)

    def test_malformed_recipient_is_unnamed_interaction(self):
        """A non-hex recipient is still annotated, just without a name"""
        names = FakeNameService({BOB: "bob.eth"})
        tx = make_transaction(to="not-an-address", input="0xdeadbeef")

        annotation = resolve(tx, make_resolver(names=names))

        assert isinstance(annotation, ContractInteractionAnnotation)
        assert annotation.contract_name is None
        assert annotation.transaction_logo_url is None
        assert names.calls == [], "malformed addresses never reach the name service"

    def test_signature_request(self):
        """Test an unmined request is classified without a block lookup"""
        request = TransactionRequest(
            from_address=ALICE,
            network=ETHEREUM,
            to=USDC.contract_address,
            input=encode_approve(SPENDER, 1_000_000),
            gas_limit=60_000,
        )
        chain = FakeChainService()

        annotation = resolve(request, make_resolver(chain=chain))

        assert isinstance(annotation, AssetApprovalAnnotation)
        assert not annotation.is_unlimited
        assert annotation.subannotations is None
        assert chain.block_requests == [], "unmined requests have no block to look up"


class TestBlockTimestamp:
    """Test block lookups."""

    def test_block_timestamp_attached(self):
        """Verify the block timestamp comes from the chain service"""
        block = EVMBlock(hash=BLOCK_HASH, block_height=19_000_000, timestamp=1_699_999_000, network=ETHEREUM)
        chain = FakeChainService({BLOCK_HASH: block})

        annotation = resolve(make_transaction(value=1, block_hash=BLOCK_HASH), make_resolver(chain=chain))

        assert annotation.block_timestamp == 1_699_999_000
        assert annotation.timestamp == NOW
        assert chain.block_requests == [BLOCK_HASH], "block is fetched exactly once"

    def test_missing_block(self):
        """An unknown block leaves block_timestamp None"""
        chain = FakeChainService()
        annotation = resolve(make_transaction(value=1, block_hash=BLOCK_HASH), make_resolver(chain=chain))
        assert annotation.block_timestamp is None

    def test_no_block_hash(self):
        """No block hash, no block lookup"""
        chain = FakeChainService()
        resolve(make_transaction(value=1), make_resolver(chain=chain))
        assert chain.block_requests == []


class TestSubannotations:
    """Test sub-annotations built from receipt logs."""

    def test_only_known_asset_transfers_are_kept(self):
        """Test only Transfer logs on known assets become subannotations"""
        names = FakeNameService({BOB: "bob.eth"}, failing=[CAROL])
        indexing = FakeIndexingService([PUNKS, USDC, DAI])
        logs = (
            transfer_log(USDC.contract_address, ALICE, BOB, 2_500_000),
            transfer_log(UNKNOWN_CONTRACT, ALICE, BOB, 1),
            EVMLog(DAI.contract_address, ("0x" + "ab" * 32,), "0x"),
            transfer_log(DAI.contract_address, BOB, CAROL, 3 * 10 ** 18),
        )
        tx = make_transaction(to=UNKNOWN_CONTRACT, input="0xdeadbeef", logs=logs)

        annotation = resolve(tx, make_resolver(indexing=indexing, names=names))

        assert isinstance(annotation, ContractInteractionAnnotation)
        subs = annotation.subannotations
        assert len(subs) == 2, "2 of 4 logs are transfers of known assets"
        assert all(isinstance(sub, AssetTransferAnnotation) for sub in subs)
        assert subs[0].asset_amount.asset is USDC
        assert subs[0].asset_amount.localized_decimal_amount == "2.50"
        assert subs[0].recipient_name == "bob.eth"
        assert subs[1].asset_amount.asset is DAI
        assert same_evm_address(subs[1].sender_address, BOB)
        assert subs[1].recipient_name is None, "failed lookup only blanks that name"
        assert all(sub.timestamp == NOW for sub in subs)
        assert len(indexing.requests) == 1, "one asset snapshot per resolution"

    def test_recipients_resolved_once(self):
        """Repeated recipients are looked up once"""
        names = FakeNameService({BOB: "bob.eth"})
        logs = (
            transfer_log(USDC.contract_address, ALICE, BOB, 1),
            transfer_log(DAI.contract_address, ALICE, BOB, 1),
        )
        tx = make_transaction(to=UNKNOWN_CONTRACT, input="0xdeadbeef", logs=logs)

        annotation = resolve(tx, make_resolver(names=names))

        assert [sub.recipient_name for sub in annotation.subannotations] == ["bob.eth", "bob.eth"]
        assert sum(1 for call in names.calls if same_evm_address(call, BOB)) == 1

    def test_skipped_transfers_are_logged_with_log_index(self, caplog):
        """Verify Transfer logs on unknown contracts are logged with their position"""
        logs = (
            transfer_log(USDC.contract_address, ALICE, BOB, 1),
            transfer_log(UNKNOWN_CONTRACT, ALICE, BOB, 1),
        )
        tx = make_transaction(to=UNKNOWN_CONTRACT, input="0xdeadbeef", logs=logs)

        with caplog.at_level(logging.DEBUG, logger="enrichment_app.services.enrichment.resolver"):
            annotation = resolve(tx)

        assert len(annotation.subannotations) == 1
        skipped = [r.message for r in caplog.records if "Skipping Transfer" in r.message]
        assert len(skipped) == 1
        assert "log 1" in skipped[0], "the unknown contract's Transfer is the second log"

    def test_no_matching_logs_leaves_subannotations_unset(self):
        """Verify subannotations stay None when nothing matches"""
        tx = make_transaction(to=UNKNOWN_CONTRACT, input="0xdeadbeef", logs=(
            transfer_log(UNKNOWN_CONTRACT, ALICE, BOB, 1),
        ))
        annotation = resolve(tx)
        assert annotation.subannotations is None

    def test_empty_logs(self):
        """An empty receipt adds no subannotations"""
        annotation = resolve(make_transaction(value=1, logs=()))
        assert annotation.subannotations is None

    def test_to_dict_includes_subannotations(self):
        """Test subannotations are serialized"""
        tx = make_transaction(to=USDC.contract_address, input=encode_transfer(BOB, 1_000_000), logs=(
            transfer_log(USDC.contract_address, ALICE, BOB, 1_000_000),
        ))

        result = resolve(tx).to_dict()

        assert result["type"] == "asset-transfer"
        assert len(result["subannotations"]) == 1
        assert result["subannotations"][0]["asset_amount"]["amount"] == "1000000"
