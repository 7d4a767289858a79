"""
ERC-20 Call Data and Log Decoder

Handles the token operations the enrichment service annotates:
- transfer / transferFrom / approve call data (function selector + ABI args)
- Transfer event logs from transaction receipts

Neither decoder raises on unknown or malformed input; unknown selectors and
bad encodings decode to "no match" (None / skipped log).
"""

from functools import lru_cache
from typing import Iterable, List, Optional
import logging

from eth_abi import decode as abi_decode
from eth_utils import to_checksum_address
from web3 import Web3

from .base import ERC20Call, ERC20TransferLog, hex_to_bytes, to_hex_str
from .abis import ERC20_ABI
from ...config.enrichment_config import ERC20_SELECTORS, TRANSFER_TOPIC

logger = logging.getLogger(__name__)

WORD_SIZE = 32
SELECTOR_HEX_LENGTH = 10  # "0x" + 4 bytes


@lru_cache(maxsize=1)
def _erc20_contract():
    """Address-less ERC-20 contract used only for ABI decoding (no provider calls)"""
    return Web3().eth.contract(abi=ERC20_ABI)


def parse_erc20_tx(input_data: Optional[str]) -> Optional[ERC20Call]:
    """
    Decode transaction input as one of the known ERC-20 calls.

    Args:
        input_data: Hex-encoded transaction input (selector + ABI-encoded args)

    Returns:
        ERC20Call(name, args) for transfer/transferFrom/approve, None otherwise
    """
    if not input_data:
        return None

    try:
        input_hex = to_hex_str(input_data)
        selector = input_hex[:SELECTOR_HEX_LENGTH]
        if selector not in ERC20_SELECTORS:
            return None

        func, params = _erc20_contract().decode_function_input(input_hex)
        name = func.fn_name
        if name != ERC20_SELECTORS[selector]:
            return None

        return ERC20Call(name=name, args=dict(params))
    except Exception as e:
        logger.debug(f"Could not decode ERC-20 call data {str(input_data)[:SELECTOR_HEX_LENGTH]}...: {e}")
        return None


def _decode_transfer_log(log, log_index: int) -> Optional[ERC20TransferLog]:
    topics = [hex_to_bytes(topic) for topic in log.topics]

    # ERC-721 Transfer shares topic0 but indexes the token id as a 4th topic
    if len(topics) != 3 or any(len(topic) != WORD_SIZE for topic in topics):
        return None
    if to_hex_str(topics[0]) != TRANSFER_TOPIC:
        return None

    data = hex_to_bytes(log.data or "0x")
    if len(data) != WORD_SIZE:
        return None

    (amount,) = abi_decode(["uint256"], data)

    return ERC20TransferLog(
        contract_address=to_checksum_address(log.contract_address),
        sender_address=to_checksum_address(to_hex_str(topics[1][-20:])),
        recipient_address=to_checksum_address(to_hex_str(topics[2][-20:])),
        amount=amount,
        log_index=log_index,
    )


def parse_logs_for_erc20_transfers(logs: Iterable) -> List[ERC20TransferLog]:
    """
    Extract ERC-20 Transfer events from receipt logs.

    Logs with another topic0, a different topic count or a malformed data
    word are skipped.

    Args:
        logs: EVMLog entries (contract_address, topics, data)

    Returns:
        Decoded transfers in log order
    """
    transfers = []
    for index, log in enumerate(logs or ()):
        try:
            decoded = _decode_transfer_log(log, index)
        except Exception as e:
            logger.debug(f"Skipping undecodable log {index} from {getattr(log, 'contract_address', '?')}: {e}")
            continue
        if decoded is not None:
            transfers.append(decoded)

    logger.debug(f"Decoded {len(transfers)} ERC-20 Transfer log(s)")
    return transfers
