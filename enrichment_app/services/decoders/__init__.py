"""
ERC-20 transaction decoders used by the enrichment service.

- parse_erc20_tx: transfer / transferFrom / approve call data
- parse_logs_for_erc20_transfers: Transfer events from receipt logs

Both return "no match" (None / nothing) for unknown or malformed input.
"""

from .base import (
    # Dataclasses
    ERC20Call,
    ERC20TransferLog,
    # Helpers
    normalize_evm_address,
    same_evm_address,
    to_hex_str,
    format_address,
)

from .erc20 import parse_erc20_tx, parse_logs_for_erc20_transfers

__all__ = [
    # Dataclasses
    'ERC20Call',
    'ERC20TransferLog',
    # Decoders
    'parse_erc20_tx',
    'parse_logs_for_erc20_transfers',
    # Helpers
    'normalize_evm_address',
    'same_evm_address',
    'to_hex_str',
    'format_address',
]
