"""
Base data structures and helpers for call-data and log decoders.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import logging

from hexbytes import HexBytes

logger = logging.getLogger(__name__)

ADDRESS_HEX_LENGTH = 40
HEX_DIGITS = frozenset("0123456789abcdef")


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class ERC20Call:
    """Decoded ERC-20 function call: transfer, transferFrom or approve"""
    name: str
    args: Dict[str, Any]

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'args': {k: str(v) if isinstance(v, int) else v for k, v in self.args.items()},
        }


@dataclass(frozen=True)
class ERC20TransferLog:
    """Decoded ERC-20 Transfer event"""
    contract_address: str
    sender_address: str
    recipient_address: str
    amount: int
    log_index: int = -1

    def to_dict(self) -> dict:
        return {
            'contract_address': self.contract_address,
            'sender_address': self.sender_address,
            'recipient_address': self.recipient_address,
            'amount': str(self.amount),
            'log_index': self.log_index,
        }


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def to_hex_str(value: Union[str, bytes, None]) -> str:
    """Render bytes or hex strings as a lowercase 0x-prefixed string"""
    if value is None:
        return "0x"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    value = str(value)
    if value.startswith(('0x', '0X')):
        return "0x" + value[2:].lower()
    return "0x" + value.lower()


def normalize_evm_address(address: Union[str, bytes]) -> str:
    """
    Normalize an address for comparison: lowercase, 0x-prefixed, exactly
    20 bytes. Left-padded 32-byte words (log topics) are truncated to their
    low 20 bytes; short forms are zero-padded.
    """
    hex_str = to_hex_str(address)[2:]
    if not hex_str or any(c not in HEX_DIGITS for c in hex_str):
        raise ValueError(f"Not a hex address: {address!r}")
    if len(hex_str) > ADDRESS_HEX_LENGTH:
        hex_str = hex_str[-ADDRESS_HEX_LENGTH:]
    return "0x" + hex_str.zfill(ADDRESS_HEX_LENGTH)


def same_evm_address(a: Optional[str], b: Optional[str]) -> bool:
    """Case- and length-insensitive address equality; missing addresses never match"""
    if not a or not b:
        return False
    try:
        return normalize_evm_address(a) == normalize_evm_address(b)
    except (TypeError, ValueError):
        return False


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """Convert hex string or bytes to raw bytes"""
    return bytes(HexBytes(value))


def format_address(address: str, length: int = 8) -> str:
    """Format address for display"""
    if not address:
        return ""
    return f"{address[:length]}...{address[-4:]}"
