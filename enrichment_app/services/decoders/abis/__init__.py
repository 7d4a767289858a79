"""
Embedded ABIs for the transaction decoders.
"""

from .common import ERC20_ABI

__all__ = [
    'ERC20_ABI',
]
