"""
Transaction enrichment: annotates EVM transactions and signing requests
with human-readable descriptions for display.
"""

__version__ = "0.1.0"
