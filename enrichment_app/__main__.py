"""
Annotate transactions from the command line.

Usage:
    python -m enrichment_app 0xHASH [0xHASH ...]        # Ethereum, settings from env
    python -m enrichment_app 0xHASH --chain-id 137      # Another known network
    python -m enrichment_app 0xHASH --account 0xWALLET  # Account the tx is shown to
    python -m enrichment_app 0xHASH --decimals 4        # Display precision
    python -m enrichment_app 0xHASH --verbose           # Debug log file

Needs ETH_RPC_URL (or a .env file). Prints one JSON object per transaction.
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Iterable, List

from .app import create_enrichment_service
from .config.settings import EnrichmentSettings
from .services.enrichment.networks import get_network
from .services.enrichment.service import EnrichmentService
from .services.enrichment.types import EnrichedTransactionEvent, Network

logger = logging.getLogger(__name__)


async def annotate_hashes(
    service: EnrichmentService,
    network: Network,
    tx_hashes: Iterable[str],
    for_accounts: Iterable[str] = (),
) -> List[EnrichedTransactionEvent]:
    """Publish each hash through the chain service and collect what the service republishes"""
    results: List[EnrichedTransactionEvent] = []
    unsubscribe = service.events.enriched_transaction.subscribe(results.append)
    await service.start()
    try:
        for tx_hash in tx_hashes:
            transaction = await service.chain_service.publish_transaction(network, tx_hash, for_accounts)
            if transaction is None:
                logger.warning(f"Transaction {tx_hash} not found on {network.name}")
        await service.wait_idle()
    finally:
        await service.stop()
        unsubscribe()
    return results


def event_to_dict(event: EnrichedTransactionEvent) -> dict:
    enriched = event.transaction
    return {
        'hash': enriched.transaction.hash,
        'network': enriched.transaction.network.name,
        'for_accounts': list(event.for_accounts),
        'annotation': enriched.annotation.to_dict() if enriched.annotation else None,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Annotate EVM transactions for display')
    parser.add_argument('tx_hashes', nargs='+', metavar='TX_HASH', help='Transaction hash(es) to annotate')
    parser.add_argument('--chain-id', default=None, help='Chain id of the network (default: Ethereum)')
    parser.add_argument('--account', action='append', default=[], help='Account the transaction is shown to')
    parser.add_argument('--decimals', type=int, help='Display precision (default: ENRICHMENT_DESIRED_DECIMALS)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    try:
        settings = EnrichmentSettings.from_env()
        overrides = {}
        if args.decimals is not None:
            overrides['desired_decimals'] = args.decimals
        if args.verbose:
            overrides['debug'] = True
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
        service = create_enrichment_service(settings)
    except ValueError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2

    network = get_network(args.chain_id)
    events = asyncio.run(annotate_hashes(service, network, args.tx_hashes, args.account))
    for event in events:
        print(json.dumps(event_to_dict(event), indent=2, default=str))

    return 0 if len(events) == len(args.tx_hashes) else 1


if __name__ == '__main__':
    sys.exit(main())
