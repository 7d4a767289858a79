"""
Enrichment Service

Coordinator deciding when to annotate application-level transactions and
signing requests for display. It listens to the chain service's transaction
channel, resolves an annotation for each transaction in its own task, and
republishes the result on its own typed channels:

- enriched_transaction                    EnrichedTransactionEvent
- enriched_transaction_signature_request  EnrichedTransactionSignatureRequest
- enriched_sign_typed_data_request        EnrichedSignTypedDataRequest

Signature and typed-data requests are request/response: callers invoke the
enrich_* methods directly and the result is also published.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional, Set
import logging

from ...config.settings import EnrichmentSettings
from ..events import EventChannel
from .collaborators import ChainService, IndexingService, NameService
from .names import NameResolutionBatcher
from .resolver import AnnotationResolver
from .typed_data import TypedDataAnnotator
from .types import (
    EnrichedEVMTransaction,
    EnrichedSignTypedDataRequest,
    EnrichedTransactionEvent,
    EnrichedTransactionSignatureRequest,
    EVMTransaction,
    Network,
    SignTypedDataRequest,
    TransactionEvent,
    TransactionRequest,
)

logger = logging.getLogger(__name__)


class ServiceState(Enum):
    """Lifecycle of the enrichment service"""
    UNINITIALIZED = "uninitialized"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"


class EnrichmentEvents:
    """Channels published by the enrichment service"""

    def __init__(self):
        self.enriched_transaction: EventChannel[EnrichedTransactionEvent] = EventChannel(
            "enrichedTransaction"
        )
        self.enriched_transaction_signature_request: EventChannel[EnrichedTransactionSignatureRequest] = (
            EventChannel("enrichedTransactionSignatureRequest")
        )
        self.enriched_sign_typed_data_request: EventChannel[EnrichedSignTypedDataRequest] = EventChannel(
            "enrichedSignTypedDataRequest"
        )


class EnrichmentService:
    """
    Coordinates the chain, indexing and name services to build annotations.

    Transaction resolutions run concurrently, capped at
    settings.max_concurrent_resolutions; a failure in one is logged and the
    transaction is republished without an annotation.
    """

    def __init__(
        self,
        chain_service: ChainService,
        indexing_service: IndexingService,
        name_service: NameService,
        settings: Optional[EnrichmentSettings] = None,
        resolver: Optional[AnnotationResolver] = None,
    ):
        self.chain_service = chain_service
        self.indexing_service = indexing_service
        self.name_service = name_service
        self.settings = settings or EnrichmentSettings()

        self.name_batcher = NameResolutionBatcher(name_service)
        self.resolver = resolver or AnnotationResolver(chain_service, indexing_service, self.name_batcher)
        self.typed_data_annotator = TypedDataAnnotator(indexing_service, self.name_batcher)

        self.events = EnrichmentEvents()
        self.state = ServiceState.UNINITIALIZED

        self._unsubscribe: Optional[Callable[[], None]] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._semaphore: Optional[asyncio.Semaphore] = None

        # Summary counters
        self.summary = {
            "received": 0,
            "enriched": 0,
            "failed": 0,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to chain transactions. Calling start() again is a no-op."""
        if self.state in (ServiceState.STARTING, ServiceState.RUNNING):
            logger.warning(f"EnrichmentService already {self.state.value}; ignoring start()")
            return

        self.state = ServiceState.STARTING
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrent_resolutions)
        self._unsubscribe = self.chain_service.transactions.subscribe(self._on_transaction)
        self.state = ServiceState.RUNNING
        logger.info(
            f"EnrichmentService running (max {self.settings.max_concurrent_resolutions} concurrent resolutions)"
        )

    async def stop(self) -> None:
        """Unsubscribe and let in-flight resolutions finish."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.wait_idle()
        self.state = ServiceState.STOPPED
        logger.info(f"EnrichmentService stopped: {self.summary}")

    async def wait_idle(self) -> None:
        """Wait for every in-flight transaction resolution to finish."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    # ------------------------------------------------------------------
    # Chain events
    # ------------------------------------------------------------------

    def _on_transaction(self, event: TransactionEvent) -> None:
        self.summary["received"] += 1
        task = asyncio.get_running_loop().create_task(self._enrich_and_publish(event))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _enrich_and_publish(self, event: TransactionEvent) -> None:
        transaction = event.transaction
        async with self._semaphore:
            try:
                enriched = await self.enrich_transaction(transaction)
                self.summary["enriched"] += 1
            except Exception:
                self.summary["failed"] += 1
                logger.exception(f"Failed to annotate transaction {transaction.hash}")
                enriched = EnrichedEVMTransaction(transaction=transaction, annotation=None)

        self.events.enriched_transaction.emit(
            EnrichedTransactionEvent(transaction=enriched, for_accounts=event.for_accounts)
        )

    # ------------------------------------------------------------------
    # Enrichment entry points
    # ------------------------------------------------------------------

    async def enrich_transaction(
        self,
        transaction: EVMTransaction,
        desired_decimals: Optional[int] = None,
    ) -> EnrichedEVMTransaction:
        """Annotate a chain transaction. Exceptions from the resolver propagate."""
        if desired_decimals is None:
            desired_decimals = self.settings.desired_decimals
        annotation = await self.resolver.resolve(transaction, transaction.network, desired_decimals)
        return EnrichedEVMTransaction(transaction=transaction, annotation=annotation)

    async def enrich_transaction_signature(
        self,
        network: Network,
        request: TransactionRequest,
        desired_decimals: Optional[int] = None,
    ) -> EnrichedTransactionSignatureRequest:
        """Annotate a transaction awaiting signature and publish the result."""
        if desired_decimals is None:
            desired_decimals = self.settings.desired_decimals
        annotation = await self.resolver.resolve(request, network, desired_decimals)
        enriched = EnrichedTransactionSignatureRequest(request=request, annotation=annotation)
        self.events.enriched_transaction_signature_request.emit(enriched)
        return enriched

    async def enrich_sign_typed_data_request(
        self,
        request: SignTypedDataRequest,
        desired_decimals: Optional[int] = None,
    ) -> EnrichedSignTypedDataRequest:
        """Annotate an EIP-712 signing request and publish the result."""
        if desired_decimals is None:
            desired_decimals = self.settings.desired_decimals
        annotation = await self.typed_data_annotator.annotate(request, desired_decimals)
        enriched = EnrichedSignTypedDataRequest(request=request, annotation=annotation)
        self.events.enriched_sign_typed_data_request.emit(enriched)
        return enriched
