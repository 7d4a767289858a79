"""
Application wiring.

Builds a ready-to-start EnrichmentService from EnrichmentSettings: the Web3
chain adapter on settings.rpc_url, the static indexing service seeded with
the verified tokens, and an address-book name service. Logging is set up
here, once, at startup.
"""

from typing import Optional
import logging

from .config.settings import EnrichmentSettings
from .logging_config import setup_logging
from .services.chain import Web3ChainService
from .services.enrichment.collaborators import ChainService, IndexingService, NameService
from .services.enrichment.service import EnrichmentService
from .services.indexing import StaticIndexingService
from .services.names import AddressBookNameService

logger = logging.getLogger(__name__)


def create_enrichment_service(
    settings: Optional[EnrichmentSettings] = None,
    chain_service: Optional[ChainService] = None,
    indexing_service: Optional[IndexingService] = None,
    name_service: Optional[NameService] = None,
    configure_logging: bool = True,
) -> EnrichmentService:
    """
    Create an EnrichmentService with the bundled collaborators.

    Args:
        settings: Defaults to EnrichmentSettings.from_env()
        chain_service: Replaces the Web3 adapter (then rpc_url is not needed)
        indexing_service: Replaces StaticIndexingService
        name_service: Replaces the address book from settings.address_book_path
        configure_logging: Call setup_logging(debug=settings.debug)

    Returns:
        The service, not yet started

    Raises:
        ValueError: No chain_service given and settings.rpc_url is unset
    """
    if settings is None:
        settings = EnrichmentSettings.from_env()

    if configure_logging:
        setup_logging(debug=settings.debug)

    if chain_service is None:
        if not settings.rpc_url:
            raise ValueError("ETH_RPC_URL is not set; cannot create the Web3 chain service")
        chain_service = Web3ChainService(settings.rpc_url)

    if indexing_service is None:
        indexing_service = StaticIndexingService()

    if name_service is None:
        if settings.address_book_path:
            name_service = AddressBookNameService.from_json(settings.address_book_path)
        else:
            name_service = AddressBookNameService()

    logger.info(
        f"Enrichment service wired: chain={type(chain_service).__name__}, "
        f"indexing={type(indexing_service).__name__}, names={type(name_service).__name__}"
    )
    return EnrichmentService(chain_service, indexing_service, name_service, settings=settings)
