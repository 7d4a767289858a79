import sys
import os
import logging

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from factories import DAI, PUNKS, USDC, FakeChainService, FakeIndexingService, FakeNameService
from enrichment_app.logging_config import SERVICES_LOGGER


@pytest.fixture
def chain_service():
    return FakeChainService()


@pytest.fixture
def indexing_service():
    return FakeIndexingService([PUNKS, USDC, DAI])


@pytest.fixture
def name_service():
    return FakeNameService()


@pytest.fixture
def restore_logging():
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    services = logging.getLogger(SERVICES_LOGGER)
    saved = (list(root.handlers), root.level, list(services.handlers), services.level)
    yield
    for handler in services.handlers:
        if handler not in saved[2]:
            handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    services.handlers[:] = saved[2]
    services.setLevel(saved[3])
